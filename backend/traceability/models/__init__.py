from traceability.models.logs import DistributorLog, FarmerLog, RetailerLog
from traceability.models.product import Product

__all__ = ["Product", "FarmerLog", "DistributorLog", "RetailerLog"]
