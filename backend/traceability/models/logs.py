"""
Traceability API — Supply-Chain Log Models
===========================================

What:  ORM models for the three per-role log tables.
Why:   Each role (farmer, distributor, retailer) records one stage of the
       journey for a ProductID.

Table Design:
    - id: Surrogate integer key in insertion order. The track query orders by
      it so the earliest log of each role is the one reported.
    - productid: Plain indexed column, NOT a foreign key. Logs for a product
      that was never initialized are accepted; they never surface because
      the track query starts from `products`.
    - No uniqueness on productid: logging a stage twice stores two rows and
      the join fans out. TraceService logs a warning when that happens.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from traceability.database import Base


class FarmerLog(Base):
    """Harvest record: when and where the product was harvested, at what cost."""

    __tablename__ = "farmerlog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column("productid", String(64), nullable=False, index=True)
    date_harvested: Mapped[date] = mapped_column("dateharvested", Date, nullable=False)
    location_lat: Mapped[Decimal] = mapped_column("location_lat", Numeric(9, 6), nullable=False)
    location_lon: Mapped[Optional[Decimal]] = mapped_column("location_lon", Numeric(9, 6), nullable=True)
    initial_cost: Mapped[Optional[Decimal]] = mapped_column("initialcost", Numeric(12, 2), nullable=True)

    def __repr__(self) -> str:
        return f"<FarmerLog(id={self.id}, product_id='{self.product_id}')>"


class DistributorLog(Base):
    """Shipment record: where the product was shipped from/to and the cost."""

    __tablename__ = "distributorlog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column("productid", String(64), nullable=False, index=True)
    location_address: Mapped[str] = mapped_column("location_address", String(500), nullable=False)
    date_shipped: Mapped[date] = mapped_column("dateshipped", Date, nullable=False)
    distribution_cost: Mapped[Optional[Decimal]] = mapped_column(
        "distributioncost", Numeric(12, 2), nullable=True
    )

    def __repr__(self) -> str:
        return f"<DistributorLog(id={self.id}, product_id='{self.product_id}')>"


class RetailerLog(Base):
    """Sale record: which store sold the product, when, and for how much."""

    __tablename__ = "retailerlog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column("productid", String(64), nullable=False, index=True)
    store_name: Mapped[str] = mapped_column("store_name", String(255), nullable=False)
    date_sold: Mapped[date] = mapped_column("datesold", Date, nullable=False)
    final_price: Mapped[Optional[Decimal]] = mapped_column("finalprice", Numeric(12, 2), nullable=True)

    def __repr__(self) -> str:
        return f"<RetailerLog(id={self.id}, product_id='{self.product_id}')>"
