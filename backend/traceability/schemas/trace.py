"""
Traceability API — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the JSON contract of the API.
Why:   Type coercion of incoming values (ISO dates → date, numbers → Decimal)
       so they bind cleanly to the database driver, plus OpenAPI docs.
How:   Wire names (ProductID, Location_Lat, farmerLat, ...) are field aliases;
       Python code uses snake_case attribute names.

Presence checks:
    Every request field is Optional on purpose. A missing required field is
    a business rule enforced by TraceService (400 with `{"error": ...}`),
    not a schema failure (which FastAPI would answer with 422).
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _WireModel(BaseModel):
    # Numbers sent for text fields are stored as their string form
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any, info: ValidationInfo) -> Any:
        """A blank date or number reads as absent; text fields keep "" as sent."""
        if isinstance(v, str) and not v.strip():
            if cls.model_fields[info.field_name].annotation != Optional[str]:
                return None
        return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class ProductInitRequest(_WireModel):
    """Body of POST /api/product/init. Neither field is required."""
    product_type: Optional[str] = Field(default=None, alias="ProductType")
    batch_id: Optional[str] = Field(default=None, alias="BatchID")


class FarmerLogRequest(_WireModel):
    """
    Body of POST /api/log/farmer.

    Required (checked by the service): ProductID, DateHarvested, Location_Lat.
    """
    product_id: Optional[str] = Field(default=None, alias="ProductID")
    date_harvested: Optional[date] = Field(default=None, alias="DateHarvested")
    location_lat: Optional[Decimal] = Field(default=None, alias="Location_Lat")
    location_lon: Optional[Decimal] = Field(default=None, alias="Location_Lon")
    initial_cost: Optional[Decimal] = Field(default=None, alias="InitialCost")


class DistributorLogRequest(_WireModel):
    """Required: ProductID, DateShipped, Location_Address."""
    product_id: Optional[str] = Field(default=None, alias="ProductID")
    location_address: Optional[str] = Field(default=None, alias="Location_Address")
    date_shipped: Optional[date] = Field(default=None, alias="DateShipped")
    distribution_cost: Optional[Decimal] = Field(default=None, alias="DistributionCost")


class RetailerLogRequest(_WireModel):
    """Required: ProductID, DateSold, Store_Name."""
    product_id: Optional[str] = Field(default=None, alias="ProductID")
    store_name: Optional[str] = Field(default=None, alias="Store_Name")
    date_sold: Optional[date] = Field(default=None, alias="DateSold")
    final_price: Optional[Decimal] = Field(default=None, alias="FinalPrice")


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class Journey(_WireModel):
    """
    What:  One row of the four-table join.
    Why these aliases: They are the column labels of the track query and the
           keys existing clients read (farmerLat, distributorLocation, ...).

    All log fields are null when the corresponding stage was never logged.
    """
    product_id: str = Field(alias="ProductID")
    product_type: Optional[str] = Field(default=None, alias="ProductType")
    batch_id: Optional[str] = Field(default=None, alias="BatchID")

    date_harvested: Optional[date] = Field(default=None, alias="DateHarvested")
    farmer_lat: Optional[float] = Field(default=None, alias="farmerLat")
    farmer_lon: Optional[float] = Field(default=None, alias="farmerLon")
    initial_cost: Optional[float] = Field(default=None, alias="InitialCost")

    date_shipped: Optional[date] = Field(default=None, alias="DateShipped")
    distributor_location: Optional[str] = Field(default=None, alias="distributorLocation")
    distribution_cost: Optional[float] = Field(default=None, alias="DistributionCost")

    date_sold: Optional[date] = Field(default=None, alias="DateSold")
    store_name: Optional[str] = Field(default=None, alias="Store_Name")
    final_price: Optional[float] = Field(default=None, alias="FinalPrice")


class JourneyResponse(BaseModel):
    """Returned by GET /api/track."""
    message: str = Field(default="Supply Chain Journey Retrieved")
    journey: Journey


class ProductInitResponse(_WireModel):
    """Returned by POST /api/product/init with HTTP 201."""
    message: str = Field(
        default="Product initialized successfully. Use this ID for logs and QR code."
    )
    product_id: str = Field(alias="ProductID")


class MessageResponse(BaseModel):
    """Returned by the three log endpoints with HTTP 201."""
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error envelope shared by every 4xx/5xx response.

    Example:
        {"error": "Missing required farmer fields."}
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
