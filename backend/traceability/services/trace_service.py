"""
Traceability API — Trace Service (Business Logic)
==================================================

What:  The five operations of the API: get a journey, initialize a product,
       and append a farmer / distributor / retailer log.
Why:   Keeps presence checks, ID generation and error translation out of the
       route handlers, so they can be tested with a mock session.
How:   Each method receives the request's AsyncSession, runs exactly one
       statement, commits writes, and translates failures:
           missing required field → ValidationError (400)
           no product row         → NotFoundError   (404)
           anything from the DB   → InternalError   (500)

Known data-model gap:
    Log tables are not unique per ProductID. Logging a stage twice makes the
    track join return several rows. get_journey orders by log insertion id,
    returns the first row and logs a warning with the row count.
"""

import logging
import random
import time
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from traceability.exceptions import (
    InternalError,
    NotFoundError,
    ValidationError,
)
from traceability.models import DistributorLog, FarmerLog, Product, RetailerLog
from traceability.schemas.trace import (
    DistributorLogRequest,
    FarmerLogRequest,
    Journey,
    JourneyResponse,
    MessageResponse,
    ProductInitRequest,
    ProductInitResponse,
    RetailerLogRequest,
)

logger = logging.getLogger(__name__)


def generate_product_id() -> str:
    """
    Builds `PID-<epoch-millis>-<0..999>`.

    Not globally unique: two calls in the same millisecond that draw the same
    random suffix collide, and the products primary key rejects the second.
    """
    return f"PID-{int(time.time() * 1000)}-{random.randrange(1000)}"


def _is_missing(value: Any) -> bool:
    # Zero is a valid latitude or price; only absent and blank values count
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _missing_fields(body: Any, fields: Iterable[str]) -> List[str]:
    """Returns the wire names of required fields that are absent or blank."""
    missing = []
    for attr in fields:
        if _is_missing(getattr(body, attr, None)):
            missing.append(type(body).model_fields[attr].alias or attr)
    return missing


def _journey_query(product_id: str):
    """
    The fixed four-table join. Column labels are the journey keys.

    LEFT JOINs keep the product row when a stage was never logged, so the
    result is empty only when the product itself does not exist.
    """
    return (
        select(
            Product.product_id.label("ProductID"),
            Product.product_type.label("ProductType"),
            Product.batch_id.label("BatchID"),
            FarmerLog.date_harvested.label("DateHarvested"),
            FarmerLog.location_lat.label("farmerLat"),
            FarmerLog.location_lon.label("farmerLon"),
            FarmerLog.initial_cost.label("InitialCost"),
            DistributorLog.date_shipped.label("DateShipped"),
            DistributorLog.location_address.label("distributorLocation"),
            DistributorLog.distribution_cost.label("DistributionCost"),
            RetailerLog.date_sold.label("DateSold"),
            RetailerLog.store_name.label("Store_Name"),
            RetailerLog.final_price.label("FinalPrice"),
        )
        .select_from(Product)
        .outerjoin(FarmerLog, FarmerLog.product_id == Product.product_id)
        .outerjoin(DistributorLog, DistributorLog.product_id == Product.product_id)
        .outerjoin(RetailerLog, RetailerLog.product_id == Product.product_id)
        .where(Product.product_id == product_id)
        .order_by(FarmerLog.id, DistributorLog.id, RetailerLog.id)
    )


class TraceService:
    """
    Business logic layer for the supply-chain journey.

    Stateless: the session is passed to every call, so one instance serves
    all concurrent requests.
    """

    async def get_journey(self, db: AsyncSession, product_id: Optional[str]) -> JourneyResponse:
        """
        Retrieve the combined journey of one product.

        Args:
            db: Async database session
            product_id: Value of the `id` query parameter (may be None)

        Returns:
            JourneyResponse with the first joined row

        Raises:
            ValidationError: id missing or blank (→ 400)
            NotFoundError: no product with this id (→ 404)
            InternalError: query execution failed (→ 500)
        """
        if _is_missing(product_id):
            raise ValidationError(message="Product ID is required.", missing=["id"])

        try:
            result = await db.execute(_journey_query(product_id))
            rows: Sequence[Any] = result.mappings().all()
        except Exception as e:
            logger.error("Database query error for %s: %s", product_id, str(e), exc_info=True)
            raise InternalError(
                message="Internal Server Error during data retrieval.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            )

        if not rows:
            raise NotFoundError(message="Product journey not found.", resource_id=product_id)

        if len(rows) > 1:
            logger.warning(
                "Journey for %s fans out to %d rows (duplicate log entries); "
                "returning the earliest-recorded combination",
                product_id,
                len(rows),
            )

        return JourneyResponse(journey=Journey.model_validate(dict(rows[0])))

    async def init_product(
        self, db: AsyncSession, body: Optional[ProductInitRequest]
    ) -> ProductInitResponse:
        """
        Register a new product and hand back its generated ProductID.

        ProductType and BatchID are stored as given, including None.

        Raises:
            InternalError: insert failed, including an ID collision (→ 500)
        """
        body = body or ProductInitRequest()
        product_id = generate_product_id()

        try:
            db.add(
                Product(
                    product_id=product_id,
                    product_type=body.product_type,
                    batch_id=body.batch_id,
                )
            )
            await db.commit()
        except Exception as e:
            logger.error("Error initializing product %s: %s", product_id, str(e), exc_info=True)
            raise InternalError(
                message="Failed to initialize product.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            )

        logger.info("Product initialized: %s (type=%s, batch=%s)",
                    product_id, body.product_type, body.batch_id)
        return ProductInitResponse(product_id=product_id)

    async def log_farmer(
        self, db: AsyncSession, body: Optional[FarmerLogRequest]
    ) -> MessageResponse:
        body = body or FarmerLogRequest()
        self._require(body, ("product_id", "date_harvested", "location_lat"), "farmer")

        row = FarmerLog(
            product_id=body.product_id,
            date_harvested=body.date_harvested,
            location_lat=body.location_lat,
            location_lon=body.location_lon,
            initial_cost=body.initial_cost,
        )
        await self._insert(db, row, "farmer", body.product_id)
        return MessageResponse(message="Farmer log recorded successfully.")

    async def log_distributor(
        self, db: AsyncSession, body: Optional[DistributorLogRequest]
    ) -> MessageResponse:
        body = body or DistributorLogRequest()
        self._require(body, ("product_id", "date_shipped", "location_address"), "distributor")

        row = DistributorLog(
            product_id=body.product_id,
            location_address=body.location_address,
            date_shipped=body.date_shipped,
            distribution_cost=body.distribution_cost,
        )
        await self._insert(db, row, "distributor", body.product_id)
        return MessageResponse(message="Distributor log recorded successfully.")

    async def log_retailer(
        self, db: AsyncSession, body: Optional[RetailerLogRequest]
    ) -> MessageResponse:
        body = body or RetailerLogRequest()
        self._require(body, ("product_id", "date_sold", "store_name"), "retailer")

        row = RetailerLog(
            product_id=body.product_id,
            store_name=body.store_name,
            date_sold=body.date_sold,
            final_price=body.final_price,
        )
        await self._insert(db, row, "retailer", body.product_id)
        return MessageResponse(message="Retailer log recorded successfully.")

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _require(body: Any, fields: Sequence[str], role: str) -> None:
        missing = _missing_fields(body, fields)
        if missing:
            raise ValidationError(message=f"Missing required {role} fields.", missing=missing)

    @staticmethod
    async def _insert(db: AsyncSession, row: Any, role: str, product_id: str) -> None:
        """
        Single-row INSERT + commit.

        ProductID is not checked against `products`; orphan logs are stored.
        """
        try:
            db.add(row)
            await db.commit()
        except Exception as e:
            logger.error("Error logging %s data for %s: %s", role, product_id, str(e), exc_info=True)
            raise InternalError(
                message=f"Failed to record {role} log.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            )

        logger.info("%s log recorded for %s", role.capitalize(), product_id)


# ── Singleton Instance ────────────────────────────────────────────────────
trace_service = TraceService()
