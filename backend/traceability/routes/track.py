"""
Traceability API — Track Route Handler
=======================================

What:  GET /api/track?id=<ProductID> — the customer-facing lookup.
Who:   Called when a consumer scans the product's QR code.
How:   Reads the `id` query parameter and delegates to TraceService.

Error responses (handled by global exception handlers):
    HTTP 400: id missing (ValidationError)
    HTTP 404: product unknown (NotFoundError)
    HTTP 500: database failure (InternalError)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from traceability.database import get_db_session
from traceability.schemas.trace import ErrorResponse, JourneyResponse
from traceability.services.trace_service import trace_service

router = APIRouter(prefix="/api", tags=["Track"])


@router.get(
    "/track",
    response_model=JourneyResponse,
    responses={
        400: {"description": "Product ID missing", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Retrieve a product's supply-chain journey",
    description=(
        "Joins the product with its farmer, distributor and retailer logs. "
        "Stages that were never logged come back as null fields."
    ),
)
async def track_product(
    product_id: Optional[str] = Query(
        default=None,
        alias="id",
        description="ProductID returned by POST /api/product/init",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> JourneyResponse:
    return await trace_service.get_journey(db=db, product_id=product_id)
