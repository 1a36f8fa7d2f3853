"""
Traceability API — Product Initialization Route
================================================

What:  POST /api/product/init — registers a product and returns its ProductID.
Who:   Called by the producer before any stage is logged; the returned ID is
       printed as the product's QR code.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from traceability.database import get_db_session
from traceability.schemas.trace import (
    ErrorResponse,
    ProductInitRequest,
    ProductInitResponse,
)
from traceability.services.trace_service import trace_service

router = APIRouter(prefix="/api/product", tags=["Products"])


@router.post(
    "/init",
    status_code=201,
    response_model=ProductInitResponse,
    responses={
        201: {"description": "Product created", "model": ProductInitResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Initialize a product",
    description=(
        "Creates a Product row with a server-generated ProductID of the form "
        "PID-<epoch-millis>-<0..999>. ProductType and BatchID are optional."
    ),
)
async def init_product(
    body: Optional[ProductInitRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> ProductInitResponse:
    """
    Register a new product.

    Why the body is optional:
        Init performs no presence checks. A request without a body still
        creates a product, with null ProductType and BatchID.
    """
    return await trace_service.init_product(db=db, body=body)
