"""
Traceability API — Supply-Chain Log Routes
===========================================

What:  POST /api/log/farmer, /api/log/distributor, /api/log/retailer.
Why:   Each actor in the chain appends its own stage to a product's journey.
How:   Bodies are parsed into Optional-only models; TraceService performs
       the presence checks and the insert.

Required fields per role:
    farmer:       ProductID, DateHarvested, Location_Lat
    distributor:  ProductID, DateShipped, Location_Address
    retailer:     ProductID, DateSold, Store_Name

Not checked: that ProductID exists, or that the stage was not logged before.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from traceability.database import get_db_session
from traceability.schemas.trace import (
    DistributorLogRequest,
    ErrorResponse,
    FarmerLogRequest,
    MessageResponse,
    RetailerLogRequest,
)
from traceability.services.trace_service import trace_service

router = APIRouter(prefix="/api/log", tags=["Logs"])

_LOG_RESPONSES = {
    400: {"description": "Missing required fields", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/farmer",
    status_code=201,
    response_model=MessageResponse,
    responses=_LOG_RESPONSES,
    summary="Record a harvest",
)
async def log_farmer(
    body: Optional[FarmerLogRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await trace_service.log_farmer(db=db, body=body)


@router.post(
    "/distributor",
    status_code=201,
    response_model=MessageResponse,
    responses=_LOG_RESPONSES,
    summary="Record a shipment",
)
async def log_distributor(
    body: Optional[DistributorLogRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await trace_service.log_distributor(db=db, body=body)


@router.post(
    "/retailer",
    status_code=201,
    response_model=MessageResponse,
    responses=_LOG_RESPONSES,
    summary="Record a sale",
)
async def log_retailer(
    body: Optional[RetailerLogRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await trace_service.log_retailer(db=db, body=body)
