"""Availability endpoints: recommendations, slot checks, daily counts and hours."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from apps.api.deps import get_availability_service
from domain.exceptions import InvalidRequestError, ReservationLookupError
from domain.models import (
    AvailabilityReport,
    BusinessHoursReport,
    DailySummary,
    SlotCheckResult,
)
from services.availability_service import AvailabilityService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability"])


def _to_http_error(error: Exception) -> HTTPException:
    """Map service exceptions onto HTTP responses."""
    if isinstance(error, InvalidRequestError):
        return HTTPException(status_code=400, detail={"error": str(error), "errors": error.errors})
    if isinstance(error, ReservationLookupError):
        return HTTPException(status_code=503, detail={"error": str(error)})
    return HTTPException(status_code=500, detail={"error": "Unexpected error"})


@router.get("/recommendations", response_model=AvailabilityReport)
async def get_recommendations(
    date: str = Query(..., description="Date to check (YYYY-MM-DD)"),
    party_size: str = Query("2", alias="partySize", description="Number of guests"),
    preferred_time: Optional[str] = Query(None, alias="preferredTime", description="Requested time (HH:MM)"),
    exclude_id: Optional[str] = Query(None, alias="excludeId", description="Reservation being rescheduled"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    Slot availability for a date and party size with up to three recommendations.

    Args:
        date: Date to check
        party_size: Number of guests
        preferred_time: Time the guest originally chose
        exclude_id: Reservation id to ignore when rescheduling
        service: Availability service

    Returns:
        AvailabilityReport: Slot statuses, recommendations and resolved hours
    """
    try:
        return await service.recommend(date, party_size, preferred_time, exclude_id)
    except (InvalidRequestError, ReservationLookupError) as e:
        raise _to_http_error(e) from e


@router.get("/tables", response_model=SlotCheckResult)
async def check_tables(
    date: str = Query(..., description="Date to check (YYYY-MM-DD)"),
    time: str = Query(..., description="Start time (HH:MM)"),
    party_size: str = Query("1", alias="partySize", description="Number of guests"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Check one exact date, time and party size and suggest a table."""
    try:
        return await service.check_slot(date, time, party_size)
    except (InvalidRequestError, ReservationLookupError) as e:
        raise _to_http_error(e) from e


@router.get("/availability", response_model=DailySummary)
async def get_daily_summary(
    date: str = Query(..., description="Date to summarize (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Count active reservations of a date per start time."""
    try:
        return await service.daily_summary(date)
    except (InvalidRequestError, ReservationLookupError) as e:
        raise _to_http_error(e) from e


@router.get("/business-hours", response_model=BusinessHoursReport)
async def get_business_hours(
    date: str = Query(..., description="Date to resolve hours for (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Resolved business hours for a date, with the sources that supplied them."""
    try:
        return await service.business_hours_report(date)
    except InvalidRequestError as e:
        raise _to_http_error(e) from e
