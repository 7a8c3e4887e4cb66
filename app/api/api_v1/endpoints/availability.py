import asyncio
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Dict, Any, Optional, Tuple
from calendar import monthrange
from datetime import date as CalendarDate, datetime
from app.core.auth import get_current_provider
from app.core.config import settings
from app.schemas.availability import (
    AvailabilityCheckResponse, AvailabilityDeclaration, AvailableDatesResponse, BookedDatesCache
)
from app.schemas.provider import Provider, ProviderSource
from app.services.availability_resolver import available_dates_in_range, is_available_on, to_iso_date
from app.services.availability_service import (
    apply_recurring_patterns, get_availability, get_availability_declaration, update_availability
)
from app.services.booking_service import get_booked_dates_cache
from app.services.provider_service import get_provider

router = APIRouter()
logger = logging.getLogger(__name__)

async def _get_provider_or_404(provider_id: str, source: ProviderSource) -> Provider:
    provider = await get_provider(provider_id, source)
    if not provider:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service provider not found"
        )
    return provider

def _validate_month(month: int):
    if month < 1 or month > 12:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Month must be between 1 and 12"
        )

async def _load_availability_inputs(
    provider: Provider
) -> Tuple[Optional[AvailabilityDeclaration], Optional[BookedDatesCache]]:
    """
    Fetch a provider's declaration and booked dates together.

    If either fetch fails or times out both come back as None, so the
    provider resolves to unavailable instead of failing the request.
    """
    declaration, cache = await asyncio.gather(
        asyncio.wait_for(get_availability_declaration(provider), settings.AVAILABILITY_FETCH_TIMEOUT),
        asyncio.wait_for(get_booked_dates_cache(provider.id), settings.AVAILABILITY_FETCH_TIMEOUT),
        return_exceptions=True
    )
    for result in (declaration, cache):
        if isinstance(result, Exception):
            logger.warning(f"Availability fetch failed for {provider.source.value} {provider.id}: {result!r}")
            return None, None
    return declaration, cache

def _today() -> CalendarDate:
    return CalendarDate.today()

@router.get("/me", response_model=Dict[str, Any])
async def get_my_availability(current_provider: Provider = Depends(get_current_provider)):
    """
    Get the current provider's availability declaration
    """
    availability = await get_availability(current_provider.id, current_provider.source)
    return availability.dict(by_alias=True) if availability else {}

@router.put("/me", response_model=Dict[str, Any])
async def update_my_availability(
    availability_data: AvailabilityDeclaration,
    current_provider: Provider = Depends(get_current_provider)
):
    """
    Replace the current provider's availability declaration
    """
    success = await update_availability(current_provider.id, current_provider.source, availability_data)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update availability"
        )

    updated_availability = await get_availability(current_provider.id, current_provider.source)
    return {
        "message": "Availability updated successfully",
        "availability": updated_availability.dict(by_alias=True) if updated_availability else {}
    }

@router.post("/me/apply-patterns", response_model=Dict[str, Any])
async def apply_my_recurring_patterns(
    year: int = Query(..., ge=1, le=9999, description="Year to fill"),
    month: int = Query(..., description="Month to fill (1-12)"),
    current_provider: Provider = Depends(get_current_provider)
):
    """
    Turn the current provider's weekly patterns into explicit available days
    for one month
    """
    _validate_month(month)

    availability = await get_availability(current_provider.id, current_provider.source)
    if not availability or not availability.recurringPatterns:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No recurring patterns to apply"
        )

    _, num_days = monthrange(year, month)
    filled = apply_recurring_patterns(
        availability,
        CalendarDate(year, month, 1),
        CalendarDate(year, month, num_days)
    )

    success = await update_availability(current_provider.id, current_provider.source, filled)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update availability"
        )

    return {
        "message": f"Recurring patterns applied to {year:04d}-{month:02d}",
        "availability": filled.dict(by_alias=True)
    }

@router.get("/{provider_id}", response_model=Dict[str, Any])
async def get_provider_availability(
    provider_id: str,
    source: ProviderSource = ProviderSource.PROVIDER
):
    """
    Get a provider's availability declaration
    """
    provider = await _get_provider_or_404(provider_id, source)
    return provider.availability.dict(by_alias=True) if provider.availability else {}

@router.get("/{provider_id}/check", response_model=AvailabilityCheckResponse)
async def check_provider_availability(
    provider_id: str,
    date: str = Query(..., description="Date to check (YYYY-MM-DD format)"),
    source: ProviderSource = ProviderSource.PROVIDER
):
    """
    Check whether a provider can be booked on a date
    """
    try:
        target_date = datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid date format. Use YYYY-MM-DD"
        )

    provider = await _get_provider_or_404(provider_id, source)
    declaration, cache = await _load_availability_inputs(provider)

    return {
        "providerId": provider.id,
        "date": to_iso_date(target_date),
        "available": is_available_on(declaration, cache, target_date)
    }

@router.get("/{provider_id}/dates", response_model=AvailableDatesResponse)
async def get_provider_available_dates(
    provider_id: str,
    year: int = Query(..., ge=1, le=9999, description="Year to check availability for"),
    month: int = Query(..., description="Month to check availability for (1-12)"),
    source: ProviderSource = ProviderSource.PROVIDER
):
    """
    Get the dates a provider can be booked on in a month
    """
    _validate_month(month)

    provider = await _get_provider_or_404(provider_id, source)
    declaration, cache = await _load_availability_inputs(provider)

    _, num_days = monthrange(year, month)
    # Past days are never offered for booking
    start = max(CalendarDate(year, month, 1), _today())
    available = available_dates_in_range(declaration, cache, start, CalendarDate(year, month, num_days))

    return {
        "providerId": provider.id,
        "year": year,
        "month": month,
        "availableDates": [to_iso_date(day) for day in available]
    }
