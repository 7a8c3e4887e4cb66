from fastapi import APIRouter, HTTPException, status
from typing import List, Dict, Any
from datetime import datetime
from app.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from app.services.booking_service import (
    create_booking, get_bookings_by_provider, update_booking_status, get_booked_dates_cache
)

router = APIRouter()

@router.post("/", response_model=BookingResponse)
async def create_new_booking(booking_in: BookingCreate):
    """
    Request a booking with a provider for one day
    """
    try:
        datetime.strptime(booking_in.date, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid date format. Use YYYY-MM-DD"
        )

    booking = await create_booking(booking_in)
    return booking

@router.get("/provider/{provider_id}", response_model=List[BookingResponse])
async def get_provider_bookings(provider_id: str):
    """
    Get all bookings of a provider
    """
    bookings = await get_bookings_by_provider(provider_id)
    return bookings

@router.get("/provider/{provider_id}/booked-dates", response_model=Dict[str, Any])
async def get_provider_booked_dates(provider_id: str):
    """
    Get the dates a provider is already booked on
    """
    cache = await get_booked_dates_cache(provider_id)
    return {
        "providerId": provider_id,
        "unavailableDates": sorted(cache.unavailableDates)
    }

@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def change_booking_status(booking_id: str, status_update: BookingStatusUpdate):
    """
    Confirm, complete, cancel or reject a booking
    """
    booking = await update_booking_status(
        booking_id,
        status_update.status,
        status_update.adminNotes
    )
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found"
        )
    return booking
