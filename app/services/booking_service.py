from typing import Dict, Any, Iterable, List, Optional
from app.core.config import settings
from app.db.mongodb import db
from app.schemas.availability import BookedDatesCache
from app.schemas.booking import BookingCreate, BookingStatus
from app.services.availability_resolver import parse_calendar_date, to_iso_date
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId

async def create_booking(booking_in: BookingCreate) -> Dict[str, Any]:
    """
    Create a new booking request (pending until the provider confirms)
    """
    booking_data = booking_in.dict()
    booking_data["status"] = BookingStatus.PENDING
    booking_data["createdAt"] = datetime.utcnow()

    # Insert booking into database
    result = await db.db.bookings.insert_one(booking_data)

    # Get the created booking
    created_booking = await db.db.bookings.find_one({"_id": result.inserted_id})

    # Transform the _id field to string
    created_booking["id"] = str(created_booking["_id"])

    return created_booking

async def get_booking_by_id(booking_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a booking by ID
    """
    try:
        object_id = ObjectId(booking_id)
    except (InvalidId, TypeError):
        return None

    booking = await db.db.bookings.find_one({"_id": object_id})
    if booking:
        booking["id"] = str(booking["_id"])
    return booking

async def get_bookings_by_provider(
    provider_id: str,
    statuses: Optional[List[str]] = None
) -> List[Dict[str, Any]]:
    """
    Get a provider's bookings, newest first
    """
    query: Dict[str, Any] = {"providerId": provider_id}
    if statuses:
        query["status"] = {"$in": statuses}

    cursor = db.db.bookings.find(query).sort("createdAt", -1)
    bookings = await cursor.to_list(length=None)

    for booking in bookings:
        booking["id"] = str(booking["_id"])

    return bookings

async def update_booking_status(
    booking_id: str,
    status: BookingStatus,
    admin_notes: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Update a booking's status
    """
    booking = await get_booking_by_id(booking_id)
    if not booking:
        return None

    update_data = {
        "status": status,
        "updatedAt": datetime.utcnow()
    }

    if admin_notes:
        update_data["adminNotes"] = admin_notes

    await db.db.bookings.update_one(
        {"_id": ObjectId(booking_id)},
        {"$set": update_data}
    )

    updated_booking = await get_booking_by_id(booking_id)
    return updated_booking

def booked_dates_from_bookings(
    bookings: Iterable[Dict[str, Any]],
    statuses: Optional[Iterable[str]] = None
) -> BookedDatesCache:
    """
    Collect the dates occupied by bookings in one of the given statuses.

    Defaults to settings.BOOKED_STATUSES. Bookings whose date cannot be read
    are skipped.
    """
    wanted = set(statuses if statuses is not None else settings.BOOKED_STATUSES)
    dates = set()
    for booking in bookings:
        status = booking.get("status")
        if isinstance(status, BookingStatus):
            status = status.value
        if status not in wanted:
            continue
        day = parse_calendar_date(booking.get("date"))
        if day is not None:
            dates.add(to_iso_date(day))
    return BookedDatesCache(unavailableDates=dates)

async def get_booked_dates_cache(provider_id: str) -> BookedDatesCache:
    """
    Build the booked-dates calendar of a provider from its bookings
    """
    bookings = await get_bookings_by_provider(provider_id, statuses=list(settings.BOOKED_STATUSES))
    return booked_dates_from_bookings(bookings)
