from typing import Dict, Any, List, Optional
from datetime import date, datetime, timedelta
import logging
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from app.core.config import settings
from app.db.mongodb import db
from app.db.provider import collection_for, get_provider_document
from app.schemas.availability import AvailabilityDeclaration, DayEntry
from app.schemas.provider import Provider, ProviderSource
from app.services.availability_resolver import in_blocked_range, parse_calendar_date, to_iso_date

logger = logging.getLogger(__name__)

def parse_declaration(raw: Optional[Dict[str, Any]]) -> Optional[AvailabilityDeclaration]:
    """
    Validate a stored availability document.

    A missing or structurally invalid document yields None so the caller
    falls back to "not available".
    """
    if not raw:
        return None
    if isinstance(raw, AvailabilityDeclaration):
        return raw
    try:
        return AvailabilityDeclaration(**raw)
    except (TypeError, ValidationError) as e:
        logger.warning(f"Ignoring malformed availability declaration: {e}")
        return None

async def get_availability(provider_id: str, source: ProviderSource = ProviderSource.PROVIDER) -> Optional[AvailabilityDeclaration]:
    """
    Get a provider's availability declaration
    """
    provider = await get_provider_document(provider_id, source)
    if not provider:
        return None
    return parse_declaration(provider.get("availability"))

async def get_availability_declaration(provider: Provider) -> Optional[AvailabilityDeclaration]:
    """
    Resolve the declaration for a listing candidate.

    Uses the copy embedded in the record when the candidate already carries
    one. A candidate built from its full stored record has nothing more to
    find; any other is looked up in the collection of its source.
    """
    if provider.availability is not None or provider.documentLoaded:
        return provider.availability
    return await get_availability(provider.id, provider.source)

async def update_availability(
    provider_id: str,
    source: ProviderSource,
    declaration: AvailabilityDeclaration
) -> bool:
    """
    Replace a provider's availability declaration
    """
    availability_data = declaration.dict(by_alias=True)
    availability_data["lastUpdated"] = datetime.utcnow()
    if not availability_data.get("timezone"):
        availability_data["timezone"] = settings.DEFAULT_TIMEZONE

    try:
        object_id = ObjectId(provider_id)
    except (InvalidId, TypeError):
        return False

    result = await db.db[collection_for(source)].update_one(
        {"_id": object_id},
        {"$set": {
            "availability": availability_data,
            "verificationSteps.availabilitySet": True
        }}
    )
    return result.matched_count > 0

def apply_recurring_patterns(
    declaration: AvailabilityDeclaration,
    start: date,
    end: date
) -> AvailabilityDeclaration:
    """
    Write the declaration's active weekday patterns out as explicit days.

    Every date in [start, end] whose weekday has an active pattern, and which
    is not inside a blocked range, gets an available DayEntry carrying the
    pattern's slots; an existing entry for that date is replaced. The
    resolver only ever reads explicit entries, so this is how a weekly
    routine becomes bookable.
    """
    patterns = {}
    for pattern in declaration.recurringPatterns:
        if pattern.isActive and pattern.dayOfWeek not in patterns:
            patterns[pattern.dayOfWeek] = pattern

    schedule: List[DayEntry] = list(declaration.schedule)
    current = start
    while current <= end:
        # date.weekday() is Monday=0; patterns count from Sunday=0
        pattern = patterns.get((current.weekday() + 1) % 7)
        blocked = any(in_blocked_range(period, current) for period in declaration.unavailablePeriods)
        if pattern is not None and not blocked:
            new_entry = DayEntry(
                date=to_iso_date(current),
                timeSlots=[slot.copy(update={"isAvailable": True}) for slot in pattern.timeSlots],
                isAvailable=True
            )
            schedule = [
                entry for entry in schedule
                if parse_calendar_date(entry.date) != current
            ]
            schedule.append(new_entry)
        current += timedelta(days=1)

    return declaration.copy(update={"schedule": schedule})
