"""
Decide whether a provider can be booked on a given calendar date.

Precedence, first conclusive signal wins:

1. a date already in the provider's booked-dates cache is never available;
2. a provider without a declaration is never available;
3. a date inside any blocked range is never available;
4. otherwise the date must be listed explicitly in the schedule, and is
   available when one of its time slots is open (or, for an entry without
   slots, when the entry itself is marked available).

Everything here works on calendar dates (``datetime.date``), never on
instants, and nothing here raises on bad stored data: an unreadable date
simply never matches.
"""
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Union

from app.schemas.availability import AvailabilityDeclaration, BlockedRange, BookedDatesCache, DayEntry

logger = logging.getLogger(__name__)

# "YYYY-MM-DD", optionally followed by a time of day and a UTC offset
ISO_DATE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})"
    r"(?:[T ](?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d{1,6})?)?(?:Z|[+-](?:[01]\d|2[0-3]):?[0-5]\d)?)?$",
    re.ASCII
)

def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Read a calendar date from a stored value.

    Accepts ``date``/``datetime`` objects and ISO strings ("2025-08-17" or a
    full timestamp such as "2025-08-17T00:00:00.000Z"). Datetimes keep the
    date they were written with; no timezone conversion is applied.
    Returns None for anything that is not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    match = ISO_DATE.match(text)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%Y-%m-%d").date()
    except ValueError:
        return None

def to_iso_date(target: Union[date, datetime]) -> str:
    """Format the local calendar fields of target as YYYY-MM-DD."""
    if isinstance(target, datetime):
        target = target.date()
    return f"{target.year:04d}-{target.month:02d}-{target.day:02d}"

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())

def in_blocked_range(period: BlockedRange, day: date) -> bool:
    """
    Check whether day falls inside period.

    Bounds are inclusive and each may be missing (open-ended). A range with
    no bounds, or with a bound that cannot be parsed, blocks nothing.
    """
    if _is_blank(period.start) and _is_blank(period.end):
        return False

    start = None
    if not _is_blank(period.start):
        start = parse_calendar_date(period.start)
        if start is None:
            logger.debug(f"Skipping blocked range with malformed start: {period.start!r}")
            return False

    end = None
    if not _is_blank(period.end):
        end = parse_calendar_date(period.end)
        if end is None:
            logger.debug(f"Skipping blocked range with malformed end: {period.end!r}")
            return False

    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True

def find_day_entry(schedule: List[DayEntry], day: date) -> Optional[DayEntry]:
    """Linear scan for the schedule entry of day; first match wins."""
    day_str = to_iso_date(day)
    for entry in schedule:
        if isinstance(entry.date, str) and entry.date == day_str:
            return entry
        if parse_calendar_date(entry.date) == day:
            return entry
    return None

def is_day_entry_open(entry: DayEntry) -> bool:
    if entry.timeSlots:
        return any(slot.isAvailable for slot in entry.timeSlots)
    return entry.isAvailable

def is_available_on(
    declaration: Optional[AvailabilityDeclaration],
    cache: Optional[BookedDatesCache],
    target_date: Union[date, datetime],
) -> bool:
    """
    Return True if the provider should appear in a search for target_date.

    ``declaration.isAvailable`` is not consulted: a provider whose global
    toggle is off is still matched on its explicit days.
    """
    day = target_date.date() if isinstance(target_date, datetime) else target_date
    day_str = to_iso_date(day)

    # Confirmed bookings take absolute precedence
    if cache is not None and day_str in cache.unavailableDates:
        return False

    # No declared schedule means not bookable
    if declaration is None:
        return False

    if any(in_blocked_range(period, day) for period in declaration.unavailablePeriods):
        return False

    entry = find_day_entry(declaration.schedule, day)
    if entry is None:
        return False

    return is_day_entry_open(entry)

def available_dates_in_range(
    declaration: Optional[AvailabilityDeclaration],
    cache: Optional[BookedDatesCache],
    start: date,
    end: date,
) -> List[date]:
    """All dates in [start, end] for which is_available_on holds."""
    dates = []
    current = start
    while current <= end:
        if is_available_on(declaration, cache, current):
            dates.append(current)
        current += timedelta(days=1)
    return dates
