from pydantic import BaseModel, Field, conint
from typing import Any, Optional, List, Set
from datetime import datetime

# Stored dates are kept exactly as written and parsed by the resolver, where
# an unreadable one simply never matches.
DateValue = Any

class TimeSlot(BaseModel):
    startTime: str  # "HH:MM"
    endTime: str  # "HH:MM"
    isAvailable: bool = False

class DayEntry(BaseModel):
    date: Optional[DateValue] = None  # ISO format, e.g. "2025-09-05"
    timeSlots: List[TimeSlot] = []
    # Only consulted when timeSlots is empty
    isAvailable: bool = False

class BlockedRange(BaseModel):
    start: Optional[DateValue] = Field(None, alias="startDate")
    end: Optional[DateValue] = Field(None, alias="endDate")
    reason: Optional[str] = None  # e.g. "vacation", "exams"

    class Config:
        populate_by_name = True

class RecurringPattern(BaseModel):
    dayOfWeek: conint(ge=0, le=6)  # 0 = Sunday ... 6 = Saturday
    timeSlots: List[TimeSlot] = []
    isActive: bool = True

class AvailabilityDeclaration(BaseModel):
    # Informational; the resolver decides per day
    isAvailable: bool = True
    schedule: List[DayEntry] = []
    unavailablePeriods: List[BlockedRange] = []
    recurringPatterns: List[RecurringPattern] = []
    timezone: Optional[str] = None  # e.g. "Asia/Shanghai"
    lastUpdated: Optional[datetime] = None

    class Config:
        populate_by_name = True
        json_encoders = {
            datetime: lambda dt: dt.isoformat()
        }

class BookedDatesCache(BaseModel):
    unavailableDates: Set[str] = set()

class AvailabilityCheckResponse(BaseModel):
    providerId: str
    date: str
    available: bool

class AvailableDatesResponse(BaseModel):
    providerId: str
    year: int
    month: int
    availableDates: List[str]
