from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

class BookingCreate(BaseModel):
    providerId: str
    date: str  # "YYYY-MM-DD"
    clientName: str
    clientEmail: str
    clientPhone: Optional[str] = None
    service: Optional[str] = None
    notes: Optional[str] = None

class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    adminNotes: Optional[str] = None

class BookingResponse(BaseModel):
    id: str
    providerId: str
    date: str
    clientName: str
    clientEmail: str
    clientPhone: Optional[str] = None
    service: Optional[str] = None
    notes: Optional[str] = None
    status: BookingStatus
    adminNotes: Optional[str] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None

    class Config:
        populate_by_name = True
        json_encoders = {
            datetime: lambda dt: dt.isoformat()
        }
