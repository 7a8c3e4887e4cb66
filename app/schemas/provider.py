from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
from app.schemas.availability import AvailabilityDeclaration

class ProviderSource(str, Enum):
    PROVIDER = "provider"  # approved marketplace listing
    APPLICANT = "applicant"  # verified student applicant shown provisionally

class Intent(str, Enum):
    TRANSLATOR = "translator"
    TOUR_GUIDE = "tour_guide"
    BOTH = "both"

class LanguageSkill(BaseModel):
    language: str
    level: str

class Provider(BaseModel):
    id: str
    source: ProviderSource = ProviderSource.PROVIDER
    name: str
    email: Optional[str] = None
    city: Optional[str] = None
    services: List[str] = []
    languages: List[LanguageSkill] = []
    experience: Optional[str] = None
    pricePerDay: Optional[str] = None
    description: Optional[str] = None
    profileImage: Optional[str] = None
    rating: float = 0
    reviewCount: int = 0
    intent: Optional[Intent] = None
    hskLevel: Optional[str] = None
    availability: Optional[AvailabilityDeclaration] = None
    # Set when built from the full stored record, so availability is final
    documentLoaded: bool = Field(False, exclude=True)

class ProviderResponse(BaseModel):
    id: str
    source: ProviderSource
    name: str
    city: Optional[str] = None
    services: List[str]
    languages: List[LanguageSkill] = []
    experience: Optional[str] = None
    pricePerDay: Optional[str] = None
    description: Optional[str] = None
    profileImage: Optional[str] = None
    rating: float
    reviewCount: int
    intent: Optional[Intent] = None
    hskLevel: Optional[str] = None
