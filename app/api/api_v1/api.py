from fastapi import APIRouter
from app.api.api_v1.endpoints import providers, availability, bookings

router = APIRouter()

# Include all routers
router.include_router(providers.router, prefix="/providers", tags=["Providers"])
router.include_router(availability.router, prefix="/availability", tags=["Availability"])
router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
