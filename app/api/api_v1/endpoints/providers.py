from fastapi import APIRouter, HTTPException, Query, status
from typing import List, Optional
from datetime import datetime
import logging
from app.schemas.provider import ProviderResponse, ProviderSource
from app.services.listing_service import search_providers
from app.services.provider_service import get_provider

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[ProviderResponse])
async def list_providers(
    city: Optional[str] = None,
    services: Optional[str] = Query(None, description="Comma-separated service keys, e.g. translator,tour_guide"),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    date: Optional[str] = Query(None, description="Only providers available on this date (YYYY-MM-DD)")
):
    """
    List approved providers and verified student applicants

    - **city**: Exact city match
    - **services**: Providers offering at least one of these services
    - **min_rating**: Minimum rating score
    - **date**: Only providers available on this date
    """
    target_date = None
    if date:
        try:
            target_date = datetime.strptime(date, "%Y-%m-%d").date()
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Invalid date format. Use YYYY-MM-DD"
            )

    service_list = [s.strip() for s in services.split(",") if s.strip()] if services else None

    try:
        providers = await search_providers(
            city=city,
            services=service_list,
            min_rating=min_rating,
            target_date=target_date
        )
    except Exception as e:
        logger.error(f"Error fetching providers: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch service providers"
        )

    return [provider.dict() for provider in providers]

@router.get("/{provider_id}", response_model=ProviderResponse)
async def get_provider_profile(
    provider_id: str,
    source: ProviderSource = ProviderSource.PROVIDER
):
    """
    Get a provider or applicant profile by ID
    """
    provider = await get_provider(provider_id, source)
    if not provider:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Service provider not found"
        )
    return provider.dict()
