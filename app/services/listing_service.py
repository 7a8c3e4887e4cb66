"""
Provider search: merge both provider sources, apply the profile filters and,
when a date is requested, keep only providers available on that date.
"""
import asyncio
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from app.core.config import settings
from app.schemas.availability import AvailabilityDeclaration, BookedDatesCache
from app.schemas.provider import Provider
from app.services.availability_resolver import is_available_on, to_iso_date
from app.services.availability_service import get_availability_declaration
from app.services.booking_service import get_booked_dates_cache
from app.services.provider_service import get_approved_providers, get_verified_applicants, matches_filters

logger = logging.getLogger(__name__)

DeclarationFetcher = Callable[[Provider], Awaitable[Optional[AvailabilityDeclaration]]]
BookedDatesFetcher = Callable[[str], Awaitable[Optional[BookedDatesCache]]]

def merge_provider_sources(providers: List[Provider], applicants: List[Provider]) -> List[Provider]:
    """
    Approved providers first, then applicants not already listed.

    An applicant who has since become an approved provider is recognised by
    email and shown once, as the provider.
    """
    merged = []
    seen_ids = set()
    seen_emails = set()
    for candidate in list(providers) + list(applicants):
        key = (candidate.source, candidate.id)
        email = (candidate.email or "").strip().lower()
        if key in seen_ids or (email and email in seen_emails):
            continue
        seen_ids.add(key)
        if email:
            seen_emails.add(email)
        merged.append(candidate)
    return merged

async def _fetch_availability_data(
    provider: Provider,
    get_declaration: DeclarationFetcher,
    get_booked_dates: BookedDatesFetcher,
) -> Tuple[Optional[AvailabilityDeclaration], Optional[BookedDatesCache]]:
    declaration, cache = await asyncio.gather(
        get_declaration(provider),
        get_booked_dates(provider.id),
        return_exceptions=True,
    )
    for result in (declaration, cache):
        if isinstance(result, Exception):
            raise result
    return declaration, cache

async def filter_by_availability(
    candidates: Sequence[Provider],
    target_date: Union[date, datetime],
    get_declaration: Optional[DeclarationFetcher] = None,
    get_booked_dates: Optional[BookedDatesFetcher] = None,
    timeout: Optional[float] = None,
    concurrency: Optional[int] = None,
) -> List[Provider]:
    """
    Keep the candidates available on target_date, in their original order.

    Each candidate's declaration and booked dates are fetched concurrently
    (bounded by ``concurrency``) and each fetch gets ``timeout`` seconds. A
    candidate whose data fails to load or times out is treated as
    unavailable; it never fails the whole search. A provider listed more
    than once is fetched once.
    """
    get_declaration = get_declaration or get_availability_declaration
    get_booked_dates = get_booked_dates or get_booked_dates_cache
    if timeout is None:
        timeout = settings.AVAILABILITY_FETCH_TIMEOUT
    semaphore = asyncio.Semaphore(concurrency or settings.AVAILABILITY_FETCH_CONCURRENCY)
    day_str = to_iso_date(target_date)

    async def resolve(provider: Provider) -> bool:
        async with semaphore:
            try:
                declaration, cache = await asyncio.wait_for(
                    _fetch_availability_data(provider, get_declaration, get_booked_dates),
                    timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"Availability fetch timed out for {provider.source.value} {provider.id}")
                return False
            except Exception as e:
                logger.warning(f"Availability fetch failed for {provider.source.value} {provider.id}: {e}")
                return False
        return is_available_on(declaration, cache, target_date)

    # Request-scoped memo: one resolution per distinct provider
    unique: Dict[Tuple[str, str], Provider] = {}
    for candidate in candidates:
        unique.setdefault((candidate.source.value, candidate.id), candidate)

    keys = list(unique)
    verdicts = await asyncio.gather(*(resolve(unique[key]) for key in keys))
    available = dict(zip(keys, verdicts))

    result = [
        candidate for candidate in candidates
        if available[(candidate.source.value, candidate.id)]
    ]
    logger.info(f"{len(result)} of {len(candidates)} providers available on {day_str}")
    return result

async def search_providers(
    city: Optional[str] = None,
    services: Optional[List[str]] = None,
    min_rating: Optional[float] = None,
    target_date: Optional[date] = None,
) -> List[Provider]:
    """
    Search approved providers and verified applicants
    """
    providers, applicants = await asyncio.gather(
        get_approved_providers(city),
        get_verified_applicants(city),
    )
    candidates = merge_provider_sources(providers, applicants)
    candidates = [
        candidate for candidate in candidates
        if matches_filters(candidate, services=services, min_rating=min_rating)
    ]

    if target_date is not None:
        candidates = await filter_by_availability(candidates, target_date)

    return candidates
