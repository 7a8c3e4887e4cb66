from typing import Dict, Any, List, Optional
import logging
from pydantic import ValidationError
from app.db.mongodb import db
from app.db.provider import collection_for, get_provider_document
from app.schemas.provider import Provider, ProviderSource
from app.services.availability_service import parse_declaration

logger = logging.getLogger(__name__)

def _to_float(value: Any) -> float:
    # Ratings are stored as strings such as "4.8"
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

def document_to_provider(document: Dict[str, Any], source: ProviderSource) -> Optional[Provider]:
    """
    Convert a provider or applicant document into a Provider.

    Returns None for documents that cannot be read; a malformed embedded
    availability is dropped rather than rejecting the whole record.
    """
    data = {key: value for key, value in document.items() if key not in ("_id", "availability")}
    data["id"] = str(document.get("_id", document.get("id", "")))
    data["source"] = source
    data["rating"] = _to_float(document.get("rating"))
    data["services"] = document.get("services") or []
    data["reviewCount"] = document.get("reviewCount") or 0
    data["availability"] = parse_declaration(document.get("availability"))
    data["documentLoaded"] = True
    try:
        return Provider(**data)
    except ValidationError as e:
        logger.warning(f"Skipping unreadable {source.value} record {data['id']}: {e}")
        return None

def matches_filters(
    provider: Provider,
    services: Optional[List[str]] = None,
    min_rating: Optional[float] = None
) -> bool:
    """
    Service filter matches on any overlap; rating is a lower bound
    """
    if services and not any(service in services for service in provider.services):
        return False
    if min_rating is not None and provider.rating < min_rating:
        return False
    return True

async def _find_providers(source: ProviderSource, query: Dict[str, Any]) -> List[Provider]:
    cursor = db.db[collection_for(source)].find(query)
    documents = await cursor.to_list(length=None)

    providers = []
    for document in documents:
        provider = document_to_provider(document, source)
        if provider is not None:
            providers.append(provider)
    return providers

async def get_approved_providers(city: Optional[str] = None) -> List[Provider]:
    """
    Get service providers approved by an admin
    """
    query = {"verificationSteps.adminApproved": True}
    if city:
        query["city"] = city
    return await _find_providers(ProviderSource.PROVIDER, query)

async def get_verified_applicants(city: Optional[str] = None) -> List[Provider]:
    """
    Get student applicants whose application has been approved
    """
    query = {"status": "approved"}
    if city:
        query["city"] = city
    return await _find_providers(ProviderSource.APPLICANT, query)

async def get_provider(provider_id: str, source: ProviderSource = ProviderSource.PROVIDER) -> Optional[Provider]:
    """
    Get a single provider or applicant by ID
    """
    document = await get_provider_document(provider_id, source)
    if not document:
        return None
    return document_to_provider(document, source)
