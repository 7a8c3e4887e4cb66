from bson import ObjectId
from bson.errors import InvalidId
from app.db.mongodb import get_database
from app.schemas.provider import ProviderSource

# Provider collection helpers

COLLECTIONS = {
    ProviderSource.PROVIDER: "service_providers",
    ProviderSource.APPLICANT: "applications",
}

def collection_for(source: ProviderSource) -> str:
    """
    Approved providers and student applicants live in different collections
    """
    return COLLECTIONS[ProviderSource(source)]

async def get_provider_document(provider_id: str, source: ProviderSource = ProviderSource.PROVIDER):
    """
    Get a provider or applicant document by its ID
    """
    db = await get_database()
    try:
        object_id = ObjectId(provider_id)
    except (InvalidId, TypeError):
        return None
    return await db[collection_for(source)].find_one({"_id": object_id})
