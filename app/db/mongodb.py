from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Connect to MongoDB."""
    try:
        logger.info("Connecting to MongoDB...")
        db.client = AsyncIOMotorClient(settings.MONGO_URI)
        db.db = db.client[settings.DB_NAME]
        logger.info("Connected to MongoDB.")

        # Create indexes for collections
        await create_indexes()

    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection():
    """Close MongoDB connection."""
    if db.client:
        logger.info("Closing MongoDB connection...")
        db.client.close()
        logger.info("MongoDB connection closed.")

async def get_database():
    """Get MongoDB database instance."""
    return db.db

async def create_indexes():
    """Create indexes for collections."""
    try:
        # Service providers: listing queries filter on approval and city
        await db.db.service_providers.create_index("email")
        await db.db.service_providers.create_index(
            [("verificationSteps.adminApproved", ASCENDING), ("city", ASCENDING)]
        )

        # Applications (student applicants)
        await db.db.applications.create_index("email")
        await db.db.applications.create_index([("status", ASCENDING), ("city", ASCENDING)])

        # Bookings collection indexes
        await db.db.bookings.create_index("providerId")
        await db.db.bookings.create_index([("providerId", ASCENDING), ("status", ASCENDING)])
        await db.db.bookings.create_index([("createdAt", DESCENDING)])

        logger.info("MongoDB indexes created successfully.")
    except Exception as e:
        logger.error(f"Failed to create MongoDB indexes: {e}")
