import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError
import certifi
from ..config import settings
from .repositories.pending_sessions import PendingSessionRepository

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None

db = Database()

async def get_database() -> AsyncIOMotorDatabase:
    """
    Return database instance
    """
    return db.client[settings.MONGODB_DB_NAME]

async def connect_to_mongo():
    """
    Connect to MongoDB, with TLS (certifi CA bundle) for hosted clusters
    """
    options = {
        "serverSelectionTimeoutMS": 5000,
        "maxPoolSize": 100,
        "minPoolSize": 10,
        "maxIdleTimeMS": 30000,
        "waitQueueTimeoutMS": 5000,
    }
    if settings.MONGODB_TLS:
        options.update(tls=True, tlsCAFile=certifi.where())

    try:
        db.client = AsyncIOMotorClient(settings.MONGODB_URI, **options)

        # Check connection
        await db.client.server_info()
        logger.info(f"Connected to MongoDB database {settings.MONGODB_DB_NAME}")
    except ServerSelectionTimeoutError as e:
        # Log the error but do not crash the app
        logger.error(f"Failed to connect to MongoDB: {e}")
        logger.warning("Pending checkout sessions cannot be stored without a working database connection.")

async def ensure_indexes():
    """
    Create the TTL index that expires pending checkout sessions
    """
    try:
        await PendingSessionRepository(await get_database()).ensure_indexes()
    except PyMongoError as e:
        logger.error(f"Failed to create pending session indexes: {e}")

async def close_mongo_connection():
    """
    Close MongoDB connection
    """
    if db.client:
        db.client.close()
        logger.info("Closed connection to MongoDB")
