import logging
import re
from typing import Optional

import motor.motor_asyncio
from beanie import init_beanie

from microcredx.database.models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)


def _mask_mongo_uri(uri: str) -> str:
    # Never log credentials; keep the scheme and host only
    m = re.match(r'(?P<prefix>mongodb(?:\+srv)?://)(?:(?P<creds>[^@]+)@)?(?P<rest>.+)', uri or "")
    if not m:
        return "mongodb://<redacted>"
    host_part = m.group('rest').split('/')[0]
    return f"{m.group('prefix')}***@{host_part}"


class Database:
    """Owns the Mongo client for the lifetime of the process.

    Created by the application factory and opened from the FastAPI lifespan.
    ``connect`` pings the deployment and binds the Beanie document models to
    the configured database; any failure propagates so startup aborts.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        db_name: Optional[str] = None,
        client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None,
    ):
        self.uri = uri
        self.db_name = db_name
        self.client = client
        self.database = None

    async def connect(self):
        if self.client is None:
            if not self.uri:
                logger.error("MONGODB_URI is not set in environment variables")
                raise RuntimeError("Configuration error: MONGODB_URI is not set in environment variables")
            logger.info("Attempting to connect to MongoDB at: %s", _mask_mongo_uri(self.uri))
            self.client = motor.motor_asyncio.AsyncIOMotorClient(
                self.uri,
                serverSelectionTimeoutMS=30000,
                connectTimeoutMS=30000,
                retryWrites=True,
                tz_aware=True,
            )

        if not self.db_name:
            logger.error("MONGODB_DB_NAME is not set in environment variables")
            raise RuntimeError("Configuration error: MONGODB_DB_NAME is not set in environment variables")

        try:
            await self.client.admin.command('ping')
            logger.info("Pinged your deployment. Successfully connected to MongoDB!")

            self.database = self.client[self.db_name]
            logger.info("Initializing Beanie with document models for database %s", self.db_name)
            await init_beanie(database=self.database, document_models=DOCUMENT_MODELS)
            logger.info("Beanie initialized successfully!")
        except Exception as e:
            logger.error(f"Database initialization failed: {e!r}")
            raise

        return self.database

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
