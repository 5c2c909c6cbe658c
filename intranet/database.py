"""
Database
Shared Motor client and Beanie initialisation
"""
import logging
from functools import lru_cache

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from intranet.config import settings
from intranet.models.announcement import (
    Announcement,
    AnnouncementComment,
    AnnouncementRecipient,
    AnnouncementTag,
)
from intranet.models.department import Department
from intranet.models.employee import Employee


logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [
    Department,
    Employee,
    Announcement,
    AnnouncementTag,
    AnnouncementRecipient,
    AnnouncementComment,
]


@lru_cache()
def get_client() -> AsyncIOMotorClient:
    """Process-wide Motor client"""
    return AsyncIOMotorClient(settings.MONGODB_URL)


async def init_db(database: AsyncIOMotorDatabase = None) -> AsyncIOMotorDatabase:
    """Bind every document model to `database` (defaults to the configured one)"""
    if database is None:
        database = get_client()[settings.MONGODB_DB_NAME]

    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    logger.info("Beanie initialised with %d document models", len(DOCUMENT_MODELS))
    return database


def close_db() -> None:
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()
