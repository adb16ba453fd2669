# jobboard/db/mongo.py
import logging
from typing import Any, Optional

import motor.motor_asyncio as motor_asyncio
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING

from jobboard.core.config import settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
JOBS_COLLECTION = "jobs"
APPLICATIONS_COLLECTION = "applications"
CATEGORIES_COLLECTION = "categories"
NOTIFICATIONS_COLLECTION = "notifications"

_mongo_client: Optional[motor_asyncio.AsyncIOMotorClient] = None


def get_mongo_client():
    """
    Returns a cached Motor client.
    """
    global _mongo_client
    if _mongo_client is None:
        _mongo_client = motor_asyncio.AsyncIOMotorClient(settings.MONGODB_URI)
    return _mongo_client


def get_db():
    client = get_mongo_client()
    return client[settings.MONGODB_DB]


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None


async def init_indexes() -> None:
    db = get_db()
    await db[USERS_COLLECTION].create_index("email", unique=True)
    await db[USERS_COLLECTION].create_index("role")
    await db[USERS_COLLECTION].create_index("is_approved")

    await db[JOBS_COLLECTION].create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    await db[JOBS_COLLECTION].create_index("employer")
    await db[JOBS_COLLECTION].create_index("category")

    # at most one application per (job, applicant)
    await db[APPLICATIONS_COLLECTION].create_index([("job", ASCENDING), ("applicant", ASCENDING)], unique=True)

    await db[CATEGORIES_COLLECTION].create_index("name", unique=True)

    await db[NOTIFICATIONS_COLLECTION].create_index([("user", ASCENDING), ("created_at", DESCENDING)])
    await db[NOTIFICATIONS_COLLECTION].create_index([("user", ASCENDING), ("is_read", ASCENDING)])
    logger.info("MongoDB indexes ensured on %s", settings.MONGODB_DB)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a path/query id; malformed ids map to None so callers report 404."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_id(doc):
    # convert Mongo's _id (ObjectId) to str when returning
    if not doc:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc
