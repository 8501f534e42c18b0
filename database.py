import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from config import Settings

logger = logging.getLogger("blog.database")


######################
# Database Connection
######################
def connect(settings: Settings) -> AsyncIOMotorDatabase:
    """Create the motor client; the driver connects lazily on first use"""
    client = AsyncIOMotorClient(settings.mongodb_url)
    return client[settings.database_name]


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Dependency returning the database bound to the running app"""
    return request.app.state.db


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create unique constraints and query indexes"""
    await db.users.create_index("email", unique=True)

    await db.posts.create_index([("created_at", DESCENDING)])
    await db.posts.create_index([("author", ASCENDING)])

    await db.comments.create_index([("post", ASCENDING), ("created_at", DESCENDING)])
    logger.info("Database indexes ensured")
