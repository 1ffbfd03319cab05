"""
Database connection

MongoDB handle shared by the app. ``db`` stays None when no database URL is
configured; callers then fall back to in-memory storage.
"""
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from app_logger import get_logger
from settings import settings

logger = get_logger("database")


def connect(url: Optional[str], name: str) -> Optional[Database]:
    if not url:
        logger.info("No database URL configured, carts are kept in memory")
        return None
    client = MongoClient(url, serverSelectionTimeoutMS=5000)
    return client[name]


db = connect(settings.database_url, settings.database_name)
