from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .config import Settings

logger = logging.getLogger(__name__)

USERS = "users"
RESTAURANTS = "restaurants"


class Store:
    """Process-wide handle on the document store, built once at startup."""

    def __init__(self, client: MongoClient, db_name: str, connected: bool = True) -> None:
        self.client = client
        self.db = client[db_name]
        self._connected = connected

    @classmethod
    def connect(cls, settings: Settings) -> Store:
        client: MongoClient = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000, tz_aware=True)
        store = cls(client, settings.mongodb_db, connected=False)
        if store.ping():
            logger.info("MongoDB connected: %s / %s", client.address, settings.mongodb_db)
            store.ensure_indexes()
        else:
            logger.error("MongoDB unreachable at startup; pages will report the store as unavailable")
        return store

    @property
    def users(self) -> Collection:
        return self.db[USERS]

    @property
    def restaurants(self) -> Collection:
        return self.db[RESTAURANTS]

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
        except PyMongoError:
            logger.warning("MongoDB ping failed", exc_info=True)
            self._connected = False
            return False
        self._connected = True
        return True

    def is_available(self) -> bool:
        """Connection-state check; re-pings only when the handle is marked down."""
        return self._connected or self.ping()

    def ensure_indexes(self) -> None:
        self.users.create_index([("username", ASCENDING)], unique=True)
        self.users.create_index([("email", ASCENDING)], unique=True)
        self.restaurants.create_index([("address.city", ASCENDING)])
        self.restaurants.create_index([("cuisines", ASCENDING)])
        self.restaurants.create_index([("rating", DESCENDING)])

    def close(self) -> None:
        self.client.close()
        self._connected = False
        logger.info("MongoDB connection closed")
