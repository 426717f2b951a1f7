"""
MongoDB client configuration.

This module owns the async MongoDB client and the four collections the
service works with. The client is opened by the application lifespan and
closed on shutdown; handlers receive it through the ``get_db`` dependency.
"""

import logging
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import AsyncMongoClient, ASCENDING, DESCENDING
from backend.app.core.config import settings
from backend.app.core.exceptions import InvalidIdentifierError

logger = logging.getLogger(__name__)

USERS = "users"
PARCELS = "parcels"
PAYMENTS = "payments"
RIDERS = "riders"


class MongoDatabase:
    """Explicitly constructed storage client shared by all request handlers."""

    def __init__(self, uri: str = None, db_name: str = None):
        self.uri = uri or settings.mongodb_uri
        self.db_name = db_name or settings.mongodb_db_name
        self.client = None
        self.db = None

    async def connect(self):
        """
        Open the client, verify the deployment answers and ensure indexes.

        The unique index on ``payments.transactionId`` is what makes payment
        confirmation idempotent when two confirmations race.
        """
        self.client = AsyncMongoClient(self.uri, tz_aware=True)
        self.db = self.client[self.db_name]
        await self.client.admin.command("ping")
        logger.info("Connected to MongoDB database '%s'", self.db_name)

        await self.db[USERS].create_index([("email", ASCENDING)], unique=True)
        await self.db[PAYMENTS].create_index([("transactionId", ASCENDING)], unique=True)
        await self.db[PAYMENTS].create_index([("customerEmail", ASCENDING), ("paidAt", DESCENDING)])
        await self.db[PARCELS].create_index([("senderEmail", ASCENDING), ("createdAt", DESCENDING)])
        await self.db[RIDERS].create_index([("status", ASCENDING)])

    async def close(self):
        if self.client is not None:
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None

    @property
    def users(self):
        return self.db[USERS]

    @property
    def parcels(self):
        return self.db[PARCELS]

    @property
    def payments(self):
        return self.db[PAYMENTS]

    @property
    def riders(self):
        return self.db[RIDERS]


async def get_db(request: Request) -> MongoDatabase:
    """
    FastAPI dependency for the storage client.

    Returns the client opened by the application lifespan.
    """
    return request.app.state.mongo


def parse_object_id(value: str) -> ObjectId:
    """Rebuild a storage identifier from its string form."""
    # ObjectId(None) would mint a new id
    if not value:
        raise InvalidIdentifierError(value)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifierError(value)
