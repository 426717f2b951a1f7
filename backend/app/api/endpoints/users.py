"""
User API endpoints.

Registers accounts created through the identity provider.
"""

import logging
from datetime import datetime, timezone
from typing import Union
from fastapi import APIRouter, Depends
from pymongo.errors import DuplicateKeyError
from backend.app.db.mongo import MongoDatabase, get_db
from backend.app.models.enums import UserRole
from backend.app.schemas.common import InsertResult, MessageResponse
from backend.app.schemas.user import UserCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=Union[InsertResult, MessageResponse])
async def register_user(
    user_data: UserCreate,
    db: MongoDatabase = Depends(get_db)
):
    """
    Register a user on first sign-in.

    Every new account gets the ``user`` role. Registering an email that
    already exists inserts nothing and returns ``{"message": "user exists"}``.
    """
    user = user_data.to_document()
    user["role"] = UserRole.USER.value
    user["createdAt"] = datetime.now(timezone.utc)

    if await db.users.find_one({"email": user["email"]}):
        return MessageResponse(message="user exists")

    try:
        result = await db.users.insert_one(user)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration of the same email
        return MessageResponse(message="user exists")

    logger.info("Registered user %s", user["email"])
    return InsertResult.from_pymongo(result)
