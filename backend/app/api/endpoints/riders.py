"""
Rider API endpoints.

Rider applications and their review.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from backend.app.core.dependencies import verify_token
from backend.app.core.identity import AuthResult
from backend.app.db.mongo import MongoDatabase, get_db, parse_object_id
from backend.app.models.enums import UserRole
from backend.app.models.rider_enums import RiderStatus
from backend.app.schemas.common import InsertResult, UpdateResult
from backend.app.schemas.rider import RiderCreate, RiderResponse, RiderStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/riders", tags=["Riders"])


@router.get("", response_model=List[RiderResponse])
async def list_riders(
    status: Optional[RiderStatus] = Query(None, description="Filter by application status"),
    db: MongoDatabase = Depends(get_db)
):
    query = {}
    if status:
        query["status"] = status.value

    return await db.riders.find(query).to_list(length=None)


@router.post("", response_model=InsertResult)
async def apply_as_rider(
    rider_data: RiderCreate,
    db: MongoDatabase = Depends(get_db)
):
    """Submit a rider application. Applications start as pending."""
    rider = rider_data.to_document()
    rider["status"] = RiderStatus.PENDING.value
    rider["createAt"] = datetime.now(timezone.utc)

    result = await db.riders.insert_one(rider)
    return InsertResult.from_pymongo(result)


@router.patch("/{rider_id}", response_model=UpdateResult)
async def update_rider_status(
    rider_id: str = Path(..., description="Rider application ID"),
    update: RiderStatusUpdate = ...,
    auth: AuthResult = Depends(verify_token),
    db: MongoDatabase = Depends(get_db)
):
    """
    Review a rider application (auth required).

    Approving also promotes the user with the given email to the rider role.
    Returns the outcome of the rider update.
    """
    result = await db.riders.update_one(
        {"_id": parse_object_id(rider_id)},
        {"$set": {"status": update.status}},
    )

    if update.status == RiderStatus.APPROVED:
        user_result = await db.users.update_one(
            {"email": update.email},
            {"$set": {"role": UserRole.RIDER.value}},
        )
        logger.info(
            "Rider %s approved by %s; user %s promoted (matched=%s)",
            rider_id, auth.email, update.email, user_result.matched_count,
        )

    return UpdateResult.from_pymongo(result)
