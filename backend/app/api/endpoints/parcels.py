"""
Parcel Management API Endpoints.

Senders create, list, inspect and delete their parcels.
"""

from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from pymongo import DESCENDING
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.db.mongo import MongoDatabase, get_db, parse_object_id
from backend.app.schemas.common import DeleteResult, InsertResult
from backend.app.schemas.parcel import ParcelCreate, ParcelResponse

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.get("", response_model=List[ParcelResponse])
async def list_parcels(
    email: Optional[str] = Query(None, description="Only parcels sent by this email"),
    db: MongoDatabase = Depends(get_db)
):
    """List parcels, newest first."""
    query = {}
    if email:
        query["senderEmail"] = email

    cursor = db.parcels.find(query, sort=[("createdAt", DESCENDING)])
    return await cursor.to_list(length=None)


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: MongoDatabase = Depends(get_db)
):
    parcel = await db.parcels.find_one({"_id": parse_object_id(parcel_id)})
    if not parcel:
        raise ResourceNotFoundError("Parcel", parcel_id)
    return parcel


@router.post("", response_model=InsertResult)
async def create_parcel(
    parcel_data: ParcelCreate,
    db: MongoDatabase = Depends(get_db)
):
    """
    Create a parcel.

    The parcel starts without a payment status or tracking id; both are set
    when its checkout is confirmed.
    """
    parcel = parcel_data.to_document()
    parcel["createdAt"] = datetime.now(timezone.utc)

    result = await db.parcels.insert_one(parcel)
    return InsertResult.from_pymongo(result)


@router.delete("/{parcel_id}", response_model=DeleteResult)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: MongoDatabase = Depends(get_db)
):
    result = await db.parcels.delete_one({"_id": parse_object_id(parcel_id)})
    return DeleteResult.from_pymongo(result)
