"""
API Router.

Aggregates all API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.endpoints import users, parcels, payments, riders

router = APIRouter()

router.include_router(users.router)
router.include_router(parcels.router)
router.include_router(payments.router)
router.include_router(riders.router)
