"""
FastAPI Application Entry Point.

This is the main application file for the Parcel Delivery Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from backend.app.core.config import settings
from backend.app.api.router import router as api_router
from backend.app.core.identity import FirebaseIdentityProvider
from backend.app.core.observability import ObservabilityMiddleware, configure_logging
from backend.app.db.mongo import MongoDatabase
from backend.app.services.payment_provider import StripePaymentProvider
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Builds the identity and payment providers.
    2. Opens the MongoDB client and ensures indexes.
    3. Closes the MongoDB client on shutdown.
    """
    app.state.identity_provider = FirebaseIdentityProvider(
        settings.firebase_credentials_path,
        timeout=settings.provider_timeout_seconds,
    )
    app.state.payment_provider = StripePaymentProvider(
        settings.stripe_secret_key,
        timeout=settings.provider_timeout_seconds,
    )

    mongo = MongoDatabase()
    await mongo.connect()
    app.state.mongo = mongo
    logger.info("%s started", settings.app_name)
    try:
        yield
    finally:
        await mongo.close()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel delivery backend: parcels, payments and riders",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Parcel delivery server is running",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
