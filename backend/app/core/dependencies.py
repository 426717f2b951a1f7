"""
Authentication dependencies for FastAPI.

This module provides the auth gate used to protect routes with identity
provider tokens.
"""

import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from backend.app.core.config import settings
from backend.app.core.exceptions import AuthenticationError
from backend.app.core.identity import AuthOutcome, AuthResult, IdentityProvider, authenticate

logger = logging.getLogger(__name__)

# Full "<scheme> <token>" header value, any scheme
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


async def get_identity_provider(request: Request) -> IdentityProvider:
    """FastAPI dependency returning the identity provider built at startup."""
    return request.app.state.identity_provider


async def verify_token(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthResult:
    """
    FastAPI dependency guarding protected routes.

    1. Missing ``Authorization`` header: rejected with 401.
    2. Valid token: the principal's email is stored on
       ``request.state.decoded_email`` and returned to the handler.
    3. Invalid token: rejected with 401, unless ``settings.auth_fail_open``
       is set, in which case the request proceeds with no decoded email.

    Raises:
        AuthenticationError: 401 when the request may not proceed
    """
    request.state.decoded_email = None

    result = await authenticate(authorization, identity_provider)

    if result.outcome == AuthOutcome.NO_CREDENTIAL:
        raise AuthenticationError()

    if result.outcome == AuthOutcome.INVALID_CREDENTIAL:
        if not settings.auth_fail_open:
            raise AuthenticationError()
        logger.info("Invalid credential on %s, continuing without principal", request.url.path)
        return result

    request.state.decoded_email = result.email
    return result
