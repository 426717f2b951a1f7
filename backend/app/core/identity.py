"""
Identity provider integration.

Bearer tokens are issued by Firebase Authentication on the client and
verified here. Verification yields a ``Principal`` carrying the email the
rest of the application compares against resource owners.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials

logger = logging.getLogger(__name__)


class InvalidCredentialError(Exception):
    """Raised when a bearer token is invalid, expired or malformed."""


@dataclass(frozen=True)
class Principal:
    """Verified identity extracted from a bearer token."""
    email: Optional[str]
    uid: Optional[str] = None


class IdentityProvider(Protocol):
    async def verify(self, token: str) -> Principal:
        ...


class FirebaseIdentityProvider:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, credentials_path: str, timeout: float = 10.0):
        try:
            self.app = firebase_admin.get_app()
        except ValueError:
            self.app = firebase_admin.initialize_app(credentials.Certificate(credentials_path))
        self.timeout = timeout

    async def verify(self, token: str) -> Principal:
        """
        Verify an ID token against Firebase.

        Raises:
            InvalidCredentialError: token rejected by Firebase
        """
        try:
            decoded = await asyncio.wait_for(
                asyncio.to_thread(firebase_auth.verify_id_token, token, app=self.app),
                timeout=self.timeout,
            )
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            raise InvalidCredentialError(str(e)) from e

        return Principal(email=decoded.get("email"), uid=decoded.get("uid"))


class AuthOutcome(str, enum.Enum):
    """Result of inspecting a request's credential."""
    NO_CREDENTIAL = "no_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    VERIFIED = "verified"


@dataclass(frozen=True)
class AuthResult:
    outcome: AuthOutcome
    email: Optional[str] = None

    @property
    def is_verified(self) -> bool:
        return self.outcome == AuthOutcome.VERIFIED


async def authenticate(authorization: Optional[str], provider: IdentityProvider) -> AuthResult:
    """
    Inspect an ``Authorization`` header value formatted as ``<scheme> <token>``.

    Callers decide what to do with an invalid credential; this function
    never raises for one.
    """
    if not authorization:
        return AuthResult(AuthOutcome.NO_CREDENTIAL)

    parts = authorization.split()
    if len(parts) != 2:
        logger.warning("Malformed authorization header")
        return AuthResult(AuthOutcome.INVALID_CREDENTIAL)

    try:
        principal = await provider.verify(parts[1])
    except InvalidCredentialError as e:
        logger.warning("Token verification failed: %s", e)
        return AuthResult(AuthOutcome.INVALID_CREDENTIAL)

    logger.debug("Verified token for %s", principal.email)
    return AuthResult(AuthOutcome.VERIFIED, email=principal.email)
