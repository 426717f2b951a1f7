"""
Security guards for ownership-based access control.

Resources are owned by an email address; the verified principal may only
read resources filed under its own email.
"""

from typing import Optional
from backend.app.core.exceptions import InsufficientPermissionsError
from backend.app.core.identity import AuthResult


def verify_ownership(resource_email: Optional[str], auth: AuthResult) -> bool:
    """
    Verify that the current principal owns the resource.

    A request that carries no verified email (fail-open auth with an invalid
    token) never owns anything.

    Args:
        resource_email: Owner email of the resource being accessed
        auth: Result of the auth gate for this request

    Returns:
        True if the principal's email matches, False otherwise
    """
    if not auth.is_verified or not auth.email:
        return False
    return auth.email == resource_email


class OwnershipGuard:
    """
    Class-based ownership guard.

    Usage:
        ownership_guard = OwnershipGuard()

        @router.get("/payments")
        async def list_payments(email: str, auth: AuthResult = Depends(verify_token)):
            ownership_guard.enforce(email, auth)
            ...
    """

    def enforce(self, resource_email: Optional[str], auth: AuthResult):
        """
        Enforce ownership validation, raise 403 if access denied.

        Raises:
            InsufficientPermissionsError: 403 if the emails do not match
        """
        if not verify_ownership(resource_email, auth):
            raise InsufficientPermissionsError(details={"email": resource_email})
