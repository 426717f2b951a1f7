"""
User roles enumeration.

Defines the role types for the parcel delivery system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Default role for every registered account (parcel sender)
        RIDER: Granted when a rider application is approved
        ADMIN: Reviews rider applications
    """
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"
