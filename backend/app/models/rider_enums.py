"""
Rider application status enumeration.
"""

import enum


class RiderStatus(str, enum.Enum):
    """
    Rider application status.

    Status flow:
        PENDING → APPROVED
        PENDING → REJECTED
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
