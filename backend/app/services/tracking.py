"""
Tracking identifier generation.

A tracking id is assigned to a parcel once its payment is confirmed, e.g.
``PRCL-20240521-A1F90C``.
"""

import secrets
from datetime import datetime, timezone

TRACKING_PREFIX = "PRCL"


def generate_tracking_id() -> str:
    """
    Generate a fresh tracking identifier.

    Format is ``PRCL-<UTC date as YYYYMMDD>-<6 uppercase hex chars>``. The
    random part comes from 3 bytes of ``secrets``; collisions within a day
    (1 in 2^24) are not checked against storage.
    """
    date_part = datetime.now(timezone.utc).strftime("%Y%m%d")
    random_part = secrets.token_hex(3).upper()
    return f"{TRACKING_PREFIX}-{date_part}-{random_part}"
