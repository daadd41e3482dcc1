"""Tracking ID generation for paid parcels."""

import secrets
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PREFIX = "PAR"


def generate_tracking_id(prefix: str = DEFAULT_PREFIX, now: Optional[datetime] = None) -> str:
    """
    Build a tracking id of the form ``PAR-20250131-9F2C1A``.

    The date is the current UTC date; the suffix is three random bytes as
    upper-case hex. Collisions are not checked.
    """
    date = (now or datetime.now(timezone.utc)).strftime("%Y%m%d")
    suffix = secrets.token_hex(3).upper()
    return f"{prefix}-{date}-{suffix}"
