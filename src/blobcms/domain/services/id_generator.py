"""Identifier and timestamp generation.

Ids combine a millisecond time component with a random suffix so that rapid
repeated calls in one or several processes do not collide. A counter would not
be safe here: the registry document is not guarded by any transaction.
"""

import secrets
import time
from datetime import datetime, timezone


class IdGenerator:
    """Generator for opaque schema and entry ids.

    Example IDs: 18c2f6a1b3e9f04d21c7a8, 18c2f6a1b3f0a9e6b21c4d
    """

    # 11 hex digits of milliseconds covers well past the year 2500
    TIME_WIDTH = 11
    RANDOM_BYTES = 6

    @classmethod
    def generate(cls) -> str:
        """Generate a new id.

        Ids sort roughly by creation time.

        Returns:
            A 23 character lowercase hex string.
        """
        millis = time.time_ns() // 1_000_000
        return f"{millis:0{cls.TIME_WIDTH}x}{secrets.token_hex(cls.RANDOM_BYTES)}"

    @classmethod
    def generate_unique(cls, existing: set[str]) -> str:
        """Generate an id not present in ``existing``."""
        while True:
            candidate = cls.generate()
            if candidate not in existing:
                return candidate


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
