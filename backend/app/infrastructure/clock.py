"""Wall Clock — the one place services read the current time.

Invariants:
    - Always timezone-aware UTC
    - Core never calls this; services take a clock callable so tests can pin time
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
