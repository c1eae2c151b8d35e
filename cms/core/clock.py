"""
Time source shared by models and services.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as naive UTC, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
