from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC datetime, timezone-aware."""
    return datetime.now(timezone.utc)


def naive_utc_now() -> datetime:
    """
    Get current UTC datetime as a naive datetime (no timezone info).
    Used for the DateTime columns, which are stored without timezone.

    Returns:
        datetime: Current UTC datetime without timezone info
    """
    return utc_now().replace(tzinfo=None)
