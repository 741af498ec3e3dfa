from datetime import datetime


def utc_now() -> datetime:
    """Current UTC time truncated to whole milliseconds (what MongoDB keeps)."""
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
