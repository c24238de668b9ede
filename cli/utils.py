"""Display helpers for the peer browser."""

from datetime import datetime, timezone
from typing import Optional

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB']


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count the way the web UI shows it.

    Uses 1024-based units and rounds to at most two decimals
    (e.g. "1.5 MB", "512 Bytes").
    """
    if size_bytes <= 0:
        return "0 Bytes"

    size = float(size_bytes)
    for unit in SIZE_UNITS:
        if size < 1024 or unit == SIZE_UNITS[-1]:
            return f"{round(size, 2):g} {unit}"
        size /= 1024


def format_age(moment: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago a file was modified.

    Args:
        moment: Modification time (naive values are taken as UTC)
        now: Reference time, defaults to the current time

    Returns:
        "Just now", "5m ago", "3h ago", "2d ago" or a plain date after a week
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 24 * 60:
        return f"{minutes // 60}h ago"
    if minutes < 7 * 24 * 60:
        return f"{minutes // (24 * 60)}d ago"
    return moment.date().isoformat()
