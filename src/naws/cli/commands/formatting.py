"""Cell renderers shared by the domain commands (pure transforms)."""

from __future__ import annotations

from datetime import datetime, timezone


def human_size(size: object) -> str:
    """Render a byte count as ``"1.5 MB"``; non-numbers pass through."""
    if isinstance(size, bool) or not isinstance(size, (int, float)):
        return str(size)
    value = float(size)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if value < 1024 or unit == "TB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return str(size)  # pragma: no cover


def timestamp(value: object) -> str:
    """Render a datetime or epoch-milliseconds value as UTC ``YYYY-mm-dd HH:MM:SS``."""
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        return str(value)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
