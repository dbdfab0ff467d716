"""Utility helpers for EventRules."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
import math
import re
import unicodedata

_slug_invalid = re.compile(r"[^a-z0-9]+")
_http_url_pattern = re.compile(r"^https?://\S+", re.IGNORECASE)

FIELD_ERROR_SEPARATOR = "; "


def utcnow() -> datetime:
    """Return a naive UTC datetime."""

    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert aware datetimes to naive UTC; naive values are assumed UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def slugify(value: str) -> str:
    """Return a canonical slug suitable for URLs."""
    value = (
        unicodedata.normalize("NFKD", value or "")
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    value = value.strip().lower()
    value = _slug_invalid.sub("-", value)
    value = value.strip("-")
    return value


def is_http_url(raw: str | None) -> bool:
    """Return True for a non-empty http(s) URL."""
    normalized = (raw or "").strip()
    if not normalized:
        return False
    return _http_url_pattern.match(normalized) is not None


def is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def add_field_error(errors: dict[str, str], field_path: str, message: str) -> None:
    """Attach a message to a field, appending when the field already has one."""
    existing = errors.get(field_path)
    if existing:
        errors[field_path] = f"{existing}{FIELD_ERROR_SEPARATOR}{message}"
    else:
        errors[field_path] = message


def merge_field_errors(*maps: Mapping[str, str]) -> dict[str, str]:
    """Merge error maps in order; shared fields keep every message in that order."""
    merged: dict[str, str] = {}
    for errors in maps:
        for field_path, message in errors.items():
            add_field_error(merged, field_path, message)
    return merged


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants (floored, negative when end < start)."""
    seconds = (to_naive_utc(end) - to_naive_utc(start)).total_seconds()
    return math.floor(seconds / 60)


def humanize_offset(minutes: int | None) -> str:
    """Return a compact label such as '45m', '2h' or '3 days'."""
    if minutes is None:
        return "Never"
    minutes = abs(minutes)
    if minutes == 0:
        return "At start"
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        return f"{minutes // 60}h"
    days = minutes // 1440
    return f"{days} day" if days == 1 else f"{days} days"


def describe_offset(minutes: int) -> str:
    """Describe an offset relative to the event start."""
    if minutes == 0:
        return "At start"
    direction = "before start" if minutes < 0 else "after start"
    return f"{humanize_offset(minutes)} {direction}"


def duration_between(start: datetime | None, end: datetime | None) -> str:
    """Return a short "2h 30m" style duration string."""
    if not start or not end:
        return ""
    seconds = max(int((to_naive_utc(end) - to_naive_utc(start)).total_seconds()), 0)
    if seconds == 0:
        return "less than 1 minute"
    minutes, sec = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if not parts:
        parts.append("<1m")
    return " ".join(parts)
