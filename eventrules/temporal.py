"""Start/end checks against the clock, lead time and maximum duration."""

from __future__ import annotations

from datetime import datetime

from .config import settings
from .utils import add_field_error, to_naive_utc


def validate_temporal(
    start_at: datetime,
    end_at: datetime,
    *,
    is_creation: bool,
    now: datetime,
) -> dict[str, str]:
    """Return field errors for the schedule of a candidate event.

    The lead-time rule only applies when the event is being created; an
    already persisted event may legitimately start close to (or before) now.
    """
    errors: dict[str, str] = {}
    start = to_naive_utc(start_at)
    end = to_naive_utc(end_at)
    reference = to_naive_utc(now)

    if is_creation and start < reference + settings.min_lead:
        add_field_error(
            errors,
            "start_at",
            f"Start must be in the future ({settings.min_lead_minutes} min buffer)",
        )
    if end <= start:
        add_field_error(errors, "end_at", "End must be after start")
    elif end - start > settings.max_duration:
        add_field_error(
            errors, "end_at", f"Max duration is {settings.max_duration_days} days"
        )
    return errors
