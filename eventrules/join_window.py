"""Join-window checks, advisories and the preview timeline."""

from __future__ import annotations

from .config import settings
from .models import (
    Advisory,
    JoinWindowAnalysis,
    ParticipationMode,
    Severity,
    TimelineKind,
    TimelinePoint,
)
from .utils import add_field_error

OPENS_FIELD = "join_opens_before_start_min"
CUTOFF_FIELD = "join_cutoff_before_start_min"
LATE_CUTOFF_FIELD = "late_join_cutoff_after_start_min"


def _check_offset_range(value: int | None, field_path: str, errors: dict[str, str]) -> None:
    if value is None:
        return
    limit = settings.max_join_offset_minutes
    if value < 0:
        add_field_error(errors, field_path, "Must be 0 or positive")
    elif value > limit:
        add_field_error(
            errors, field_path, f"Max {limit // 1440} days ({limit} minutes)"
        )


def build_timeline(
    opens_before_min: int | None,
    cutoff_before_min: int | None,
    allow_late_join: bool,
    late_cutoff_after_min: int | None,
    duration_min: int,
) -> tuple[TimelinePoint, ...]:
    """Return named offsets relative to the start, ordered for display."""
    points = [TimelinePoint(TimelineKind.START, 0), TimelinePoint(TimelineKind.END, duration_min)]
    if opens_before_min is not None:
        points.append(TimelinePoint(TimelineKind.OPENS, -opens_before_min))
    if cutoff_before_min is not None:
        points.append(TimelinePoint(TimelineKind.CUTOFF, -cutoff_before_min))
    if allow_late_join and late_cutoff_after_min is not None:
        points.append(TimelinePoint(TimelineKind.LATE_CUTOFF, late_cutoff_after_min))
    return tuple(sorted(points, key=lambda point: point.sort_key))


def analyze_join_window(
    opens_before_min: int | None,
    cutoff_before_min: int | None,
    allow_late_join: bool,
    late_cutoff_after_min: int | None,
    duration_min: int,
    *,
    mode: ParticipationMode,
) -> JoinWindowAnalysis:
    """Validate the join window and collect advisories.

    An unset offset means the window is unrestricted on that side and is
    always valid. Both pre-start offsets count minutes before the start, so
    the opening offset has to be the larger of the two.
    """
    errors: dict[str, str] = {}
    advisories: list[Advisory] = []

    _check_offset_range(opens_before_min, OPENS_FIELD, errors)
    _check_offset_range(cutoff_before_min, CUTOFF_FIELD, errors)
    if allow_late_join:
        _check_offset_range(late_cutoff_after_min, LATE_CUTOFF_FIELD, errors)

    if (
        opens_before_min is not None
        and cutoff_before_min is not None
        and opens_before_min <= cutoff_before_min
    ):
        add_field_error(
            errors,
            OPENS_FIELD,
            "Opening offset must represent an earlier instant than the cutoff offset",
        )

    if allow_late_join and late_cutoff_after_min is not None:
        if late_cutoff_after_min > duration_min:
            advisories.append(
                Advisory(
                    severity=Severity.WARNING,
                    message="Late-join cutoff falls after the event ends",
                    related_fields=(LATE_CUTOFF_FIELD, "end_at"),
                )
            )

    if (
        cutoff_before_min is not None
        and cutoff_before_min < settings.short_join_window_minutes
        and mode == ParticipationMode.GROUP
    ):
        advisories.append(
            Advisory(
                severity=Severity.WARNING,
                message="Short join window for a group event",
                related_fields=(CUTOFF_FIELD,),
            )
        )

    if allow_late_join and late_cutoff_after_min is None:
        advisories.append(
            Advisory(
                severity=Severity.INFO,
                message="Late join stays open until the event ends",
                related_fields=("allow_late_join",),
            )
        )

    timeline = build_timeline(
        opens_before_min,
        cutoff_before_min,
        allow_late_join,
        late_cutoff_after_min,
        duration_min,
    )
    return JoinWindowAnalysis(
        field_errors=errors, advisories=tuple(advisories), timeline=timeline
    )
