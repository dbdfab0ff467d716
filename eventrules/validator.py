"""Composite validation of a candidate event plus wizard gating helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from types import MappingProxyType

from .capacity import resolve_capacity
from .join_window import analyze_join_window
from .modality import validate_modality
from .models import CandidateEvent, ValidationOutcome
from .temporal import validate_temporal
from .utils import duration_minutes, merge_field_errors, utcnow

# Use uvicorn's error logger so messages get the level prefix when served.
logger = logging.getLogger("uvicorn.error")

Clock = Callable[[], datetime]

WIZARD_STEPS: dict[str, frozenset[str]] = {
    "basics": frozenset({"mode", "min", "max"}),
    "schedule": frozenset(
        {
            "start_at",
            "end_at",
            "meeting_kind",
            "online_url",
            "location",
            "join_opens_before_start_min",
            "join_cutoff_before_start_min",
            "allow_late_join",
            "late_join_cutoff_after_start_min",
        }
    ),
    # Privacy fields live outside CandidateEvent; the form owns their errors.
    "privacy": frozenset({"visibility", "join_mode"}),
}


def validate(
    candidate: CandidateEvent,
    *,
    is_creation: bool,
    clock: Clock = utcnow,
) -> ValidationOutcome:
    """Run every rule over ``candidate`` and merge the results.

    Rules run independently. Errors on a shared field are concatenated in
    the order temporal, capacity, modality, join window.
    """
    temporal_errors = validate_temporal(
        candidate.start_at, candidate.end_at, is_creation=is_creation, now=clock()
    )
    capacity = resolve_capacity(candidate.mode, candidate.min, candidate.max)
    modality_errors = validate_modality(
        candidate.meeting_kind, candidate.online_url, candidate.location
    )
    join_window = analyze_join_window(
        candidate.join_opens_before_start_min,
        candidate.join_cutoff_before_start_min,
        candidate.allow_late_join,
        candidate.late_join_cutoff_after_start_min,
        duration_minutes(candidate.start_at, candidate.end_at),
        mode=candidate.mode,
    )

    field_errors = merge_field_errors(
        temporal_errors,
        capacity.field_errors,
        modality_errors,
        join_window.field_errors,
    )
    outcome = ValidationOutcome(
        field_errors=MappingProxyType(field_errors),
        advisories=join_window.advisories,
        normalized=candidate.with_capacity(capacity.min, capacity.max),
        is_valid=not field_errors,
        timeline=join_window.timeline,
    )
    logger.debug(
        "Validated candidate (creation=%s): %d field errors, %d advisories",
        is_creation,
        len(field_errors),
        len(outcome.advisories),
    )
    return outcome


def _field_in_step(field_path: str, step_fields: frozenset[str]) -> bool:
    return any(
        field_path == member or field_path.startswith(f"{member}.")
        for member in step_fields
    )


def errors_for_step(outcome: ValidationOutcome, step: str) -> dict[str, str]:
    """Return the subset of field errors owned by a wizard step."""
    step_fields = WIZARD_STEPS[step]
    return {
        field_path: message
        for field_path, message in outcome.field_errors.items()
        if _field_in_step(field_path, step_fields)
    }


def can_leave_step(outcome: ValidationOutcome, step: str) -> bool:
    return not errors_for_step(outcome, step)


def can_submit(outcome: ValidationOutcome, *, dirty: bool) -> bool:
    """Saving needs a valid candidate that differs from the persisted baseline."""
    return outcome.is_valid and dirty
