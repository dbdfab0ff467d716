"""Capacity canonicalization and the PAIR/GROUP mode toggle."""

from __future__ import annotations

from .config import settings
from .models import CapacityResolution, CapacityState, ParticipationMode
from .utils import add_field_error


def pair_capacity() -> tuple[int, int]:
    return settings.pair_capacity, settings.pair_capacity


def resolve_capacity(
    mode: ParticipationMode, requested_min: int, requested_max: int
) -> CapacityResolution:
    """Map the requested pair onto the canonical pair for ``mode``.

    PAIR always resolves to (2, 2) without complaint; the override is a
    normalization, not a rejection. GROUP keeps the requested values and
    reports each bound violation on the offending field.
    """
    if mode == ParticipationMode.PAIR:
        canonical_min, canonical_max = pair_capacity()
        return CapacityResolution(min=canonical_min, max=canonical_max)

    errors: dict[str, str] = {}
    if requested_min < settings.group_min_capacity:
        add_field_error(
            errors, "min", f"Minimum capacity is {settings.group_min_capacity}"
        )
    if requested_max > settings.group_max_capacity:
        add_field_error(
            errors, "max", f"Maximum capacity is {settings.group_max_capacity}"
        )
    if requested_min > requested_max:
        add_field_error(errors, "min", "Min must be less than or equal to max")
    return CapacityResolution(min=requested_min, max=requested_max, field_errors=errors)


def initial_capacity(
    mode: ParticipationMode,
    min_value: int | None = None,
    max_value: int | None = None,
) -> CapacityState:
    """Starting state of a capacity form; missing GROUP values use the configured defaults."""
    if mode == ParticipationMode.PAIR:
        canonical_min, canonical_max = pair_capacity()
        return CapacityState(mode=mode, min=canonical_min, max=canonical_max)
    default_min, default_max = settings.default_group_capacity
    return CapacityState(
        mode=mode,
        min=default_min if min_value is None else min_value,
        max=default_max if max_value is None else max_value,
    )


def toggle_mode(
    state: CapacityState,
    target: ParticipationMode,
    *,
    initial: tuple[int, int],
) -> CapacityState:
    """Apply a user mode selection to the capacity state.

    Switching to PAIR forces (2, 2) and drops the previous values. Switching to
    GROUP restores ``initial`` (the form's original defaults) only when the
    current pair is exactly (2, 2), the one signal that the values were set by
    a PAIR excursion rather than chosen by the user.
    """
    forced = pair_capacity()
    if target == ParticipationMode.PAIR:
        return CapacityState(mode=target, min=forced[0], max=forced[1])
    if state.pair == forced:
        return CapacityState(mode=target, min=initial[0], max=initial[1])
    return CapacityState(mode=target, min=state.min, max=state.max)
