from __future__ import annotations

import pytest

from eventrules.capacity import initial_capacity, resolve_capacity, toggle_mode
from eventrules.models import CapacityState, ParticipationMode

PAIR = ParticipationMode.PAIR
GROUP = ParticipationMode.GROUP


@pytest.mark.parametrize("requested", [(2, 2), (1, 50), (10, 3), (0, 0), (-5, 99)])
def test_pair_always_resolves_to_two_without_errors(requested):
    resolution = resolve_capacity(PAIR, *requested)
    assert (resolution.min, resolution.max) == (2, 2)
    assert resolution.field_errors == {}


@pytest.mark.parametrize("requested", [(2, 2), (2, 50), (5, 10), (50, 50)])
def test_group_within_bounds_is_kept(requested):
    resolution = resolve_capacity(GROUP, *requested)
    assert (resolution.min, resolution.max) == requested
    assert resolution.field_errors == {}


def test_group_min_below_two_flags_min():
    resolution = resolve_capacity(GROUP, 1, 10)
    assert resolution.field_errors == {"min": "Minimum capacity is 2"}
    assert (resolution.min, resolution.max) == (1, 10)


def test_group_max_above_fifty_flags_max():
    resolution = resolve_capacity(GROUP, 5, 51)
    assert resolution.field_errors == {"max": "Maximum capacity is 50"}


def test_group_min_above_max_flags_min():
    resolution = resolve_capacity(GROUP, 12, 8)
    assert set(resolution.field_errors) == {"min"}
    assert "less than or equal to max" in resolution.field_errors["min"]


def test_group_multiple_messages_on_min_are_joined():
    resolution = resolve_capacity(GROUP, 1, 0)
    assert resolution.field_errors["min"] == (
        "Minimum capacity is 2; Min must be less than or equal to max"
    )


def test_toggle_to_pair_forces_two_two():
    state = CapacityState(mode=GROUP, min=5, max=10)
    assert toggle_mode(state, PAIR, initial=(3, 8)) == CapacityState(PAIR, 2, 2)


def test_toggle_back_to_group_restores_original_defaults_not_previous_values():
    initial = (3, 8)
    state = CapacityState(mode=GROUP, min=5, max=10)
    as_pair = toggle_mode(state, PAIR, initial=initial)
    back = toggle_mode(as_pair, GROUP, initial=initial)
    assert back == CapacityState(GROUP, 3, 8)


def test_toggle_to_group_keeps_user_values_when_not_sentinel():
    state = CapacityState(mode=PAIR, min=4, max=6)
    assert toggle_mode(state, GROUP, initial=(3, 8)) == CapacityState(GROUP, 4, 6)


def test_toggle_to_group_from_group_two_two_is_treated_as_sentinel():
    state = CapacityState(mode=GROUP, min=2, max=2)
    assert toggle_mode(state, GROUP, initial=(3, 8)) == CapacityState(GROUP, 3, 8)


def test_initial_capacity_uses_configured_group_defaults():
    assert initial_capacity(GROUP) == CapacityState(GROUP, 2, 10)
    assert initial_capacity(GROUP, 4, 12) == CapacityState(GROUP, 4, 12)
    assert initial_capacity(PAIR, 7, 9) == CapacityState(PAIR, 2, 2)
