from __future__ import annotations

from datetime import timedelta

import pytest

from eventrules.models import MeetingKind, ParticipationMode, Severity, TimelineKind
from eventrules.validator import (
    WIZARD_STEPS,
    can_leave_step,
    can_submit,
    errors_for_step,
    validate,
)


def test_valid_candidate(make_candidate, clock):
    outcome = validate(make_candidate(), is_creation=True, clock=clock)
    assert outcome.is_valid
    assert outcome.field_errors == {}
    assert outcome.advisories == ()
    assert [p.kind for p in outcome.timeline] == [TimelineKind.START, TimelineKind.END]


def test_pair_mode_normalizes_capacity(make_candidate, clock):
    candidate = make_candidate(mode=ParticipationMode.PAIR, min=4, max=9)
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert outcome.is_valid
    assert (outcome.normalized.min, outcome.normalized.max) == (2, 2)
    assert outcome.normalized.start_at == candidate.start_at
    assert outcome.normalized.location == candidate.location


@pytest.mark.parametrize(
    ("min_value", "max_value", "valid"),
    [(2, 50, True), (2, 2, True), (1, 10, False), (5, 51, False), (10, 5, False)],
)
def test_group_bounds_drive_validity(make_candidate, clock, min_value, max_value, valid):
    outcome = validate(
        make_candidate(min=min_value, max=max_value), is_creation=True, clock=clock
    )
    assert outcome.is_valid is valid


def test_creation_lead_time(make_candidate, clock, now):
    at_now = make_candidate(start_at=now, end_at=now + timedelta(hours=1))
    outcome = validate(at_now, is_creation=True, clock=clock)
    assert "start_at" in outcome.field_errors

    later = make_candidate(
        start_at=now + timedelta(minutes=6), end_at=now + timedelta(hours=1)
    )
    assert "start_at" not in validate(later, is_creation=True, clock=clock).field_errors


def test_edit_does_not_recheck_lead_time(make_candidate, clock, now):
    started = make_candidate(start_at=now - timedelta(minutes=10), end_at=now + timedelta(hours=1))
    assert validate(started, is_creation=False, clock=clock).is_valid


def test_late_cutoff_advisory_keeps_candidate_valid(make_candidate, clock):
    start = make_candidate().start_at
    candidate = make_candidate(
        end_at=start + timedelta(minutes=60),
        allow_late_join=True,
        late_join_cutoff_after_start_min=90,
    )
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert outcome.is_valid
    warnings = [a for a in outcome.advisories if a.severity == Severity.WARNING]
    assert len(warnings) == 1
    assert "late_join_cutoff_after_start_min" in warnings[0].related_fields


def test_join_window_conflict_blocks(make_candidate, clock):
    conflicting = make_candidate(
        join_opens_before_start_min=30, join_cutoff_before_start_min=60
    )
    outcome = validate(conflicting, is_creation=True, clock=clock)
    assert not outcome.is_valid
    assert "join_opens_before_start_min" in outcome.field_errors

    fine = make_candidate(join_opens_before_start_min=120, join_cutoff_before_start_min=60)
    assert validate(fine, is_creation=True, clock=clock).is_valid


def test_hybrid_without_place_or_link(make_candidate, clock):
    candidate = make_candidate(meeting_kind=MeetingKind.HYBRID, location=None, online_url=None)
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert outcome.field_errors == {
        "meeting_kind": "Provide either a valid location or an online link (or both)"
    }

    with_url = make_candidate(
        meeting_kind=MeetingKind.HYBRID, location=None, online_url="https://meet.example.com"
    )
    assert validate(with_url, is_creation=True, clock=clock).is_valid


def test_errors_from_components_are_merged(make_candidate, clock, now):
    candidate = make_candidate(
        start_at=now,
        end_at=now,
        min=1,
        meeting_kind=MeetingKind.ONLINE,
        online_url="",
        join_opens_before_start_min=10,
        join_cutoff_before_start_min=20,
    )
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert set(outcome.field_errors) == {
        "start_at",
        "end_at",
        "min",
        "online_url",
        "join_opens_before_start_min",
    }
    assert outcome.is_valid is False


def test_timeline_uses_event_duration(make_candidate, clock):
    start = make_candidate().start_at
    candidate = make_candidate(
        end_at=start + timedelta(minutes=90),
        join_opens_before_start_min=60,
        join_cutoff_before_start_min=15,
        allow_late_join=True,
        late_join_cutoff_after_start_min=10,
        mode=ParticipationMode.PAIR,
    )
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert [(p.kind.value, p.offset_min) for p in outcome.timeline] == [
        ("opens", -60),
        ("cutoff", -15),
        ("start", 0),
        ("lateCutoff", 10),
        ("end", 90),
    ]


def test_validate_is_idempotent(make_candidate, clock):
    candidate = make_candidate(
        allow_late_join=True, join_cutoff_before_start_min=30, min=1
    )
    first = validate(candidate, is_creation=True, clock=clock)
    second = validate(candidate, is_creation=True, clock=clock)
    assert first == second


def test_step_gating_filters_by_field_membership(make_candidate, clock):
    candidate = make_candidate(min=1, max=60)
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert set(errors_for_step(outcome, "basics")) == {"min", "max"}
    assert errors_for_step(outcome, "schedule") == {}
    assert not can_leave_step(outcome, "basics")
    assert can_leave_step(outcome, "schedule")
    assert can_leave_step(outcome, "privacy")


def test_nested_location_errors_belong_to_schedule_step(make_candidate, clock):
    location = make_candidate().location
    candidate = make_candidate(
        location=type(location)(lat=location.lat, lng=location.lng, privacy_radius_km=99.0)
    )
    outcome = validate(candidate, is_creation=True, clock=clock)
    assert set(errors_for_step(outcome, "schedule")) == {"location.privacy_radius_km"}


def test_unknown_step_raises(make_candidate, clock):
    outcome = validate(make_candidate(), is_creation=True, clock=clock)
    with pytest.raises(KeyError):
        errors_for_step(outcome, "review")
    assert set(WIZARD_STEPS) == {"basics", "schedule", "privacy"}


def test_can_submit_requires_valid_and_dirty(make_candidate, clock):
    valid = validate(make_candidate(), is_creation=True, clock=clock)
    invalid = validate(make_candidate(min=0), is_creation=True, clock=clock)
    assert can_submit(valid, dirty=True)
    assert not can_submit(valid, dirty=False)
    assert not can_submit(invalid, dirty=True)


def test_outcome_is_hashable_and_read_only(make_candidate, clock):
    outcome = validate(make_candidate(min=1), is_creation=True, clock=clock)
    assert hash(outcome) == hash(
        validate(make_candidate(min=1), is_creation=True, clock=clock)
    )
    with pytest.raises(TypeError):
        outcome.field_errors["min"] = "changed"


def test_privacy_step_has_no_candidate_errors(make_candidate, clock):
    outcome = validate(
        make_candidate(min=1, meeting_kind=MeetingKind.ONLINE), is_creation=True, clock=clock
    )
    assert errors_for_step(outcome, "privacy") == {}
    assert can_leave_step(outcome, "privacy")
