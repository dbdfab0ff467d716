"""Pydantic request bodies and JSON serializers for EventRules.

Payload models are the parsing boundary: malformed types are rejected here,
before the rule engine ever sees a candidate.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .config import settings
from .models import (
    Advisory,
    CandidateEvent,
    CapacityState,
    Location,
    MeetingKind,
    ParticipationMode,
    TimelinePoint,
    ValidationOutcome,
)
from .utils import describe_offset, duration_between


class LocationPayload(BaseModel):
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    privacy_radius_km: float | None = None

    def to_location(self) -> Location:
        return Location(
            lat=self.lat,
            lng=self.lng,
            address=self.address,
            privacy_radius_km=self.privacy_radius_km,
        )


class CandidatePayload(BaseModel):
    start_at: datetime = Field(..., description="ISO datetime; naive values are UTC")
    end_at: datetime = Field(..., description="ISO datetime after start_at")
    mode: ParticipationMode = ParticipationMode.GROUP
    min: int = Field(default_factory=lambda: settings.default_group_min)
    max: int = Field(default_factory=lambda: settings.default_group_max)
    meeting_kind: MeetingKind = MeetingKind.ON_SITE
    online_url: str | None = None
    location: LocationPayload | None = None
    join_opens_before_start_min: int | None = None
    join_cutoff_before_start_min: int | None = None
    allow_late_join: bool = False
    late_join_cutoff_after_start_min: int | None = None

    def to_candidate(self) -> CandidateEvent:
        return CandidateEvent(
            start_at=self.start_at,
            end_at=self.end_at,
            mode=self.mode,
            min=self.min,
            max=self.max,
            meeting_kind=self.meeting_kind,
            online_url=self.online_url,
            location=self.location.to_location() if self.location else None,
            join_opens_before_start_min=self.join_opens_before_start_min,
            join_cutoff_before_start_min=self.join_cutoff_before_start_min,
            allow_late_join=self.allow_late_join,
            late_join_cutoff_after_start_min=self.late_join_cutoff_after_start_min,
        )


class CapacityTogglePayload(BaseModel):
    mode: ParticipationMode
    min: int
    max: int
    target_mode: ParticipationMode
    initial_min: int | None = Field(
        None, description="Capacity min the form was initialized with"
    )
    initial_max: int | None = Field(
        None, description="Capacity max the form was initialized with"
    )


def serialize_location(location: Location | None):
    if location is None:
        return None
    return {
        "lat": location.lat,
        "lng": location.lng,
        "address": location.address,
        "privacy_radius_km": location.privacy_radius_km,
    }


def serialize_candidate(candidate: CandidateEvent) -> dict[str, Any]:
    return {
        "start_at": candidate.start_at.isoformat(),
        "end_at": candidate.end_at.isoformat(),
        "duration": duration_between(candidate.start_at, candidate.end_at),
        "mode": candidate.mode.value,
        "min": candidate.min,
        "max": candidate.max,
        "meeting_kind": candidate.meeting_kind.value,
        "online_url": candidate.online_url,
        "location": serialize_location(candidate.location),
        "join_opens_before_start_min": candidate.join_opens_before_start_min,
        "join_cutoff_before_start_min": candidate.join_cutoff_before_start_min,
        "allow_late_join": candidate.allow_late_join,
        "late_join_cutoff_after_start_min": candidate.late_join_cutoff_after_start_min,
    }


def serialize_advisory(advisory: Advisory) -> dict[str, Any]:
    return {
        "severity": advisory.severity.value,
        "message": advisory.message,
        "related_fields": list(advisory.related_fields),
    }


def serialize_timeline(points: tuple[TimelinePoint, ...]) -> list[dict[str, Any]]:
    return [
        {
            "kind": point.kind.value,
            "offset_min": point.offset_min,
            "label": describe_offset(point.offset_min),
        }
        for point in points
    ]


def serialize_outcome(outcome: ValidationOutcome) -> dict[str, Any]:
    return {
        "is_valid": outcome.is_valid,
        "field_errors": dict(outcome.field_errors),
        "advisories": [serialize_advisory(a) for a in outcome.advisories],
        "normalized": serialize_candidate(outcome.normalized),
        "timeline": serialize_timeline(outcome.timeline),
    }


def serialize_capacity_state(state: CapacityState) -> dict[str, Any]:
    return {"mode": state.mode.value, "min": state.min, "max": state.max}
