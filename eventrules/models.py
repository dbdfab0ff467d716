"""Domain models for EventRules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class ParticipationMode(str, Enum):
    PAIR = "PAIR"
    GROUP = "GROUP"


class MeetingKind(str, Enum):
    ON_SITE = "ON_SITE"
    ONLINE = "ONLINE"
    HYBRID = "HYBRID"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    # Reserved; no rule emits it yet.
    ERROR = "ERROR"


class TimelineKind(str, Enum):
    OPENS = "opens"
    CUTOFF = "cutoff"
    START = "start"
    LATE_CUTOFF = "lateCutoff"
    END = "end"


# Tie-break order when two timeline points share an offset.
TIMELINE_ORDER: tuple[TimelineKind, ...] = (
    TimelineKind.OPENS,
    TimelineKind.CUTOFF,
    TimelineKind.START,
    TimelineKind.LATE_CUTOFF,
    TimelineKind.END,
)


@dataclass(frozen=True)
class Location:
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    privacy_radius_km: float | None = None


@dataclass(frozen=True)
class CandidateEvent:
    start_at: datetime
    end_at: datetime
    mode: ParticipationMode
    min: int
    max: int
    meeting_kind: MeetingKind
    online_url: str | None = None
    location: Location | None = None
    join_opens_before_start_min: int | None = None
    join_cutoff_before_start_min: int | None = None
    allow_late_join: bool = False
    late_join_cutoff_after_start_min: int | None = None

    def with_capacity(self, min_value: int, max_value: int) -> CandidateEvent:
        """Return a copy carrying the given capacity pair."""
        return replace(self, min=min_value, max=max_value)


@dataclass(frozen=True)
class Advisory:
    severity: Severity
    message: str
    related_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimelinePoint:
    kind: TimelineKind
    offset_min: int

    @property
    def sort_key(self) -> tuple[int, int]:
        return self.offset_min, TIMELINE_ORDER.index(self.kind)


@dataclass(frozen=True)
class CapacityResolution:
    min: int
    max: int
    field_errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CapacityState:
    """Current (mode, min, max) of a capacity form section."""

    mode: ParticipationMode
    min: int
    max: int

    @property
    def pair(self) -> tuple[int, int]:
        return self.min, self.max


@dataclass(frozen=True)
class JoinWindowAnalysis:
    field_errors: dict[str, str]
    advisories: tuple[Advisory, ...]
    timeline: tuple[TimelinePoint, ...]


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of one validation pass; field errors are a read-only mapping."""

    field_errors: Mapping[str, str] = field(hash=False)
    advisories: tuple[Advisory, ...]
    normalized: CandidateEvent
    is_valid: bool
    timeline: tuple[TimelinePoint, ...] = ()
