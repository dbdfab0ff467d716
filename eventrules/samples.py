"""Development helpers for generating fake candidate events."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from faker import Faker

from .capacity import pair_capacity
from .models import CandidateEvent, Location, MeetingKind, ParticipationMode
from .presets import CAPACITY_SUGGESTIONS, JOIN_PRESETS, apply_join_preset
from .utils import utcnow

_lead_choices_minutes = [0, 3, 10, 30, 60, 180, 1440, 4320]
_duration_choices_minutes = [30, 45, 60, 90, 120, 240, 1440]
_cutoff_choices = [None, None, 0, 15, 30, 60, 1440]
_opens_choices = [None, None, 1440, 10080]
_late_choices = [None, 15, 30, 60, 120]


def fake_candidate(
    fake: Faker,
    rng: random.Random,
    *,
    now: datetime | None = None,
) -> CandidateEvent:
    """Return a plausible (not necessarily valid) candidate event."""
    now = now or utcnow()
    start = now + timedelta(minutes=rng.choice(_lead_choices_minutes))
    end = start + timedelta(minutes=rng.choice(_duration_choices_minutes))

    mode = rng.choice([ParticipationMode.PAIR, ParticipationMode.GROUP, ParticipationMode.GROUP])
    if mode == ParticipationMode.PAIR:
        min_value, max_value = pair_capacity()
    else:
        suggestion = rng.choice(list(CAPACITY_SUGGESTIONS.values()))
        min_value, max_value = suggestion.min, suggestion.max

    meeting_kind = rng.choice(list(MeetingKind))
    location = None
    online_url = None
    if meeting_kind != MeetingKind.ONLINE:
        location = Location(
            lat=float(fake.latitude()),
            lng=float(fake.longitude()),
            address=fake.street_address(),
            privacy_radius_km=rng.choice([None, 0.0, 1.0, 5.0]),
        )
    if meeting_kind != MeetingKind.ON_SITE:
        online_url = fake.url()

    candidate = CandidateEvent(
        start_at=start,
        end_at=end,
        mode=mode,
        min=min_value,
        max=max_value,
        meeting_kind=meeting_kind,
        online_url=online_url,
        location=location,
        join_opens_before_start_min=rng.choice(_opens_choices),
        join_cutoff_before_start_min=rng.choice(_cutoff_choices),
        allow_late_join=rng.random() < 0.5,
        late_join_cutoff_after_start_min=rng.choice(_late_choices),
    )
    if rng.random() < 0.25:
        candidate = apply_join_preset(candidate, rng.choice(list(JOIN_PRESETS)))
    return candidate


def generate_candidates(
    count: int = 5,
    *,
    seed: int | None = None,
    now: datetime | None = None,
) -> list[CandidateEvent]:
    """Generate ``count`` fake candidates; a seed makes the output repeatable."""
    if count < 0:
        raise ValueError("count must be >= 0")
    fake = Faker()
    rng = random.Random(seed)
    if seed is not None:
        fake.seed_instance(seed)
    return [fake_candidate(fake, rng, now=now) for _ in range(count)]
