"""Shared pytest fixtures for EventRules."""

from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from eventrules import api
from eventrules.models import (
    CandidateEvent,
    Location,
    MeetingKind,
    ParticipationMode,
)

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def clock(now):
    """Deterministic clock for lead-time checks."""
    return lambda: now


@pytest.fixture()
def make_candidate(now):
    """Factory for a valid GROUP on-site candidate starting in one day."""

    def _make(**overrides) -> CandidateEvent:
        start = now + timedelta(days=1)
        candidate = CandidateEvent(
            start_at=start,
            end_at=start + timedelta(minutes=90),
            mode=ParticipationMode.GROUP,
            min=2,
            max=10,
            meeting_kind=MeetingKind.ON_SITE,
            online_url=None,
            location=Location(lat=52.23, lng=21.01, address="Main Square 1"),
        )
        return replace(candidate, **overrides)

    return _make


@pytest.fixture()
def client(now):
    """FastAPI test client with a frozen clock."""

    api.app.dependency_overrides[api.get_clock] = lambda: (lambda: now)
    with TestClient(api.app) as test_client:
        yield test_client
    api.app.dependency_overrides.clear()
