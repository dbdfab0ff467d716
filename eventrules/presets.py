"""Join-rule presets and capacity suggestions offered by the event form."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .models import CandidateEvent
from .utils import slugify


@dataclass(frozen=True)
class JoinPreset:
    key: str
    label: str
    description: str
    join_opens_before_start_min: int | None
    join_cutoff_before_start_min: int | None
    allow_late_join: bool
    late_join_cutoff_after_start_min: int | None


@dataclass(frozen=True)
class CapacitySuggestion:
    category: str
    min: int
    max: int
    label: str


JOIN_PRESETS: dict[str, JoinPreset] = {
    preset.key: preset
    for preset in (
        JoinPreset("casual", "Casual meetup", "Flexible, late join allowed", None, None, True, 60),
        JoinPreset("structured", "Structured event", "Closes 1h before start", None, 60, False, None),
        JoinPreset(
            "workshop",
            "Workshop",
            "Opens 7 days before, closes 24h before",
            10080,
            1440,
            False,
            None,
        ),
        JoinPreset("dropin", "Drop-in session", "Join anytime during event", None, None, True, None),
    )
}

CAPACITY_SUGGESTIONS: dict[str, CapacitySuggestion] = {
    suggestion.category: suggestion
    for suggestion in (
        CapacitySuggestion("coffee", 2, 4, "Coffee chat (2-4)"),
        CapacitySuggestion("lunch", 2, 6, "Lunch (2-6)"),
        CapacitySuggestion("dinner", 2, 8, "Dinner (2-8)"),
        CapacitySuggestion("boardgames", 3, 6, "Board games (3-6)"),
        CapacitySuggestion("coding", 4, 12, "Coding session (4-12)"),
        CapacitySuggestion("workshop", 5, 20, "Workshop (5-20)"),
        CapacitySuggestion("sports", 6, 20, "Sports (6-20)"),
        CapacitySuggestion("hiking", 4, 15, "Hiking (4-15)"),
        CapacitySuggestion("running", 3, 10, "Running (3-10)"),
        CapacitySuggestion("cycling", 3, 15, "Cycling (3-15)"),
        CapacitySuggestion("yoga", 5, 15, "Yoga (5-15)"),
        CapacitySuggestion("meditation", 3, 20, "Meditation (3-20)"),
        CapacitySuggestion("networking", 10, 50, "Networking (10-50)"),
        CapacitySuggestion("conference", 20, 50, "Conference (20-50)"),
        CapacitySuggestion("meetup", 5, 30, "Meetup (5-30)"),
    )
}


def get_join_preset(key: str) -> JoinPreset:
    normalized = (key or "").strip().lower()
    if normalized not in JOIN_PRESETS:
        raise ValueError(f"Unknown join preset: {key!r}")
    return JOIN_PRESETS[normalized]


def apply_join_preset(candidate: CandidateEvent, key: str) -> CandidateEvent:
    """Return ``candidate`` with the join-window fields of a preset."""
    preset = get_join_preset(key)
    return replace(
        candidate,
        join_opens_before_start_min=preset.join_opens_before_start_min,
        join_cutoff_before_start_min=preset.join_cutoff_before_start_min,
        allow_late_join=preset.allow_late_join,
        late_join_cutoff_after_start_min=preset.late_join_cutoff_after_start_min,
    )


def suggest_capacity(category: str | None) -> CapacitySuggestion | None:
    """Look up a suggested GROUP capacity for a category name or slug."""
    normalized = slugify(category or "").replace("-", "")
    return CAPACITY_SUGGESTIONS.get(normalized)
