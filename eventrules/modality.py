"""Which of coordinates / online link a meeting kind requires."""

from __future__ import annotations

from .config import settings
from .models import Location, MeetingKind
from .utils import add_field_error, is_finite_number, is_http_url

ONLINE_URL_MESSAGE = "Online link is required for online meetings (http/https)"
INVALID_URL_MESSAGE = "Provide a valid URL (http/https)"
ON_SITE_MESSAGE = "Location coordinates are required for on-site meetings"
INVALID_COORDINATES_MESSAGE = "Location coordinates are out of range"
HYBRID_MESSAGE = "Provide either a valid location or an online link (or both)"


def has_coordinates(location: Location | None) -> bool:
    """True when both coordinates are finite and within range."""
    if location is None:
        return False
    lat, lng = location.lat, location.lng
    if not (is_finite_number(lat) and is_finite_number(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def _has_invalid_coordinate(location: Location | None) -> bool:
    """True when a supplied lat or lng is non-finite or out of range."""
    if location is None:
        return False
    for value, limit in ((location.lat, 90), (location.lng, 180)):
        if value is None:
            continue
        if not is_finite_number(value) or not -limit <= value <= limit:
            return True
    return False


def _check_privacy_radius(location: Location | None, errors: dict[str, str]) -> None:
    if location is None or location.privacy_radius_km is None:
        return
    radius = location.privacy_radius_km
    if not is_finite_number(radius) or not 0 <= radius <= settings.max_privacy_radius_km:
        add_field_error(
            errors,
            "location.privacy_radius_km",
            f"Privacy radius must be between 0 and {settings.max_privacy_radius_km:g} km",
        )


def validate_modality(
    meeting_kind: MeetingKind,
    online_url: str | None,
    location: Location | None,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    coords_ok = has_coordinates(location)
    url_ok = is_http_url(online_url)

    if meeting_kind == MeetingKind.ON_SITE:
        if not coords_ok:
            add_field_error(errors, "location", ON_SITE_MESSAGE)
        _check_privacy_radius(location, errors)
    elif meeting_kind == MeetingKind.ONLINE:
        if not url_ok:
            add_field_error(errors, "online_url", ONLINE_URL_MESSAGE)
    elif meeting_kind == MeetingKind.HYBRID:
        if not coords_ok and not url_ok:
            # The deficiency is the combination, so it belongs to the kind itself.
            add_field_error(errors, "meeting_kind", HYBRID_MESSAGE)
        if (online_url or "").strip() and not url_ok:
            add_field_error(errors, "online_url", INVALID_URL_MESSAGE)
        if _has_invalid_coordinate(location):
            add_field_error(errors, "location", INVALID_COORDINATES_MESSAGE)
        _check_privacy_radius(location, errors)
    return errors
