# circularbuild/domain/listing_rules.py
import math
from datetime import UTC, date, datetime

from circularbuild.domain.entities import ListingStatus
from circularbuild.domain.errors import InvalidTransitionError, ValidationError

EDITABLE_FIELDS = ("available_until", "count", "description")

TERMINAL_STATUSES = frozenset({ListingStatus.PROCURED, ListingStatus.REMOVED})

EARTH_RADIUS_MILES = 3958.8


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_today() -> date:
    return utc_now().date()


def parse_target_status(value: str) -> ListingStatus:
    normalized = (value or "").strip().lower()
    try:
        status = ListingStatus(normalized)
    except ValueError:
        raise ValidationError(f"Unknown listing status '{value}'.") from None
    if status not in TERMINAL_STATUSES:
        raise InvalidTransitionError("Listings can only be marked procured or removed.")
    return status


def ensure_transition_allowed(current: str, target: ListingStatus) -> None:
    if current != ListingStatus.ACTIVE.value:
        raise InvalidTransitionError(
            f"Listing is already {current}; cannot change it to {target.value}."
        )


def ensure_editable(current: str) -> None:
    if current != ListingStatus.ACTIVE.value:
        raise InvalidTransitionError("Only active listings can be edited.")


def miles_between(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    """Great-circle distance in miles (haversine)."""
    d_lat = math.radians(b_lat - a_lat)
    d_lng = math.radians(b_lng - a_lng)
    lat1 = math.radians(a_lat)
    lat2 = math.radians(b_lat)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(h))
