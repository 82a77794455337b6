# circularbuild/domain/entities.py
from dataclasses import dataclass
from enum import Enum


class ListingStatus(str, Enum):
    ACTIVE = "active"
    PROCURED = "procured"
    REMOVED = "removed"


class SaleType(str, Enum):
    DONATION = "donation"
    RESALE = "resale"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    name: str | None = None


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class MaterialEntry:
    type: str
    weight_lbs: float
    co2e_kg: float

    def as_dict(self) -> dict:
        return {"type": self.type, "weight_lbs": self.weight_lbs, "co2e_kg": self.co2e_kg}


@dataclass(frozen=True)
class MaterialSummary:
    weight_lbs: float = 0.0
    co2e_kg: float = 0.0


@dataclass
class DiversionMetrics:
    pounds: float = 0.0
    co2e_kg: float = 0.0
    listings: int = 0
