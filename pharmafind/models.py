"""Core data models shared by the pharmacy ranking pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lon}"


class StockStatus(str, Enum):
    """Availability of a medicine at a pharmacy, most desirable first."""

    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"

    @property
    def rank(self) -> int:
        return _STOCK_RANK[self]


_STOCK_RANK = {
    StockStatus.IN_STOCK: 0,
    StockStatus.LOW_STOCK: 1,
    StockStatus.OUT_OF_STOCK: 2,
}


class SortKey(str, Enum):
    DISTANCE = "distance"
    PRICE = "price"
    AVAILABILITY = "availability"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees. Values are not range-checked."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class PharmacyRecord:
    """Directory entry for a known pharmacy. Names may repeat across a chain, ids never do."""

    id: int
    name: str
    address: str
    phone: str
    location: GeoPoint


@dataclass(slots=True)
class PharmacyResult:
    """Per-query view of a pharmacy with distance, simulated price and stock."""

    record: PharmacyRecord
    distance_km: float
    price: float
    price_unit: str
    stock: StockStatus
    is_best_option: bool = False

    @property
    def id(self) -> int:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def directions_url(self) -> str:
        loc = self.record.location
        return _DIRECTIONS_URL.format(lat=loc.latitude, lon=loc.longitude)
