"""Nearest-pharmacy selection, best-option resolution and result ordering."""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional, Sequence, Tuple, Union

from pharmafind.core.directory import DirectorySource
from pharmafind.core.geo import haversine_km
from pharmafind.core.pricing import AvailabilitySynthesizer
from pharmafind.models import GeoPoint, PharmacyRecord, PharmacyResult, SortKey, StockStatus

logger = logging.getLogger(__name__)

DEFAULT_NEAREST_LIMIT = 10
# A closer pharmacy still wins while it costs less than this much more.
PRICE_TOLERANCE = 5
# A cheaper pharmacy still wins while it is less than this many km farther.
DISTANCE_TOLERANCE_KM = 1


class RankingInputError(ValueError):
    """Raised when a query is missing its location or medicine name."""


class QueryCancelled(RuntimeError):
    """Raised when the caller cancels a query before it completes."""


def select_nearest(
    directory: DirectorySource, location: GeoPoint, k: int
) -> List[Tuple[PharmacyRecord, float]]:
    """Return the ``k`` closest records with their distance in km, nearest first.

    Equal distances keep catalog order (``sorted`` is stable).
    """
    if k <= 0:
        return []
    with_distance = [(record, haversine_km(location, record.location)) for record in directory.all_records()]
    with_distance.sort(key=lambda pair: pair[1])
    return with_distance[:k]


def _beats(candidate: PharmacyResult, best: PharmacyResult) -> bool:
    if candidate.stock is StockStatus.IN_STOCK and best.stock is StockStatus.LOW_STOCK:
        return True
    if candidate.distance_km < best.distance_km and candidate.price < best.price + PRICE_TOLERANCE:
        return True
    if candidate.price < best.price and candidate.distance_km < best.distance_km + DISTANCE_TOLERANCE_KM:
        return True
    return False


def resolve_best(results: Sequence[PharmacyResult]) -> Optional[int]:
    """Pick the recommended pharmacy id with a single left-to-right greedy pass.

    Out-of-stock results are never chosen. Returns None when nothing is in stock.
    The outcome depends on input order; callers normally pass distance-ascending
    results.
    """
    best: Optional[PharmacyResult] = None
    for candidate in results:
        if candidate.stock is StockStatus.OUT_OF_STOCK:
            continue
        if best is None or _beats(candidate, best):
            best = candidate
    if best is None:
        logger.debug("No in-stock candidate among %d results", len(results))
        return None
    return best.id


def _sort_value(result: PharmacyResult, key: SortKey) -> Union[float, int]:
    if key is SortKey.DISTANCE:
        return result.distance_km
    if key is SortKey.PRICE:
        return result.price
    return result.stock.rank


def reorder(results: Sequence[PharmacyResult], sort_key: Union[SortKey, str]) -> List[PharmacyResult]:
    """Sort results for display with the best option pinned first.

    Two-key stable sort: best-option flag descending, then the chosen field.
    Raises ValueError for an unknown sort key.
    """
    key = SortKey(sort_key)
    return sorted(results, key=lambda r: (not r.is_best_option, _sort_value(r, key)))


class RankingEngine:
    """Runs one query end to end: nearest candidates, simulated availability, best option."""

    def __init__(
        self,
        directory: DirectorySource,
        synthesizer: Optional[AvailabilitySynthesizer] = None,
        nearest_limit: int = DEFAULT_NEAREST_LIMIT,
        latency_seconds: float = 0.0,
    ):
        self.directory = directory
        self.synthesizer = synthesizer or AvailabilitySynthesizer()
        self.nearest_limit = nearest_limit
        self.latency_seconds = latency_seconds

    def query(
        self,
        location: Optional[GeoPoint],
        medicine_name: Optional[str],
        cancel: Optional[threading.Event] = None,
    ) -> List[PharmacyResult]:
        if location is None:
            raise RankingInputError("location is required")
        if not medicine_name or not medicine_name.strip():
            raise RankingInputError("medicine name is required")
        medicine_name = medicine_name.strip()

        if self.latency_seconds:
            # stands in for the inventory source round-trip
            if cancel is None:
                time.sleep(self.latency_seconds)
            elif cancel.wait(self.latency_seconds):
                raise QueryCancelled(f"query for {medicine_name!r} was cancelled")

        results: List[PharmacyResult] = []
        for record, distance in select_nearest(self.directory, location, self.nearest_limit):
            availability = self.synthesizer.annotate(record, medicine_name)
            results.append(
                PharmacyResult(
                    record=record,
                    distance_km=round(distance, 1),
                    price=availability.price,
                    price_unit=availability.price_unit,
                    stock=availability.stock,
                )
            )

        best_id = resolve_best(results)
        for result in results:
            result.is_best_option = result.id == best_id

        if cancel is not None and cancel.is_set():
            raise QueryCancelled(f"query for {medicine_name!r} was cancelled")

        logger.info(
            "Ranked %d pharmacies for medicine=%s at (%.4f, %.4f); best_option=%s",
            len(results),
            medicine_name,
            location.latitude,
            location.longitude,
            best_id,
        )
        return results
