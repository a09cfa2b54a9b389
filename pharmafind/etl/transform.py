"""Utilities for turning catalog rows into records and results into JSON rows."""

import logging
import math
from typing import Any, Dict, Optional

from pharmafind.models import GeoPoint, PharmacyRecord, PharmacyResult

logger = logging.getLogger(__name__)


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _safe_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _strip(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_pharmacy_record(row: Dict[str, Any]) -> PharmacyRecord:
    """Build a PharmacyRecord from a catalog row.

    Accepts either flat ``lat``/``lon`` keys or a nested ``location`` mapping
    with ``latitude``/``longitude``. Raises ValueError when the id, name or
    coordinates are unusable.
    """
    pharmacy_id = _safe_int(row.get("id"))
    if pharmacy_id is None:
        raise ValueError(f"catalog row has no integer id: {row!r}")

    name = _strip(row.get("name"))
    if not name:
        raise ValueError(f"catalog row {pharmacy_id} has no name")

    location = row.get("location") or {}
    lat = _safe_float(row.get("lat", location.get("latitude")))
    lon = _safe_float(row.get("lon", location.get("longitude")))
    if lat is None or lon is None:
        raise ValueError(f"catalog row {pharmacy_id} has no usable coordinates")

    return PharmacyRecord(
        id=pharmacy_id,
        name=name,
        address=_strip(row.get("address")),
        phone=_strip(row.get("phone")),
        location=GeoPoint(latitude=lat, longitude=lon),
    )


def to_result_row(result: PharmacyResult) -> Dict[str, Any]:
    record = result.record
    return {
        "id": record.id,
        "name": record.name,
        "address": record.address,
        "phone": record.phone,
        "lat": record.location.latitude,
        "lon": record.location.longitude,
        "distance": result.distance_km,
        "price": result.price,
        "price_unit": result.price_unit,
        "stock": result.stock.value,
        "is_best_option": result.is_best_option,
        "directions_url": result.directions_url,
    }
