"""Read-only pharmacy directory sources."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from pharmafind.core.config import get_settings
from pharmafind.etl.transform import to_pharmacy_record
from pharmafind.models import PharmacyRecord

logger = logging.getLogger(__name__)


class DirectoryError(ValueError):
    """Raised when a pharmacy catalog cannot be loaded."""


class DirectorySource(Protocol):
    def all_records(self) -> Sequence[PharmacyRecord]:
        ...


class StaticDirectory:
    """Immutable in-memory catalog, safe to share between concurrent queries."""

    def __init__(self, records: Iterable[PharmacyRecord]):
        frozen: Tuple[PharmacyRecord, ...] = tuple(records)
        seen = set()
        for record in frozen:
            if record.id in seen:
                raise DirectoryError(f"duplicate pharmacy id {record.id}")
            seen.add(record.id)
        self._records = frozen

    def all_records(self) -> Sequence[PharmacyRecord]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)


# Verified Bangalore pharmacies, grouped by area. Order is insertion order only.
BANGALORE_PHARMACIES: List[Dict[str, Any]] = [
    # Kengeri
    {"id": 21, "name": "Apollo Pharmacy", "address": "Mysore Road, Kengeri Satellite Town", "phone": "080-2848-1122", "lat": 12.9189, "lon": 77.4856},
    {"id": 22, "name": "Medplus Pharmacy", "address": "Kengeri Main Rd, Opposite Kengeri Bus Terminal", "phone": "080-2848-3344", "lat": 12.9155, "lon": 77.4808},
    {"id": 30, "name": "Sri Maruthi Pharma", "address": "1st Main Road, Kengeri Upanagara", "phone": "080-2848-5566", "lat": 12.9213, "lon": 77.4842},
    {"id": 31, "name": "HealthFirst Pharmacy", "address": "Kommaghatta Main Rd, Kengeri Hobli", "phone": "080-2848-7788", "lat": 12.9252, "lon": 77.4759},
    # Uttarahalli
    {"id": 23, "name": "Apollo Pharmacy", "address": "Uttarahalli Main Rd, Chikkalasandra", "phone": "080-2673-5050", "lat": 12.9077, "lon": 77.5451},
    {"id": 24, "name": "Sri Sai Medical & General Stores", "address": "Subramanyapura Main Road", "phone": "080-2639-1212", "lat": 12.9015, "lon": 77.5490},
    {"id": 32, "name": "MedPlus Pharmacy", "address": "Dr Vishnuvardhan Rd, AGS Layout", "phone": "080-2639-4455", "lat": 12.9058, "lon": 77.5401},
    {"id": 33, "name": "Jan Aushadhi Kendra", "address": "Padmanabhanagar, Near Uttarahalli", "phone": "080-2639-8899", "lat": 12.9125, "lon": 77.5523},
    # RR Nagar
    {"id": 25, "name": "Apollo Pharmacy", "address": "Near RR Nagar Arch, Mysore Road", "phone": "080-2860-9090", "lat": 12.9265, "lon": 77.5188},
    {"id": 26, "name": "Medplus Pharmacy", "address": "8th Cross, BEML Layout, RR Nagar", "phone": "080-2860-7070", "lat": 12.9303, "lon": 77.5102},
    {"id": 27, "name": "Dava Discount", "address": "Ideal Homes Township, RR Nagar", "phone": "080-2861-1234", "lat": 12.9331, "lon": 77.5145},
    {"id": 34, "name": "Apollo Pharmacy - BEML Layout", "address": "9th Main Rd, BEML Layout, RR Nagar", "phone": "080-2860-3030", "lat": 12.9298, "lon": 77.5113},
    # Banashankari
    {"id": 18, "name": "Apollo Pharmacy", "address": "24th Main Rd, Banashankari 2nd Stage", "phone": "080-2671-5555", "lat": 12.9251, "lon": 77.5469},
    {"id": 28, "name": "Wellness Forever", "address": "Outer Ring Rd, Banashankari 3rd Stage", "phone": "080-2679-8899", "lat": 12.9157, "lon": 77.5571},
    {"id": 29, "name": "MedPlus Pharmacy", "address": "Kathriguppe Main Rd, Banashankari 3rd Stage", "phone": "080-2672-2200", "lat": 12.9105, "lon": 77.5603},
    {"id": 36, "name": "Sri Guru Medicals", "address": "Near BDA Complex, BSK 2nd Stage", "phone": "080-2671-8888", "lat": 12.9285, "lon": 77.5504},
    {"id": 37, "name": "Vivek Pharma", "address": "Kadirenahalli Cross, Banashankari", "phone": "080-2671-9999", "lat": 12.9193, "lon": 77.5620},
    # Other areas
    {"id": 1, "name": "Apollo Pharmacy - Jayanagar", "address": "Jayanagar 9th Block, Bangalore", "phone": "080-2663-0919", "lat": 12.9248, "lon": 77.5843},
    {"id": 2, "name": "Wellness Forever - Koramangala", "address": "Koramangala 4th Block, Bangalore", "phone": "080-4110-2222", "lat": 12.9345, "lon": 77.6264},
    {"id": 3, "name": "MedPlus Pharmacy - Indiranagar", "address": "Indiranagar, 100 Feet Rd, Bangalore", "phone": "080-4092-7575", "lat": 12.9784, "lon": 77.6408},
]


def builtin_directory() -> StaticDirectory:
    return StaticDirectory(to_pharmacy_record(row) for row in BANGALORE_PHARMACIES)


def load_directory(path: str) -> StaticDirectory:
    """Load a catalog from a JSON array of ``{id, name, address, phone, lat, lon}`` rows."""
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            rows = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise DirectoryError(f"cannot read pharmacy catalog {path}: {exc}") from exc

    if not isinstance(rows, list):
        raise DirectoryError(f"pharmacy catalog {path} must be a JSON array")

    try:
        records = [to_pharmacy_record(row) for row in rows]
    except (AttributeError, ValueError) as exc:
        raise DirectoryError(f"invalid row in pharmacy catalog {path}: {exc}") from exc

    directory = StaticDirectory(records)
    logger.info("Loaded %d pharmacies from %s", len(directory), path)
    return directory


def get_directory(path: Optional[str] = None) -> StaticDirectory:
    """Return the configured catalog, falling back to the built-in one."""
    path = path or get_settings().directory_path
    if path:
        return load_directory(path)
    return builtin_directory()
