"""Great-circle distance helpers."""

from math import atan2, cos, radians, sin, sqrt

from pharmafind.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    dlat = lat2 - lat1
    dlon = radians(b.longitude - a.longitude)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # round-off can push h just outside [0, 1] for antipodal or identical points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))
