from __future__ import annotations

import math
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Any

from civicreport.core.errors import ValidationError

"""
Geospatial helpers.

A tiny geometry layer so the feed, API and CLI share one distance implementation
without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


def _coordinate(value: Any, *, label: str, name: str, limit: float, record_id: str | None) -> float:
    field = f"{label}.{name}"
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} is not a number: {value!r}", field=field, record_id=record_id) from None
    if not math.isfinite(v):
        raise ValidationError(f"{field} must be finite, got {v!r}", field=field, record_id=record_id)
    if v < -limit or v > limit:
        raise ValidationError(
            f"{field} must be within [-{limit:g}, {limit:g}], got {v!r}", field=field, record_id=record_id
        )
    return v


def validate_point(point: Any, *, label: str = "point", record_id: str | None = None) -> GeoPoint:
    """Return `point` as a validated `GeoPoint`.

    Accepts anything exposing `latitude`/`longitude` attributes (core points,
    Pydantic locations). Raises `ValidationError` naming the coordinate when a
    value is missing, NaN, infinite or out of range. The poles and +/-180
    longitude are valid.
    """
    if point is None:
        raise ValidationError(f"{label} is missing", field=label, record_id=record_id)
    lat = _coordinate(
        getattr(point, "latitude", None), label=label, name="latitude", limit=90.0, record_id=record_id
    )
    lon = _coordinate(
        getattr(point, "longitude", None), label=label, name="longitude", limit=180.0, record_id=record_id
    )
    if isinstance(point, GeoPoint) and point.latitude == lat and point.longitude == lon:
        return point
    return GeoPoint(latitude=lat, longitude=lon)


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km between two already-validated points."""
    lat1 = radians(a.latitude)
    lon1 = radians(a.longitude)
    lat2 = radians(b.latitude)
    lon2 = radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair outside [0, 1] near antipodes.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


def distance_km(a: Any, b: Any) -> float:
    """Validate both points and return the distance between them in km."""
    return haversine_km(validate_point(a, label="a"), validate_point(b, label="b"))
