"""
Service-area geofence.

A plain bounding-box predicate applied to an acquired user location before it is
used as a feed origin. It is deliberately separate from proximity filtering: a
location outside the box is treated as "no usable location", not as a filter on
issues.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from civicreport.core.geo import GeoPoint, validate_point

OUTSIDE_SERVICE_AREA_MESSAGE = "Location detected outside the service area."


@dataclass(frozen=True)
class BoundingBox:
    south: float
    north: float
    west: float
    east: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError("south must be <= north")
        if self.west > self.east:
            raise ValueError("west must be <= east")

    def contains(self, point: Any) -> bool:
        p: GeoPoint = validate_point(point, label="point")
        return self.south <= p.latitude <= self.north and self.west <= p.longitude <= self.east


def check_origin(point: Any, box: BoundingBox | None) -> str | None:
    """Return an error message when `point` lies outside `box`, else None."""
    if box is None:
        return None
    if box.contains(point):
        return None
    return OUTSIDE_SERVICE_AREA_MESSAGE
