"""
Proximity filtering for located records (issues near a user).

Given an origin and a radius, every candidate gets its great-circle distance
from the origin; candidates inside the radius (inclusive) are returned nearest
first. Sorting is stable, so equidistant records keep their input order.

When the origin is unknown the filter runs in degraded mode: all candidates come
back in input order without distances and the outcome is flagged so the caller
can render a "location unavailable" state.

Nothing is cached between calls; origin and radius are point-in-time inputs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

from civicreport.core.errors import ValidationError
from civicreport.core.geo import GeoPoint, haversine_km, validate_point

T = TypeVar("T")


def _default_location(record: Any) -> Any:
    return getattr(record, "location", None)


def _record_id(record: Any) -> str | None:
    rid = getattr(record, "id", None)
    return str(rid) if rid is not None else None


@dataclass(frozen=True)
class ProximityQuery:
    """An origin (None when location is unavailable) and an inclusive radius in km."""

    origin: GeoPoint | None
    radius_km: float


@dataclass(frozen=True)
class ProximityResult:
    distance_km: float
    within_radius: bool


@dataclass(frozen=True)
class RadiusMatch(Generic[T]):
    """One kept record; `distance_km` is None in degraded mode."""

    record: T
    distance_km: float | None


@dataclass(frozen=True)
class FilterOutcome(Generic[T]):
    results: list[RadiusMatch[T]]
    degraded: bool

    @property
    def records(self) -> list[T]:
        return [m.record for m in self.results]


def _validated_radius(radius_km: Any) -> float:
    try:
        r = float(radius_km)
    except (TypeError, ValueError):
        raise ValidationError(f"radius_km is not a number: {radius_km!r}", field="radius_km") from None
    if not math.isfinite(r) or r <= 0:
        raise ValidationError(f"radius_km must be a finite number > 0, got {radius_km!r}", field="radius_km")
    return r


def _candidate_point(record: Any, index: int, get_location: Callable[[Any], Any]) -> GeoPoint:
    rid = _record_id(record)
    label = f"records[{index}]" if rid is None else f"records[{index}] (id={rid})"
    return validate_point(get_location(record), label=f"{label}.location", record_id=rid)


def classify(
    query: ProximityQuery,
    record: Any,
    *,
    get_location: Callable[[Any], Any] = _default_location,
) -> ProximityResult:
    """Radius membership test for a single record (inclusive boundary)."""
    if query.origin is None:
        raise ValidationError("classify requires an origin", field="origin")
    origin = validate_point(query.origin, label="origin")
    radius = _validated_radius(query.radius_km)
    point = _candidate_point(record, 0, get_location)
    d = haversine_km(origin, point)
    return ProximityResult(distance_km=d, within_radius=d <= radius)


def filter_by_radius(
    query: ProximityQuery,
    records: Iterable[T],
    *,
    get_location: Callable[[T], Any] = _default_location,
    predicate: Callable[[T], bool] | None = None,
) -> FilterOutcome[T]:
    """Keep records within `query.radius_km` of the origin, nearest first.

    `predicate` (e.g. a category/status filter) runs before any distance work;
    callers may just as well filter the input or the output themselves.

    Raises `ValidationError` for a bad radius, a bad origin, or any candidate
    with malformed coordinates; NaN never reaches the `<=` comparison.
    """
    radius = _validated_radius(query.radius_km)
    # Keep input positions so validation errors point at the caller's record.
    candidates = [(i, r) for i, r in enumerate(records) if predicate is None or predicate(r)]

    if query.origin is None:
        return FilterOutcome(results=[RadiusMatch(record=r, distance_km=None) for _, r in candidates], degraded=True)

    origin = validate_point(query.origin, label="origin")
    matches: list[RadiusMatch[T]] = []
    for i, record in candidates:
        d = haversine_km(origin, _candidate_point(record, i, get_location))
        if d <= radius:
            matches.append(RadiusMatch(record=record, distance_km=d))

    # list.sort is stable: ties keep input order.
    matches.sort(key=lambda m: m.distance_km)
    return FilterOutcome(results=matches, degraded=False)
