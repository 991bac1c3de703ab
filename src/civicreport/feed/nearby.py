from __future__ import annotations

# This module builds the "issues near me" feed.
# It wires together:
# - the request (NearbyQuery: optional user location, radius, category/status)
# - settings (default radius, allowed radii, service-area geofence)
# - the candidate set (issues from the store or the catalog file)
# - the proximity core (distance + radius filter, nearest first)
#
# A missing or out-of-area location is not an error: the feed degrades to the
# full (filtered) list without distances and says why in `location_status`.

import logging
import time
from typing import Any

from civicreport.catalog.loader import load_issues
from civicreport.catalog.store import issue_predicate
from civicreport.config.settings import Settings, get_settings
from civicreport.core.errors import ValidationError
from civicreport.core.geo import GeoPoint as CoreGeoPoint
from civicreport.core.geofence import BoundingBox, check_origin
from civicreport.core.proximity import ProximityQuery, filter_by_radius
from civicreport.domain.models import (
    GeoPoint,
    Issue,
    NearbyIssue,
    NearbyIssuesResult,
    NearbyQuery,
    utcnow,
)

logger = logging.getLogger(__name__)


def service_area(settings: Settings) -> BoundingBox | None:
    """Return the configured geofence box, or None when geofencing is disabled."""
    cfg = settings.geofence
    if not cfg.enabled:
        return None
    return BoundingBox(south=cfg.south, north=cfg.north, west=cfg.west, east=cfg.east)


def effective_radius_km(query: NearbyQuery, settings: Settings) -> float:
    cfg = settings.proximity
    radius = float(query.radius_km) if query.radius_km is not None else float(cfg.default_radius_km)
    if radius > cfg.max_radius_km:
        raise ValidationError(
            f"radius_km must be <= {cfg.max_radius_km:g}, got {radius:g}", field="radius_km"
        )
    if cfg.enforce_radius_choices and radius not in [float(c) for c in cfg.radius_choices_km]:
        choices = ", ".join(f"{c:g}" for c in cfg.radius_choices_km)
        raise ValidationError(f"radius_km must be one of: {choices}", field="radius_km")
    return radius


def nearby_issues(
    query: NearbyQuery,
    *,
    settings: Settings | None = None,
    issues: list[Issue] | None = None,
) -> NearbyIssuesResult:
    t0 = time.monotonic()
    settings = settings or get_settings()
    if issues is None:
        issues = load_issues(settings.data.issues_path)

    radius = effective_radius_km(query, settings)

    # Geofence the origin first; an origin outside the service area is treated like no origin.
    origin: GeoPoint | None = query.origin
    location_status = "ok"
    location_message: str | None = None
    if origin is None:
        location_status = "unavailable"
        location_message = "Location unavailable; showing all issues."
    else:
        location_message = check_origin(origin, service_area(settings))
        if location_message is not None:
            logger.info("Origin %.4f,%.4f outside service area", origin.latitude, origin.longitude)
            location_status = "outside_service_area"
            origin = None

    core_origin = (
        CoreGeoPoint(latitude=origin.latitude, longitude=origin.longitude) if origin is not None else None
    )
    outcome = filter_by_radius(
        ProximityQuery(origin=core_origin, radius_km=radius),
        issues,
        predicate=issue_predicate(category=query.category, status=query.status),
    )

    results = [NearbyIssue(issue=m.record, distance_km=m.distance_km) for m in outcome.results]
    meta: dict[str, Any] = {
        "candidates": len(issues),
        "returned": len(results),
        "filters": {"category": query.category, "status": query.status},
        "timings_ms": {"total": int((time.monotonic() - t0) * 1000)},
    }
    logger.debug(
        "Nearby feed: %d/%d issues (radius=%.1fkm degraded=%s)",
        len(results),
        len(issues),
        radius,
        outcome.degraded,
    )
    return NearbyIssuesResult(
        generated_at=utcnow(),
        origin=query.origin,
        radius_km=radius,
        degraded=outcome.degraded,
        location_status=location_status,
        location_message=location_message,
        results=results,
        meta=meta,
    )
