"""
API routes.

Endpoints:
- GET    `/api/health`
- GET    `/api/issues`: list issues (category/status/reporter filters), newest first.
- GET    `/api/issues/nearby`: issues within a radius of the user, nearest first.
- GET    `/api/issues/{id}` / PUT / DELETE, POST `/api/issues`.
- POST   `/api/issues/{id}/vote`, `/api/issues/{id}/flag` (toggle).
- GET    `/api/distance`: great-circle distance between two points.
- GET    `/api/settings`: public proximity/geofence settings for clients.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query

from civicreport.catalog.store import IssueStore
from civicreport.config.settings import get_settings
from civicreport.core.errors import IssueNotFound
from civicreport.core.geo import GeoPoint as CoreGeoPoint, distance_km
from civicreport.domain.models import (
    Issue,
    IssueCategory,
    IssueCreate,
    IssueUpdate,
    NearbyIssuesResult,
    NearbyQuery,
    StatusFilter,
    VoteRequest,
)
from civicreport.feed.nearby import nearby_issues

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _store() -> IssueStore:
    settings = get_settings()
    return IssueStore.from_file(settings.data.issues_path, persist=settings.data.persist)


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})


def _not_found(e: IssueNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(e)})


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok", "issues": len(_store())}


@router.get("/api/issues", response_model=list[Issue])
def list_issues(
    category: IssueCategory | None = None,
    status: StatusFilter = None,
    reporter_id: str | None = None,
) -> list[Issue]:
    """List all issues, optionally filtered by category/status/reporter ("my reports")."""
    return _store().list(category=category, status=status, reporter_id=reporter_id)


@router.get("/api/issues/nearby", response_model=NearbyIssuesResult)
def get_nearby_issues(
    lat: float | None = Query(default=None),
    lon: float | None = Query(default=None),
    radius_km: float | None = Query(default=None),
    category: IssueCategory | None = None,
    status: StatusFilter = None,
) -> NearbyIssuesResult:
    """Issues within `radius_km` of (lat, lon); degraded (all issues) without a location."""
    try:
        query = NearbyQuery(latitude=lat, longitude=lon, radius_km=radius_km, category=category, status=status)
        return nearby_issues(query, settings=get_settings(), issues=_store().list())
    except ValueError as e:
        raise _bad_request(e) from e
    except Exception as e:
        logger.exception("Nearby feed failed")
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": str(e)},
        ) from e


@router.get("/api/issues/{issue_id}", response_model=Issue)
def get_issue(issue_id: str) -> Issue:
    try:
        return _store().get(issue_id)
    except IssueNotFound as e:
        raise _not_found(e) from e


@router.post("/api/issues", response_model=Issue, status_code=201)
def create_issue(payload: IssueCreate) -> Issue:
    return _store().add(payload)


@router.put("/api/issues/{issue_id}", response_model=Issue)
def update_issue(issue_id: str, payload: IssueUpdate) -> Issue:
    try:
        return _store().update(issue_id, payload)
    except IssueNotFound as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise _bad_request(e) from e


@router.post("/api/issues/{issue_id}/vote", response_model=Issue)
def vote_issue(issue_id: str, payload: VoteRequest) -> Issue:
    try:
        return _store().vote(issue_id, payload.direction)
    except IssueNotFound as e:
        raise _not_found(e) from e


@router.post("/api/issues/{issue_id}/flag", response_model=Issue)
def flag_issue(issue_id: str) -> Issue:
    """Toggle the moderation flag."""
    try:
        return _store().flag(issue_id)
    except IssueNotFound as e:
        raise _not_found(e) from e


@router.delete("/api/issues/{issue_id}")
def delete_issue(issue_id: str) -> dict:
    try:
        _store().delete(issue_id)
    except IssueNotFound as e:
        raise _not_found(e) from e
    return {"message": "Issue removed", "id": issue_id}


@router.get("/api/distance")
def get_distance(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> dict:
    """Great-circle distance (km) between two points."""
    try:
        d = distance_km(
            CoreGeoPoint(latitude=from_lat, longitude=from_lon),
            CoreGeoPoint(latitude=to_lat, longitude=to_lon),
        )
    except ValueError as e:
        raise _bad_request(e) from e
    return {"distance_km": d}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return settings clients need to render radius pickers and the service area."""
    settings = get_settings()
    return {
        "app": {"name": settings.app.name, "timezone": settings.app.timezone},
        "proximity": settings.proximity.model_dump(mode="json"),
        "geofence": settings.geofence.model_dump(mode="json"),
    }
