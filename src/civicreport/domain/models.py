"""
Domain models (Pydantic).

These types are the stable contract between layers:
- stored entities (`Issue`) and their request payloads (`IssueCreate`, `IssueUpdate`)
- the "issues near me" query and response (`NearbyQuery`, `NearbyIssuesResult`)

Coordinate ranges are enforced here so bad input is rejected at the API/CLI
boundary; the proximity core re-validates anything that reaches it another way.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

IssueCategory = Literal[
    "road_damage",
    "sanitation",
    "lighting",
    "graffiti",
    "sidewalk",
    "vegetation",
    "other",
]
IssueStatus = Literal["open", "in_progress", "resolved"]
IssuePriority = Literal["low", "medium", "high"]
LocationStatus = Literal["ok", "unavailable", "outside_service_area"]

ISSUE_CATEGORIES: tuple[str, ...] = get_args(IssueCategory)
ISSUE_STATUSES: tuple[str, ...] = get_args(IssueStatus)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_status(value: Any) -> Any:
    # Older payloads spell it "in-progress".
    if isinstance(value, str):
        return value.strip().lower().replace("-", "_")
    return value


NormalizedStatus = Annotated[IssueStatus, BeforeValidator(normalize_status)]
# Optional status filter for query parameters.
StatusFilter = Annotated[IssueStatus | None, BeforeValidator(normalize_status)]


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class IssueLocation(GeoPoint):
    address: str | None = None


class StatusLogEntry(BaseModel):
    status: NormalizedStatus
    timestamp: datetime = Field(default_factory=utcnow)


class Issue(BaseModel):
    """A reported civic issue."""

    id: str
    title: str = Field(..., min_length=1)
    description: str = ""
    category: IssueCategory = "other"
    status: NormalizedStatus = "open"
    priority: IssuePriority = "medium"
    location: IssueLocation
    photos: list[str] = Field(default_factory=list)
    reporter_id: str | None = None
    reporter_name: str | None = None
    is_anonymous: bool = False
    is_flagged: bool = False
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    status_log: list[StatusLogEntry] = Field(default_factory=list)


class IssueCreate(BaseModel):
    """Payload for reporting a new issue."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    category: IssueCategory = "other"
    priority: IssuePriority = "medium"
    location: IssueLocation
    photos: list[str] = Field(default_factory=list, max_length=5)
    reporter_id: str | None = None
    reporter_name: str | None = None
    is_anonymous: bool = False

    @field_validator("title")
    @classmethod
    def _strip_title(cls, title: str) -> str:
        title = title.strip()
        if not title:
            raise ValueError("title must not be blank")
        return title


class IssueUpdate(BaseModel):
    """Partial update; unset fields are left untouched."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    category: IssueCategory | None = None
    status: NormalizedStatus | None = None
    priority: IssuePriority | None = None
    location: IssueLocation | None = None
    photos: list[str] | None = None


class VoteRequest(BaseModel):
    direction: Literal["up", "down"]


class NearbyQuery(BaseModel):
    """An "issues near me" request. Leave both coordinates unset when location is unavailable."""

    latitude: float | None = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    longitude: float | None = Field(default=None, ge=-180, le=180, allow_inf_nan=False)
    radius_km: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    category: IssueCategory | None = None
    status: NormalizedStatus | None = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> "NearbyQuery":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    @property
    def origin(self) -> GeoPoint | None:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


class NearbyIssue(BaseModel):
    issue: Issue
    distance_km: float | None = None


class NearbyIssuesResult(BaseModel):
    """Issues within the radius (nearest first), or all issues when degraded."""

    generated_at: datetime
    origin: GeoPoint | None
    radius_km: float
    degraded: bool
    location_status: LocationStatus
    location_message: str | None = None
    results: list[NearbyIssue]
    meta: dict[str, Any] = Field(default_factory=dict)
