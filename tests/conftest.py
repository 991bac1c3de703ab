from __future__ import annotations

import json
from pathlib import Path

import pytest

from civicreport.domain.models import Issue, IssueLocation


def make_issue(issue_id: str, lat: float, lon: float, **kwargs) -> Issue:
    return Issue(
        id=issue_id,
        title=kwargs.pop("title", f"Issue {issue_id}"),
        location=IssueLocation(latitude=lat, longitude=lon),
        **kwargs,
    )


@pytest.fixture
def delhi_issues() -> list[Issue]:
    # Distances from Janpath (28.6139, 77.2090): 0, ~2.3, ~3.5, ~14.4 km.
    return [
        make_issue("1", 28.6139, 77.2090, category="road_damage", status="open",
                   created_at="2025-08-12T09:30:00+05:30", reporter_id="u2"),
        make_issue("2", 28.6328, 77.2197, category="lighting", status="in_progress",
                   created_at="2025-08-14T20:05:00+05:30", reporter_id="u7"),
        make_issue("3", 28.6448, 77.2167, category="sanitation", status="open",
                   created_at="2025-08-15T08:10:00+05:30", reporter_id="u2"),
        make_issue("4", 28.7041, 77.1025, category="vegetation", status="resolved",
                   created_at="2025-08-01T07:45:00+05:30"),
    ]


@pytest.fixture
def issues_file(tmp_path: Path, delhi_issues: list[Issue]) -> Path:
    path = tmp_path / "issues.json"
    path.write_text(json.dumps([i.model_dump(mode="json") for i in delhi_issues]), encoding="utf-8")
    return path
