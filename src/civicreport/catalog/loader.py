"""
Issue catalog loader.

The catalog is a local JSON file (default: `data/issues/issues.json`) holding a
list of reported issues. We validate it into typed Pydantic models so the store,
the feed and the API can assume a consistent shape.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from civicreport.core.env import resolve_project_path
from civicreport.domain.models import Issue

_ISSUES_ADAPTER = TypeAdapter(list[Issue])


def load_issues(path: str | Path) -> list[Issue]:
    """Load and validate an issue catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return _ISSUES_ADAPTER.validate_python(payload)


def dump_issues(path: str | Path, issues: list[Issue]) -> None:
    """Write issues back to a catalog JSON file (atomic replace)."""
    resolved = resolve_project_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    payload = _ISSUES_ADAPTER.dump_python(issues, mode="json")
    tmp = resolved.with_suffix(resolved.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(resolved)
