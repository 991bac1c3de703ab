from __future__ import annotations

import argparse
import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from civicreport.config.settings import get_settings
from civicreport.core.env import resolve_project_path
from civicreport.core.errors import ValidationError
from civicreport.core.geo import validate_point
from civicreport.feed.nearby import service_area


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Validate a CivicReport issue catalog file (offline).")
    p.add_argument("--issues", type=str, default=None, help="Defaults to data.issues_path from settings")
    args = p.parse_args(argv)

    settings = get_settings()
    path = resolve_project_path(args.issues or settings.data.issues_path)
    if not path.exists():
        print("Issue catalog not found:", path)
        return 2

    payload = _read_json(path)
    if not isinstance(payload, list):
        print("Invalid catalog shape: expected a list of issues.")
        return 2

    box = service_area(settings)
    seen: set[str] = set()
    duplicates: list[str] = []
    bad_rows: list[str] = []
    bad_coords: list[str] = []
    outside: list[str] = []

    for i, row in enumerate(payload):
        if not isinstance(row, dict) or not str(row.get("id") or "").strip():
            bad_rows.append(f"#{i}")
            continue
        issue_id = str(row["id"])
        if issue_id in seen:
            duplicates.append(issue_id)
        seen.add(issue_id)

        loc = row.get("location") if isinstance(row.get("location"), dict) else {}
        try:
            point = validate_point(
                SimpleNamespace(latitude=loc.get("latitude"), longitude=loc.get("longitude")),
                label=f"{issue_id}.location",
                record_id=issue_id,
            )
        except ValidationError as e:
            bad_coords.append(str(e))
            continue
        if box is not None and not box.contains(point):
            outside.append(issue_id)

    print("Catalog:", path)
    print("Issues:", len(payload))
    if duplicates:
        print("Duplicate ids:", len(duplicates), "example:", ", ".join(sorted(duplicates)[:8]))
    if bad_rows:
        print("Rows without id:", len(bad_rows), "example:", ", ".join(bad_rows[:8]))
    if bad_coords:
        print("Invalid coordinates:", len(bad_coords))
        for msg in bad_coords[:8]:
            print("  -", msg)
    if outside:
        print("Outside service area:", len(outside), "example:", ", ".join(outside[:8]))

    if duplicates or bad_rows or bad_coords:
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
