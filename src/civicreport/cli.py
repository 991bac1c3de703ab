"""
CivicReport CLI entrypoint.

Quick local demos and debugging without the web client. The `nearby` command
delegates to `civicreport.feed.nearby.nearby_issues`, the same code path the API uses.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

import uvicorn

from civicreport.catalog.store import IssueStore
from civicreport.config.settings import get_settings
from civicreport.core.geo import GeoPoint, distance_km
from civicreport.core.logging import configure_logging
from civicreport.domain.models import ISSUE_CATEGORIES, ISSUE_STATUSES, NearbyQuery, normalize_status
from civicreport.feed.nearby import nearby_issues


def _load_store(path: str | None) -> IssueStore:
    settings = get_settings()
    return IssueStore.from_file(path or settings.data.issues_path)


def _cmd_distance(args: argparse.Namespace) -> int:
    d = distance_km(
        GeoPoint(latitude=args.from_lat, longitude=args.from_lon),
        GeoPoint(latitude=args.to_lat, longitude=args.to_lon),
    )
    if args.json:
        print(json.dumps({"distance_km": d}))
    else:
        print(f"{d:.3f} km")
    return 0


def _cmd_nearby(args: argparse.Namespace) -> int:
    """Handle the `nearby` subcommand."""
    settings = get_settings()
    store = _load_store(args.issues)
    query = NearbyQuery(
        latitude=args.lat,
        longitude=args.lon,
        radius_km=args.radius_km,
        category=args.category,
        status=args.status,
    )
    result = nearby_issues(query, settings=settings, issues=store.list())

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    if result.degraded:
        print(f"Location status: {result.location_status} ({result.location_message})")
        print(f"Showing all {len(result.results)} issues:")
    else:
        print(f"{len(result.results)} issues within {result.radius_km:g} km:")
    for i, item in enumerate(result.results, start=1):
        issue = item.issue
        dist = f"{item.distance_km:6.2f} km" if item.distance_km is not None else "     -   "
        print(f"{i:>2}. {dist}  [{issue.status}] {issue.title} ({issue.category})")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    store = _load_store(args.issues)
    issues = store.list(category=args.category, status=args.status, reporter_id=args.reporter_id)
    if args.json:
        print(json.dumps([i.model_dump(mode="json") for i in issues], ensure_ascii=False, indent=2))
        return 0
    for issue in issues:
        loc = issue.location
        flag = " [flagged]" if issue.is_flagged else ""
        print(
            f"{issue.id}  [{issue.status}] {issue.title} ({issue.category}) @ {loc.latitude:.4f},{loc.longitude:.4f}{flag}"
        )
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    uvicorn.run("civicreport.api.app:app", host=args.host, port=int(args.port), reload=bool(args.reload))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CivicReport CLI."""
    parser = argparse.ArgumentParser(prog="civicreport")
    sub = parser.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distance", help="Great-circle distance between two points (km).")
    dist.add_argument("--from-lat", required=True, type=float)
    dist.add_argument("--from-lon", required=True, type=float)
    dist.add_argument("--to-lat", required=True, type=float)
    dist.add_argument("--to-lon", required=True, type=float)
    dist.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    dist.set_defaults(func=_cmd_distance)

    near = sub.add_parser("nearby", help="Issues within a radius of a location, nearest first.")
    near.add_argument("--lat", type=float, default=None, help="Omit --lat/--lon to simulate no location")
    near.add_argument("--lon", type=float, default=None)
    near.add_argument("--radius-km", type=float, default=None, help="Defaults to proximity.default_radius_km")
    near.add_argument("--category", choices=ISSUE_CATEGORIES, default=None)
    near.add_argument("--status", type=normalize_status, choices=ISSUE_STATUSES, default=None)
    near.add_argument("--issues", type=str, default=None, help="Issue catalog JSON (defaults to data.issues_path)")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    lst = sub.add_parser("list", help="List issues, newest first.")
    lst.add_argument("--category", choices=ISSUE_CATEGORIES, default=None)
    lst.add_argument("--status", type=normalize_status, choices=ISSUE_STATUSES, default=None)
    lst.add_argument("--reporter-id", type=str, default=None, help="Only issues reported by this user")
    lst.add_argument("--issues", type=str, default=None, help="Issue catalog JSON (defaults to data.issues_path)")
    lst.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    lst.set_defaults(func=_cmd_list)

    srv = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    srv.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m civicreport.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except ValueError as e:
        parser.exit(2, f"error: {e}\n")


if __name__ == "__main__":
    raise SystemExit(main())
