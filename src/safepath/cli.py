"""
SafePath CLI entrypoint.

This CLI is intended for quick local checks and demos without a UI.
It delegates hazard matching to `safepath.hazards.matcher` and route planning to
`safepath.planner.plan.plan_safe_route`.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from safepath.catalog.loader import dump_hazards, load_catalog, load_hazards
from safepath.config.settings import Settings, get_settings
from safepath.core.logging import configure_logging
from safepath.core.time import now_in, parse_datetime, to_local
from safepath.domain.models import GeoPoint, HazardCatalog, HazardMatchResult
from safepath.ingestion.errors import CollaboratorError
from safepath.ingestion.geocoding import build_geocoder
from safepath.planner.alerts import hazard_line
from safepath.planner.plan import (
    build_history,
    build_matcher,
    nearby_hazards_result,
    plan_safe_route,
    route_hazards_result,
)

logger = logging.getLogger(__name__)


def _catalog(args: argparse.Namespace, settings: Settings) -> HazardCatalog:
    if getattr(args, "catalog", None):
        return load_hazards(args.catalog)
    return load_catalog(settings)


def _read_route_file(path: str) -> list[tuple[float, float]]:
    """Read `[[lat, lon], ...]`, or a GeoJSON LineString / Feature (reversed from lon,lat)."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        geometry = payload.get("geometry", payload)
        if not isinstance(geometry, dict) or geometry.get("type") != "LineString":
            raise ValueError("GeoJSON route must be a LineString")
        return [(float(lat), float(lon)) for lon, lat in geometry.get("coordinates") or []]
    if isinstance(payload, list):
        return [(float(lat), float(lon)) for lat, lon in payload]
    raise ValueError(f"Unsupported route file format: {path}")


def _print_result(result: HazardMatchResult, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return
    print(result.summary)
    for h in result.hazards:
        print(f"  - {hazard_line(h)}")


def _cmd_hazards(args: argparse.Namespace) -> int:
    settings = get_settings()
    catalog = _catalog(args, settings)
    if args.json:
        print(json.dumps(dump_hazards(catalog), ensure_ascii=False, indent=2))
        return 0
    for h in catalog:
        print(f"{h.id:>4}  {h.type:<18} r={h.radius_meters:>6}m  [{h.active_hours or '-'}]  {h.name}")
    return 0


def _cmd_near(args: argparse.Namespace) -> int:
    """Handle the `near` subcommand (proximity + activity window)."""
    settings = get_settings()
    tz = settings.app.timezone
    at = to_local(parse_datetime(args.at, tz), tz) if args.at else now_in(tz)
    matcher = build_matcher(settings, _catalog(args, settings))
    result = nearby_hazards_result(matcher, GeoPoint(lat=args.lat, lon=args.lon), at, settings=settings)
    _print_result(result, as_json=args.json)
    return 0


def _cmd_check_route(args: argparse.Namespace) -> int:
    """Handle the `check-route` subcommand (proximity only)."""
    settings = get_settings()
    route = _read_route_file(args.route_file)
    matcher = build_matcher(settings, _catalog(args, settings))
    result = route_hazards_result(matcher, route, settings=settings)
    _print_result(result, as_json=args.json)
    return 0


def _cmd_plan(args: argparse.Namespace) -> int:
    settings = get_settings()
    geocoder = build_geocoder(settings, provider="static" if args.static_geocoder else None)
    plan = plan_safe_route(
        args.from_place,
        args.to_place,
        settings=settings,
        matcher=build_matcher(settings, _catalog(args, settings)),
        geocoder=geocoder,
        history=None if args.no_history else build_history(settings),
    )

    if args.json:
        print(json.dumps(plan.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    hours, minutes = divmod(round(plan.duration_min), 60)
    print(f"{plan.from_place} -> {plan.to_place}: {plan.distance_km:.2f} km, {hours}h {minutes}m")
    print(plan.summary)
    for h in plan.hazards:
        print(f"  - {hazard_line(h)}")
    if plan.steps:
        print("Steps:")
        for i, step in enumerate(plan.steps, start=1):
            print(f"  {i:>2}. {step}")
    if plan.navigation_url:
        print(f"Navigate: {plan.navigation_url}")
    return 0


def _cmd_recent(_: argparse.Namespace) -> int:
    history = build_history(get_settings())
    items = history.items()
    if not items:
        print("No recent routes found.")
        return 0
    for r in items:
        print(f"{r.from_place} -> {r.to_place}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the SafePath CLI."""
    parser = argparse.ArgumentParser(prog="safepath")
    parser.add_argument("--log-level", default=None, help="Override SAFEPATH_LOG_LEVEL for this run.")
    sub = parser.add_subparsers(dest="command", required=True)

    hz = sub.add_parser("hazards", help="List the loaded hazard catalog.")
    hz.add_argument("--catalog", default=None, help="Hazard catalog JSON (default: configured catalog)")
    hz.add_argument("--json", action="store_true", help="Output the catalog JSON")
    hz.set_defaults(func=_cmd_hazards)

    near = sub.add_parser("near", help="Active hazards around one location.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--at", default=None, help="ISO datetime (default: now in the app timezone)")
    near.add_argument("--catalog", default=None)
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_near)

    chk = sub.add_parser("check-route", help="Hazards along a route polyline file.")
    chk.add_argument("--route-file", required=True, help="[[lat, lon], ...] JSON or a GeoJSON LineString")
    chk.add_argument("--catalog", default=None)
    chk.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    chk.set_defaults(func=_cmd_check_route)

    plan = sub.add_parser("plan", help="Geocode, route and list hazards between two places.")
    plan.add_argument("--from", dest="from_place", required=True)
    plan.add_argument("--to", dest="to_place", required=True)
    plan.add_argument("--catalog", default=None)
    plan.add_argument(
        "--static-geocoder", action="store_true", help="Use the configured place table instead of Nominatim"
    )
    plan.add_argument("--no-history", action="store_true", help="Do not record this route in recent routes")
    plan.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    plan.set_defaults(func=_cmd_plan)

    rec = sub.add_parser("recent", help="Show recently planned routes.")
    rec.set_defaults(func=_cmd_recent)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m safepath.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (CollaboratorError, httpx.HTTPError) as e:
        logger.error("Upstream service failed: %s", e)
        print(f"Error: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
