"""Route commands backed by the water-grid A* router."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional, Tuple

import typer

from sea_router.core.config import SeaRouterConfig, get_config, resolve_source
from sea_router.data.store import WaterGridStore
from sea_router.data.water_grid import GridLoadError
from sea_router.routing.router import SeaRouter, to_linestring

app = typer.Typer(help="Compute sea routes over the water grid")

ConfigOption = typer.Option(None, "--config", "-c", help="YAML config (defaults to configs/sea_router.yaml)")
GridOption = typer.Option(None, "--grid", help="Override the global grid source (path or URL)")
RegionalOption = typer.Option(None, "--regional", help="Override the regional grid source; 'none' disables it")


def parse_latlng(value: str) -> Tuple[float, float]:
    try:
        lat_s, lng_s = value.split(",")
        lat, lng = float(lat_s), float(lng_s)
    except ValueError as exc:
        raise typer.BadParameter(f"expected 'lat,lng', got {value!r}") from exc
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise typer.BadParameter(f"coordinate out of range: {value!r}")
    return lat, lng


def build_router(
    config_path: Optional[Path] = None,
    grid: Optional[str] = None,
    regional: Optional[str] = None,
) -> SeaRouter:
    """Load config and grids; a failed load leaves the router in fallback mode."""
    config: SeaRouterConfig = get_config(config_path)
    store = WaterGridStore.from_config(config.grid)
    if grid:
        store.global_source = resolve_source(grid)
    if regional:
        store.regional_source = None if regional.lower() == "none" else resolve_source(regional)
    try:
        asyncio.run(store.load())
    except GridLoadError as exc:
        typer.echo(f"Warning: water grid unavailable ({exc}); using straight lines", err=True)
    return SeaRouter(store, config)


def _feature(outcome) -> dict:
    return {
        "type": "Feature",
        "properties": {"distance_nm": outcome.distance_nm, "fallback": outcome.fallback},
        "geometry": to_linestring(outcome.path),
    }


@app.command()
def path(
    start: str = typer.Argument(..., help="start lat,lng"),
    end: str = typer.Argument(..., help="end lat,lng"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Path to save GeoJSON"),
    simplify: bool = typer.Option(True, "--simplify/--raw", help="Simplify the grid path"),
    config: Optional[Path] = ConfigOption,
    grid: Optional[str] = GridOption,
    regional: Optional[str] = RegionalOption,
) -> None:
    """Route between two points and print a GeoJSON Feature."""
    start_lat, start_lng = parse_latlng(start)
    end_lat, end_lng = parse_latlng(end)
    router = build_router(config, grid, regional)
    outcome = router.plan_route(start_lat, start_lng, end_lat, end_lng, simplify=simplify)
    feature = _feature(outcome)
    if output:
        output.write_text(json.dumps({"type": "FeatureCollection", "features": [feature]}, indent=2))
        typer.echo(f"Saved route to {output}")
    else:
        typer.echo(json.dumps(feature, indent=2))


@app.command()
def snap(
    point: str = typer.Argument(..., help="lat,lng"),
    config: Optional[Path] = ConfigOption,
    grid: Optional[str] = GridOption,
    regional: Optional[str] = RegionalOption,
) -> None:
    """Snap a point onto the nearest navigable cell."""
    lat, lng = parse_latlng(point)
    router = build_router(config, grid, regional)
    result = router.snap(lat, lng)
    typer.echo(json.dumps({"lat": result.lat, "lng": result.lng, "snapped": result.snapped, "radius": result.radius}))


@app.command()
def batch(
    entries: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of resolved entries"),
    output: Path = typer.Option(Path("routes.json"), "--output", "-o", help="Where to write route records"),
    config: Optional[Path] = ConfigOption,
    grid: Optional[str] = GridOption,
    regional: Optional[str] = RegionalOption,
) -> None:
    """Route every entry (fromLat/fromLng/toLat/toLng) and compare with logged distances."""
    try:
        records = json.loads(entries.read_text())
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{entries} is not valid JSON: {exc}") from exc
    if not isinstance(records, list):
        raise typer.BadParameter(f"{entries} must contain a JSON list")

    router = build_router(config, grid, regional)
    routes = []
    success = failed = 0
    for i, entry in enumerate(records):
        if not isinstance(entry, dict):
            typer.echo(f"  Skipping entry {i}: not an object", err=True)
            continue
        try:
            from_lat, from_lng = float(entry["fromLat"]), float(entry["fromLng"])
            to_lat, to_lng = float(entry["toLat"]), float(entry["toLng"])
        except (KeyError, TypeError, ValueError):
            typer.echo(f"  Skipping entry {entry.get('index', i)}: missing coordinates", err=True)
            continue

        outcome = router.plan_route(from_lat, from_lng, to_lat, to_lng)
        if outcome.fallback:
            failed += 1
        else:
            success += 1

        route_dist = round(outcome.distance_nm, 1) if outcome.distance_nm is not None else None
        try:
            logged = float(entry.get("distanceNm") or 0)
        except (TypeError, ValueError):
            logged = 0.0
        ratio = round(route_dist / logged, 2) if route_dist and logged > 0 else None

        routes.append({
            "index": entry.get("index", i),
            "from": entry.get("from"),
            "to": entry.get("to"),
            "loggedDistNm": logged,
            "routeDistNm": route_dist,
            "distRatio": ratio,
            "fallback": outcome.fallback,
            "route": to_linestring(outcome.path),
        })
        if (i + 1) % 50 == 0:
            typer.echo(f"  Processed {i + 1}/{len(records)}")

    output.write_text(json.dumps(routes, indent=2))
    typer.echo(f"Routes complete: {success} success, {failed} fallback-to-straight-line")
    typer.echo(f"Written {output} ({len(routes)} entries)")

    with_ratio = [r for r in routes if r["distRatio"] is not None]
    far_off = [r for r in with_ratio if r["distRatio"] < 0.5 or r["distRatio"] > 1.5]
    typer.echo("Distance validation:")
    typer.echo(f"  With sea-route distance: {len(with_ratio)}")
    typer.echo(f"  Close match (0.5-1.5x logged): {len(with_ratio) - len(far_off)}")
    typer.echo(f"  Far off (<0.5x or >1.5x): {len(far_off)}")
    if 0 < len(far_off) <= 20:
        for r in far_off:
            typer.echo(
                f"    {r['index']}: {r['from']} -> {r['to']} | logged: {r['loggedDistNm']}nm, "
                f"route: {r['routeDistNm']}nm, ratio: {r['distRatio']}"
            )
