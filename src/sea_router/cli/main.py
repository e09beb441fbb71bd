"""Typer CLI for preprocessing and sea routing."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from sea_router.cli import preprocess_cmd, route_cmd

app = typer.Typer(help="Water-grid preprocessing and point-to-point sea routing")
app.add_typer(route_cmd.app, name="route")
app.add_typer(preprocess_cmd.app, name="preprocess")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log router details")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def info(
    config: Optional[Path] = route_cmd.ConfigOption,
    grid: Optional[str] = route_cmd.GridOption,
    regional: Optional[str] = route_cmd.RegionalOption,
) -> None:
    """Show the active configuration and the loaded grid layers."""
    router = route_cmd.build_router(config, grid, regional)
    cfg = router.config
    store = router.store

    typer.echo("=== Sea Router Configuration ===")
    typer.echo(f"Global source:   {store.global_source}")
    typer.echo(f"Regional source: {store.regional_source or '-'}")
    typer.echo(f"Snap radius:     {cfg.snap.max_radius_cells} cells")
    typer.echo(f"Max iterations:  {cfg.search.max_iterations}")
    typer.echo(f"Simplify:        {'on' if cfg.simplify.enabled else 'off'} ({cfg.simplify.tolerance_cells} cells)")

    typer.echo("")
    typer.echo("=== Grid Layers ===")
    if not store.loaded:
        typer.echo("Global grid: ✗ not loaded")
        return
    layers = [store.global_grid, *store.regions]
    for layer in layers:
        spec = layer.spec
        typer.echo(
            f"{layer.name}: {spec.cols}x{spec.rows} @ {spec.resolution} deg, "
            f"lat {spec.min_lat:g}..{spec.max_lat:g}, lng {spec.min_lng:g}..{spec.max_lng:g}, "
            f"water {layer.water_fraction:.1%}"
        )


if __name__ == "__main__":
    app()
