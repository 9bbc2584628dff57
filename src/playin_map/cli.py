from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .assembler import assemble
from .backend import SupabaseBackend
from .config import AppConfig
from .errors import RemoteError
from .fetcher import AggregationFetcher
from .geo_box import DEFAULT_PRECISION, DEFAULT_SPAN, quantize, to_bounding_box
from .schemas import Viewport

app = typer.Typer(add_completion=False, help="playin-map command line interface")
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@app.command("box")
def show_box(
    lat: float = typer.Option(..., help="Viewport center latitude"),
    lon: float = typer.Option(..., help="Viewport center longitude"),
    lat_delta: float = typer.Option(DEFAULT_SPAN, "--lat-delta"),
    lon_delta: float = typer.Option(DEFAULT_SPAN, "--lon-delta"),
    precision: int = typer.Option(DEFAULT_PRECISION, help="Decimals kept in the box key"),
) -> None:
    """Print the bounding box and cache key for a viewport."""
    box = to_bounding_box(
        Viewport(center_lat=lat, center_lon=lon, lat_delta=lat_delta, lon_delta=lon_delta)
    )
    console.print(
        f"lat [{box.min_lat:.6f}, {box.max_lat:.6f}] lon [{box.min_lon:.6f}, {box.max_lon:.6f}]"
    )
    console.print(f"key {quantize(box, precision)}")


@app.command("venues")
def list_venues(
    config_path: Path = typer.Option(..., "--config", exists=True, help="Path to YAML config"),
    lat: float = typer.Option(..., help="Viewport center latitude"),
    lon: float = typer.Option(..., help="Viewport center longitude"),
    lat_delta: float = typer.Option(DEFAULT_SPAN, "--lat-delta"),
    lon_delta: float = typer.Option(DEFAULT_SPAN, "--lon-delta"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Fetch the venues inside a viewport and print them with their activities."""
    _setup_logging(verbose)
    config = AppConfig.load(config_path)

    box = to_bounding_box(
        Viewport(center_lat=lat, center_lon=lon, lat_delta=lat_delta, lon_delta=lon_delta)
    )
    fetcher = AggregationFetcher(SupabaseBackend(config.backend), config.map.max_venues)
    try:
        aggregate = fetcher.fetch(box)
    except RemoteError as exc:
        console.print(f"[red]Fetch failed:[/red] {exc}")
        raise typer.Exit(code=1)

    venues = assemble(
        aggregate.venues,
        aggregate.tags,
        default_name=config.map.default_venue_name,
        default_emoji=config.map.default_emoji,
    )

    table = Table(title=f"Venues in {quantize(box, config.map.key_precision)}")
    table.add_column("Name")
    table.add_column("City")
    table.add_column("Coordinates")
    table.add_column("Activities")
    for venue in venues:
        table.add_row(
            venue.display_name,
            venue.city or "",
            f"{venue.latitude:.5f}, {venue.longitude:.5f}",
            " ".join(f"{a.emoji} {a.label}" for a in venue.activities),
        )
    console.print(table)
    console.print(f"Found {len(venues)} venues ({len(aggregate.venues)} rows fetched).")


if __name__ == "__main__":
    app()
