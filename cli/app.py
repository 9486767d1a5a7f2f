from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError

from app.schemas import ChartConfig
from cli.client import ApiClient
from cli.config import load_config, parse_listen_addr
from cli.render import render_chips, render_series
from sensors.source import SensorSourceError, build_sensor_source
from settings import get_settings

app = typer.Typer(
    help="Hardware sensor dashboard: serve live charts or inspect sensors.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command("serve")
def serve_command(
    listen: Optional[str] = typer.Option(
        None,
        "--listen",
        "-l",
        help="Listen address as HOST:PORT or :PORT (defaults to DASHBOARD_LISTEN_ADDR or :8080).",
    ),
) -> None:
    """Poll sensors and serve the dashboard over HTTP."""
    addr = listen or get_settings().listen_addr
    try:
        host, port = parse_listen_addr(addr)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--listen") from exc

    typer.echo(f"Serving dashboard on http://{host}:{port}/")
    uvicorn.run("app.main:app", host=host, port=port, log_config=None)


@app.command("sensors")
def sensors_command(
    source: Optional[str] = typer.Option(
        None,
        "--source",
        help="Sensor backend: psutil or emulated (defaults to SENSOR_SOURCE).",
    ),
) -> None:
    """Print one pass of readings from the local sensor source."""
    kind = source or get_settings().sensor_source
    try:
        sensor_source = build_sensor_source(kind)
        sensor_source.open()
        chips = sensor_source.read_chips()
    except SensorSourceError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_chips(chips)


@app.command("series")
def series_command(
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard base URL (defaults to DASHBOARD_URL env or http://localhost:8080).",
    ),
) -> None:
    """List the series a running dashboard has collected."""
    client = ApiClient(load_config(base_url=base_url))
    try:
        render_series(client.list_sensors())
    finally:
        client.close()


@app.command("chart")
def chart_command(
    config: str = typer.Argument(..., help="Chart configuration as JSON."),
    out: Path = typer.Option(Path("chart.svg"), "--out", "-o", dir_okay=False, help="Where to write the SVG."),
    width: int = typer.Option(1000, "--width", min=1, help="Image width in pixels."),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard base URL (defaults to DASHBOARD_URL env or http://localhost:8080).",
    ),
) -> None:
    """Download one chart from a running dashboard."""
    try:
        chart_config = ChartConfig.model_validate_json(config)
    except ValidationError as exc:
        raise typer.BadParameter(f"invalid chart configuration: {exc.error_count()} error(s)") from exc

    client = ApiClient(load_config(base_url=base_url))
    try:
        svg = client.fetch_chart(chart_config.query(), width=width)
    finally:
        client.close()
    out.write_bytes(svg)
    typer.secho(f"Wrote {out} ({len(svg)} bytes)", fg=typer.colors.GREEN)
