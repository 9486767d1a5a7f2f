from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

from sensors.source import Chip

_UNITS = {"temperature": "°C", "fanspeed": "RPM"}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def _format_value(value: float | None, sensor_type: str) -> str:
    if value is None:
        return "n/a"
    unit = _UNITS.get(sensor_type, "")
    return f"{value:.1f} {unit}".rstrip()


def render_chips(chips: Iterable[Chip]) -> None:
    shown = False
    for chip in chips:
        shown = True
        echo_heading(chip.adapter)
        for feature in chip.features:
            typer.echo(
                f"  {feature.label} ({feature.name}, {feature.type.value}): "
                f"{_format_value(feature.value, feature.type.value)}"
            )
    if not shown:
        typer.echo("No sensor chips detected.")


def render_series(items: List[Dict[str, Any]]) -> None:
    echo_heading("Collected series")
    if not items:
        typer.echo("No series collected yet.")
        return
    for item in items:
        typer.echo(
            f"  - {item.get('adapter')} / {item.get('label')} "
            f"[{item.get('type')}]: {item.get('points')} points"
        )
