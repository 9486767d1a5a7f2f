"""SVG line charts of sensor series."""

from __future__ import annotations

import io
from datetime import datetime, tzinfo
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
# keep labels as <text> so the legend stays selectable
matplotlib.rcParams["svg.fonttype"] = "none"

import matplotlib.dates as mdates  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from models.records import NamedSeries  # noqa: E402

_DPI = 100
_LEGEND_WIDTH = 0.16


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def build_figure(series: Sequence[NamedSeries], width: int, height: int = 800, title: str = "") -> Figure:
    """Draw one line per series with the legend on the left.

    Each call gets its own ``Figure``, so concurrent requests never share
    pyplot state. Time labels are shown in the server's local time.
    """
    figure = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI)
    axes = figure.add_axes((_LEGEND_WIDTH + 0.02, 0.08, 0.98 - _LEGEND_WIDTH - 0.02, 0.86))

    for item in series:
        axes.plot(item.timestamps, item.values, label=item.name, linewidth=1.2)

    if title:
        axes.set_title(title, loc="left")
    axes.grid(True, linewidth=0.4, alpha=0.6)
    axes.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M:%S", tz=local_timezone()))
    if series:
        axes.legend(
            loc="upper right",
            bbox_to_anchor=(-0.06, 1.0),
            fontsize="small",
            frameon=False,
        )
    return figure


def render_svg(series: Sequence[NamedSeries], width: int, height: int = 800, title: str = "") -> bytes:
    buffer = io.BytesIO()
    build_figure(series, width, height=height, title=title).savefig(buffer, format="svg")
    return buffer.getvalue()
