"""Selection, time windowing and smoothing of stored series for one chart."""

from __future__ import annotations

from bisect import bisect_right
from collections import deque
from datetime import datetime, timedelta
from typing import Deque, List, Sequence

from app.schemas import ChartConfig
from datastore.series_store import SeriesStore
from models.records import NamedSeries, SensorKey, SensorType


def moving_average(values: Sequence[float], period: int) -> List[float]:
    """Trailing simple moving average.

    Each output averages the point itself and up to ``period - 1`` points
    before it, so the first outputs cover shorter windows.
    """
    if period < 1:
        raise ValueError("period must be at least 1")

    window: Deque[float] = deque()
    total = 0.0
    averaged: List[float] = []
    for value in values:
        window.append(value)
        total += value
        if len(window) > period:
            total -= window.popleft()
        averaged.append(total / len(window))
    return averaged


def window_start(timestamps: Sequence[datetime], min_time: datetime) -> int:
    """Index of the first timestamp strictly after ``min_time``."""
    return bisect_right(timestamps, min_time)


class ChartQuery:
    """Turns a chart configuration into the series to draw."""

    def __init__(self, store: SeriesStore) -> None:
        self.store = store

    def run(self, config: ChartConfig, as_of: datetime) -> List[NamedSeries]:
        sensor_type = SensorType.from_config(config.type)
        excluded = set(config.filter)

        def wanted(key: SensorKey) -> bool:
            return key.type == sensor_type and key.label not in excluded

        snapshot = self.store.snapshot(wanted)

        series: List[NamedSeries] = []
        for key, readings in snapshot.items():
            timestamps = readings.timestamps
            values = readings.values
            if config.duration:
                min_time = as_of - timedelta(microseconds=config.duration // 1000)
                start = window_start(timestamps, min_time)
                timestamps = timestamps[start:]
                values = values[start:]
            series.append(NamedSeries(name=key.label, timestamps=timestamps, values=values))

        series.sort(key=lambda item: item.name)

        if config.avg_period >= 1:
            for item in series:
                item.values = moving_average(item.values, config.avg_period)
        return series
