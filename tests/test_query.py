"""Unit tests for chart selection, windowing and smoothing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas import ChartConfig
from datastore.series_store import SeriesStore
from models.durations import SECOND
from models.records import SensorKey, SensorType
from services.query import ChartQuery, moving_average, window_start

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _at(seconds: float) -> datetime:
    return BASE + timedelta(seconds=seconds)


def _key(label: str, sensor_type: SensorType = SensorType.temperature) -> SensorKey:
    return SensorKey(adapter="nct6798", name=label.lower(), label=label, type=sensor_type, source="test")


@pytest.fixture()
def store() -> SeriesStore:
    return SeriesStore()


def test_moving_average_uses_trailing_partial_windows() -> None:
    smoothed = moving_average([1, 2, 3, 4, 5], 3)

    assert smoothed[0] == 1
    assert smoothed[-1] == 4
    assert smoothed == [1.0, 1.5, 2.0, 3.0, 4.0]


def test_moving_average_period_one_is_identity() -> None:
    assert moving_average([3.0, 7.0, 5.0], 1) == [3.0, 7.0, 5.0]


def test_moving_average_rejects_zero_period() -> None:
    with pytest.raises(ValueError):
        moving_average([1.0], 0)


def test_window_start_is_first_point_strictly_after() -> None:
    stamps = [_at(0), _at(10), _at(20), _at(30)]

    assert window_start(stamps, _at(15)) == 2
    assert window_start(stamps, _at(20)) == 3
    assert window_start(stamps, _at(-1)) == 0
    assert window_start(stamps, _at(30)) == 4


def test_duration_window_keeps_recent_suffix(store: SeriesStore) -> None:
    key = _key("CPUTIN")
    for seconds in (0, 10, 20, 30):
        store.record(key, _at(seconds), float(seconds))
    config = ChartConfig(type="temperature", duration=15 * SECOND)

    series = ChartQuery(store).run(config, as_of=_at(30))

    assert len(series) == 1
    assert series[0].timestamps == [_at(20), _at(30)]
    assert series[0].values == [20.0, 30.0]


def test_zero_duration_returns_full_history(store: SeriesStore) -> None:
    key = _key("CPUTIN")
    for seconds in (0, 10, 20, 30):
        store.record(key, _at(seconds), float(seconds))

    series = ChartQuery(store).run(ChartConfig(type="temperature"), as_of=_at(10_000))

    assert series[0].values == [0.0, 10.0, 20.0, 30.0]


def test_series_older_than_window_is_empty_not_missing(store: SeriesStore) -> None:
    store.record(_key("CPUTIN"), _at(0), 40.0)
    config = ChartConfig(type="temperature", duration=5 * SECOND, avg_period=4)

    series = ChartQuery(store).run(config, as_of=_at(60))

    assert [item.name for item in series] == ["CPUTIN"]
    assert series[0].timestamps == []
    assert series[0].values == []


def test_fanspeed_config_never_returns_temperatures(store: SeriesStore) -> None:
    store.record(_key("CPUTIN"), _at(0), 40.0)
    store.record(_key("CPU_FAN", SensorType.fanspeed), _at(0), 1200.0)
    store.record(_key("mystery", SensorType.unknown), _at(0), 1.0)

    series = ChartQuery(store).run(ChartConfig(type="fanspeed"), as_of=_at(1))

    assert [item.name for item in series] == ["CPU_FAN"]


def test_filter_excludes_labels_even_when_type_matches(store: SeriesStore) -> None:
    store.record(_key("L1"), _at(0), 40.0)
    store.record(_key("L2"), _at(0), 41.0)

    series = ChartQuery(store).run(ChartConfig(type="temperature", filter=["L1"]), as_of=_at(1))

    assert [item.name for item in series] == ["L2"]


def test_unrecognized_type_selects_temperatures(store: SeriesStore) -> None:
    store.record(_key("CPUTIN"), _at(0), 40.0)
    store.record(_key("CPU_FAN", SensorType.fanspeed), _at(0), 1200.0)

    series = ChartQuery(store).run(ChartConfig(type="temprature"), as_of=_at(1))

    assert [item.name for item in series] == ["CPUTIN"]


def test_results_sorted_by_label(store: SeriesStore) -> None:
    for label in ("SYSTIN", "Core 1", "CPUTIN", "Core 0"):
        store.record(_key(label), _at(0), 40.0)

    series = ChartQuery(store).run(ChartConfig(type="temperature"), as_of=_at(1))

    assert [item.name for item in series] == ["CPUTIN", "Core 0", "Core 1", "SYSTIN"]


def test_smoothing_applies_after_window(store: SeriesStore) -> None:
    key = _key("CPUTIN")
    for seconds, value in enumerate([100.0, 1.0, 2.0, 3.0, 4.0, 5.0]):
        store.record(key, _at(seconds), value)
    config = ChartConfig(type="temperature", avg_period=3, duration=5 * SECOND)

    series = ChartQuery(store).run(config, as_of=_at(5))

    assert series[0].values == [1.0, 1.5, 2.0, 3.0, 4.0]


def test_smoothing_does_not_touch_store(store: SeriesStore) -> None:
    key = _key("CPUTIN")
    for seconds, value in enumerate([1.0, 3.0]):
        store.record(key, _at(seconds), value)

    ChartQuery(store).run(ChartConfig(type="temperature", avg_period=2), as_of=_at(2))

    assert store.snapshot()[key].values == [1.0, 3.0]


def test_empty_store_returns_no_series(store: SeriesStore) -> None:
    for config in (
        ChartConfig(type="temperature"),
        ChartConfig(type="fanspeed", avg_period=8, duration=300 * SECOND),
    ):
        assert ChartQuery(store).run(config, as_of=_at(0)) == []
