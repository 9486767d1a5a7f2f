import logging
import time
from datetime import datetime, timezone
from typing import List

import pytest

from datastore.series_store import SeriesStore
from models.records import SensorKey, SensorType
from sensors.source import Chip, Feature, SensorSource, SensorSourceError
from services.poller import SensorPoller

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class StubSource(SensorSource):
    tag = "stub"

    def __init__(self, chips: List[Chip], fail_open: bool = False) -> None:
        self.chips = chips
        self.fail_open = fail_open
        self.opened = False
        self.reads = 0
        self.errors: List[Exception] = []

    def open(self) -> None:
        if self.fail_open:
            raise SensorSourceError("no sensors")
        self.opened = True

    def read_chips(self) -> List[Chip]:
        self.reads += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.chips


def _chip(*features: Feature, adapter: str = "nct6798-isa-0290") -> Chip:
    return Chip(adapter=adapter, features=features)


def _poller(source: StubSource, store: SeriesStore, interval: float = 0.01) -> SensorPoller:
    return SensorPoller(source=source, store=store, interval=interval)


def test_poll_once_records_wanted_positive_readings() -> None:
    source = StubSource(
        [
            _chip(
                Feature("temp1", "SYSTIN", SensorType.temperature, 34.0),
                Feature("temp3", "AUXTIN0", SensorType.temperature, 0.0),
                Feature("temp4", "AUXTIN1", SensorType.temperature, -12.0),
                Feature("fan1", "CPU_FAN", SensorType.fanspeed, 1100.0),
                Feature("fan2", "SYS_FAN", SensorType.fanspeed, None),
                Feature("intrusion0", "Chassis", SensorType.unknown, 1.0),
            )
        ]
    )
    store = SeriesStore()
    poller = _poller(source, store)

    try:
        recorded = poller.poll_once(now=NOW)
    finally:
        poller.shutdown()

    assert recorded == 2
    snapshot = store.snapshot()
    assert {key.label for key in snapshot} == {"SYSTIN", "CPU_FAN"}
    fan_key = SensorKey(
        adapter="nct6798-isa-0290",
        name="fan1",
        label="CPU_FAN",
        type=SensorType.fanspeed,
        source="stub",
    )
    assert snapshot[fan_key].values == [1100.0]


def test_poll_pass_shares_one_timestamp_across_chips() -> None:
    source = StubSource(
        [
            _chip(Feature("temp1", "Core 0", SensorType.temperature, 45.0), adapter="coretemp-isa-0000"),
            _chip(Feature("fan1", "CPU_FAN", SensorType.fanspeed, 900.0)),
        ]
    )
    store = SeriesStore()
    poller = _poller(source, store)

    try:
        poller.poll_once()
        poller.poll_once()
    finally:
        poller.shutdown()

    series = list(store.snapshot().values())
    assert len(series) == 2
    assert series[0].timestamps == series[1].timestamps
    assert series[0].timestamps[0] <= series[0].timestamps[1]


def test_start_fails_when_source_cannot_open() -> None:
    poller = _poller(StubSource([], fail_open=True), SeriesStore())

    try:
        with pytest.raises(SensorSourceError):
            poller.start()
        assert poller.running is False
    finally:
        poller.shutdown()


def test_background_loop_keeps_polling_after_read_errors(caplog) -> None:
    source = StubSource([_chip(Feature("temp1", "SYSTIN", SensorType.temperature, 34.0))])
    source.errors = [SensorSourceError("chip vanished"), OSError("i/o error")]
    store = SeriesStore()
    poller = _poller(source, store)

    with caplog.at_level(logging.DEBUG, logger="services.poller"):
        poller.start()
        try:
            deadline = time.monotonic() + 5
            while len(store) == 0 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert poller.running is True
        finally:
            poller.shutdown()

    assert source.opened is True
    assert source.reads >= 3
    assert len(store) == 1
    reasons = [getattr(record, "reason", None) for record in caplog.records]
    assert "chip vanished" in reasons


def test_shutdown_stops_the_loop() -> None:
    source = StubSource([_chip(Feature("temp1", "SYSTIN", SensorType.temperature, 34.0))])
    poller = _poller(source, SeriesStore())
    poller.start()
    poller.shutdown()

    deadline = time.monotonic() + 5
    while poller.running and time.monotonic() < deadline:
        time.sleep(0.01)

    assert poller.running is False
