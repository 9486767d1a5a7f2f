"""Hardware sensor sources that the poller reads chip by chip."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import psutil

from models.records import SensorType

logger = logging.getLogger(__name__)


class SensorSourceError(RuntimeError):
    """The sensor backend is unavailable or failed to initialize."""


@dataclass(frozen=True, slots=True)
class Feature:
    """One physical sensor on a chip. ``value`` is ``None`` when unreadable."""

    name: str
    label: str
    type: SensorType
    value: Optional[float]


@dataclass(frozen=True, slots=True)
class Chip:
    adapter: str
    features: Tuple[Feature, ...]


class SensorSource:
    """Base class for sensor backends."""

    tag = "unknown"

    def open(self) -> None:
        """Initialize the backend. Raises ``SensorSourceError`` on failure."""

    def read_chips(self) -> List[Chip]:
        raise NotImplementedError


class PsutilSensorSource(SensorSource):
    """Reads temperatures and fan speeds through psutil's hwmon bindings."""

    tag = "psutil"

    def open(self) -> None:
        missing = [
            name
            for name in ("sensors_temperatures", "sensors_fans")
            if not hasattr(psutil, name)
        ]
        if missing:
            raise SensorSourceError(
                f"psutil has no sensor support on this platform (missing {', '.join(missing)})."
            )

    def read_chips(self) -> List[Chip]:
        features: Dict[str, List[Feature]] = {}
        self._collect(features, "temp", SensorType.temperature, psutil.sensors_temperatures)
        self._collect(features, "fan", SensorType.fanspeed, psutil.sensors_fans)
        return [Chip(adapter=adapter, features=tuple(items)) for adapter, items in features.items()]

    @staticmethod
    def _collect(
        features: Dict[str, List[Feature]],
        prefix: str,
        sensor_type: SensorType,
        reader: Callable[[], Dict[str, Sequence]],
    ) -> None:
        try:
            entries_by_chip = reader()
        except OSError as exc:
            logger.debug("Sensor family unreadable", extra={"sensor": prefix, "reason": str(exc)})
            return

        for adapter, entries in entries_by_chip.items():
            chip_features = features.setdefault(adapter, [])
            for index, entry in enumerate(entries, start=1):
                name = f"{prefix}{index}"
                current = getattr(entry, "current", None)
                chip_features.append(
                    Feature(
                        name=name,
                        label=entry.label or name,
                        type=sensor_type,
                        value=float(current) if current is not None else None,
                    )
                )


# (adapter, feature name, label, type, baseline, amplitude, period seconds)
_EMULATED_FEATURES = (
    ("coretemp-isa-0000", "temp1", "Package id 0", SensorType.temperature, 48.0, 9.0, 40.0),
    ("coretemp-isa-0000", "temp2", "Core 0", SensorType.temperature, 45.0, 8.0, 35.0),
    ("coretemp-isa-0000", "temp3", "Core 1", SensorType.temperature, 46.0, 8.0, 29.0),
    ("nct6798-isa-0290", "temp1", "SYSTIN", SensorType.temperature, 34.0, 2.0, 120.0),
    ("nct6798-isa-0290", "temp2", "CPUTIN", SensorType.temperature, 41.0, 5.0, 60.0),
    ("nct6798-isa-0290", "temp3", "AUXTIN0", SensorType.temperature, 0.0, 0.0, 1.0),
    ("nct6798-isa-0290", "fan1", "CPU_FAN", SensorType.fanspeed, 1150.0, 250.0, 45.0),
    ("nct6798-isa-0290", "fan2", "SYS_FAN1", SensorType.fanspeed, 820.0, 60.0, 90.0),
    ("nct6798-isa-0290", "intrusion0", "Chassis intrusion", SensorType.unknown, 1.0, 0.0, 1.0),
)


class EmulatedSensorSource(SensorSource):
    """Synthetic chips with smooth periodic readings, for machines without sensors.

    ``AUXTIN0`` always reads 0, mimicking a disconnected header.
    """

    tag = "emulated"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at: Optional[float] = None

    def open(self) -> None:
        self._started_at = self._clock()

    def read_chips(self) -> List[Chip]:
        if self._started_at is None:
            raise SensorSourceError("Emulated sensor source was not opened.")
        elapsed = self._clock() - self._started_at

        chips: Dict[str, List[Feature]] = {}
        for adapter, name, label, sensor_type, baseline, amplitude, period in _EMULATED_FEATURES:
            value = baseline + amplitude * math.sin(2 * math.pi * elapsed / period)
            chips.setdefault(adapter, []).append(
                Feature(name=name, label=label, type=sensor_type, value=round(value, 2))
            )
        return [Chip(adapter=adapter, features=tuple(items)) for adapter, items in chips.items()]


def build_sensor_source(kind: str) -> SensorSource:
    if kind == PsutilSensorSource.tag:
        return PsutilSensorSource()
    if kind == EmulatedSensorSource.tag:
        return EmulatedSensorSource()
    raise SensorSourceError(f"Unknown sensor source {kind!r}.")
