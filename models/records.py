"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class SensorType(str, Enum):
    """Kind of quantity a sensor feature reports."""

    unknown = "unknown"
    temperature = "temperature"
    fanspeed = "fanspeed"

    @classmethod
    def from_config(cls, text: str) -> "SensorType":
        """Map a chart config ``type`` string to a sensor type.

        Only ``"fanspeed"`` selects fans; any other string, including an
        empty or misspelled one, selects temperatures.
        """
        if text == cls.fanspeed.value:
            return cls.fanspeed
        return cls.temperature


WANTED_TYPES = frozenset({SensorType.temperature, SensorType.fanspeed})


@dataclass(frozen=True, slots=True)
class SensorKey:
    """Identity of one monitored metric."""

    adapter: str
    name: str
    label: str
    type: SensorType
    source: str


@dataclass(slots=True)
class Readings:
    """Parallel timestamp/value sequences for one sensor."""

    timestamps: List[datetime] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def append(self, timestamp: datetime, value: float) -> None:
        self.timestamps.append(timestamp)
        self.values.append(value)

    def copy(self) -> "Readings":
        return Readings(timestamps=list(self.timestamps), values=list(self.values))

    def __len__(self) -> int:
        return len(self.values)


@dataclass(slots=True)
class NamedSeries:
    """A labelled series ready to be drawn."""

    name: str
    timestamps: List[datetime]
    values: List[float]
