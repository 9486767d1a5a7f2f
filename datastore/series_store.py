from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, Iterable, Optional, Tuple

from models.records import Readings, SensorKey

KeyPredicate = Callable[[SensorKey], bool]


class SeriesStore:
    """In-memory, append-only time series keyed by sensor identity.

    A single lock guards the whole mapping: appends and snapshot iteration
    never interleave. Series are never evicted.
    """

    def __init__(self) -> None:
        self._series: Dict[SensorKey, Readings] = {}
        self._lock = Lock()

    def record(self, key: SensorKey, timestamp: datetime, value: float) -> None:
        with self._lock:
            self._append(key, timestamp, value)

    def record_pass(
        self,
        timestamp: datetime,
        readings: Iterable[Tuple[SensorKey, float]],
    ) -> int:
        """Append every reading of one poll pass under a single lock hold."""
        batch = list(readings)
        with self._lock:
            for key, value in batch:
                self._append(key, timestamp, value)
        return len(batch)

    def snapshot(self, predicate: Optional[KeyPredicate] = None) -> Dict[SensorKey, Readings]:
        """Return independent copies of every series whose key matches."""

        with self._lock:
            return {
                key: readings.copy()
                for key, readings in self._series.items()
                if predicate is None or predicate(key)
            }

    def keys(self) -> list[SensorKey]:
        with self._lock:
            return list(self._series)

    def point_counts(self) -> Dict[SensorKey, int]:
        with self._lock:
            return {key: len(readings) for key, readings in self._series.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._series)

    def _append(self, key: SensorKey, timestamp: datetime, value: float) -> None:
        readings = self._series.get(key)
        if readings is None:
            readings = self._series[key] = Readings()
        readings.append(timestamp, value)


@lru_cache
def build_default_store() -> SeriesStore:
    return SeriesStore()
