"""Background polling of sensor chips into the series store."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from functools import lru_cache
from threading import Event
from typing import List, Optional, Tuple

from datastore.series_store import SeriesStore, build_default_store
from models.records import WANTED_TYPES, SensorKey
from sensors.source import SensorSource, SensorSourceError, build_sensor_source
from settings import get_settings

logger = logging.getLogger(__name__)


class SensorPoller:
    """Reads every chip once per interval and appends usable readings.

    Passes run one after another on a single worker thread. A failed pass is
    skipped; the next interval is the retry.
    """

    def __init__(
        self,
        source: SensorSource,
        store: SeriesStore,
        interval: float = 0.2,
    ) -> None:
        self.source = source
        self.store = store
        self.interval = interval
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sensor-poller")
        self._stop = Event()
        self._future: Optional[Future[None]] = None

    def start(self) -> None:
        """Open the source and begin polling. ``SensorSourceError`` is fatal."""
        if self._future is not None:
            return
        self.source.open()
        logger.info(
            "Sensor polling started every %.0f ms",
            self.interval * 1000,
            extra={"sensor": self.source.tag},
        )
        self._future = self.executor.submit(self._run)

    def poll_once(self, now: Optional[datetime] = None) -> int:
        """Run a single pass and return how many readings were recorded."""
        timestamp = now or datetime.now(timezone.utc)
        readings: List[Tuple[SensorKey, float]] = []

        for chip in self.source.read_chips():
            for feature in chip.features:
                if feature.type not in WANTED_TYPES:
                    continue
                # non-positive is the backend's "no data" marker
                if feature.value is None or feature.value <= 0:
                    continue
                key = SensorKey(
                    adapter=chip.adapter,
                    name=feature.name,
                    label=feature.label,
                    type=feature.type,
                    source=self.source.tag,
                )
                readings.append((key, feature.value))

        return self.store.record_pass(timestamp, readings)

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def shutdown(self) -> None:
        self._stop.set()
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except (SensorSourceError, OSError) as exc:
                logger.debug("Skipped sensor pass", extra={"reason": str(exc)})
            except Exception:  # the loop must outlive any single bad pass
                logger.exception("Unexpected error during sensor pass")
            self._stop.wait(self.interval)


@lru_cache
def build_default_poller() -> SensorPoller:
    """Factory that wires the configured sensor source to the default store."""
    settings = get_settings()
    source = build_sensor_source(settings.sensor_source)
    return SensorPoller(
        source=source,
        store=build_default_store(),
        interval=settings.poll_interval,
    )
