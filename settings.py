from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_LISTEN_ADDR_ENV = "DASHBOARD_LISTEN_ADDR"
_SENSOR_SOURCE_ENV = "SENSOR_SOURCE"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_MS"
_CHART_HEIGHT_ENV = "CHART_HEIGHT"
_CHART_WIDTH_ENV = "CHART_DEFAULT_WIDTH"
_LOG_LEVEL_ENV = "LOG_LEVEL"

SENSOR_SOURCES = ("psutil", "emulated")


@dataclass(frozen=True)
class Settings:
    listen_addr: str
    sensor_source: str
    poll_interval_ms: int
    chart_height: int
    chart_default_width: int
    log_level: str

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000.0


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_sensor_source(default: str) -> str:
    candidate = _read_str_env(_SENSOR_SOURCE_ENV, default).lower()
    return candidate if candidate in SENSOR_SOURCES else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        listen_addr=_read_str_env(_LISTEN_ADDR_ENV, ":8080"),
        sensor_source=_read_sensor_source("psutil"),
        poll_interval_ms=_read_positive_int(_POLL_INTERVAL_ENV, 200),
        chart_height=_read_positive_int(_CHART_HEIGHT_ENV, 800),
        chart_default_width=_read_positive_int(_CHART_WIDTH_ENV, 1000),
        log_level=_read_log_level("INFO"),
    )
