from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 10.0

_BASE_URL_ENV = "DASHBOARD_URL"
_TIMEOUT_ENV = "DASHBOARD_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def _read_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if timeout is None:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), DEFAULT_TIMEOUT)
    return CLIConfig(base_url=url.rstrip("/"), timeout=timeout)


def parse_listen_addr(addr: str) -> Tuple[str, int]:
    """Split ``":8080"`` or ``"127.0.0.1:8080"`` into a bind host and port.

    An empty host binds every interface.
    """
    host, sep, port_text = addr.strip().rpartition(":")
    if not sep:
        raise ValueError(f"listen address {addr!r} must look like HOST:PORT or :PORT")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ValueError(f"listen address {addr!r} has a non-numeric port") from exc
    if not 0 < port < 65536:
        raise ValueError(f"listen address {addr!r} has an out of range port")
    host = host.strip("[]") or "0.0.0.0"
    return host, port
