"""Listener queue statistics from the kernel socket tables (Linux) or netstat -L (macOS)."""
from __future__ import annotations
from typing import Dict, Optional

from .collectors import select_backend
from .collectors.linux import Filter
from .models import Listener, to_json
from .utils.net import MalformedInput

__all__ = ["Listener", "MalformedInput", "backend_name", "capture", "supported", "to_json"]

# chosen once; the host platform does not change under a running process
_backend = select_backend()


def supported() -> bool:
    return _backend is not None


def backend_name() -> Optional[str]:
    return _backend.NAME if _backend is not None else None


def capture(addresses: Filter = None, paths: Filter = None, **options) -> Dict[str, Listener]:
    """
    Capture listener stats.

    addresses -- TCP address(es) such as "0.0.0.0:80" or ["[::]:443"]
    paths     -- unix socket path(s)

    With neither given every listener is reported; giving only one of them
    restricts the capture to that kind of socket. Returns {} when capture is
    not supported on this host.
    """
    if _backend is None:
        return {}
    return _backend.capture(addresses, paths, **options)
