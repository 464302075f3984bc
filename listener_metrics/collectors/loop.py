from __future__ import annotations
import logging, time
from types import ModuleType
from typing import Dict, Optional

from ..config import CFG
from ..models import Listener
from ..snapshot import Snapshot

log = logging.getLogger(__name__)


def capture_once(cfg: CFG, snap: Snapshot, backend: Optional[ModuleType]) -> Dict[str, Listener]:
    from . import backend_options
    if backend is None:
        listeners: Dict[str, Listener] = {}
    else:
        listeners = backend.capture(cfg.addresses, cfg.paths, **backend_options(backend, cfg))
    with snap.lock:
        snap.listeners = listeners
        snap.captured_at = time.time()
        snap.backend = backend.NAME if backend else None
    log.debug("captured %d listeners", len(listeners))
    return listeners


def collector_loop(cfg: CFG, snap: Snapshot, interval: float):
    from . import select_backend
    backend = select_backend(proc_net=cfg.proc_net, netstat=cfg.netstat)
    if backend is None:
        log.warning("listener capture not supported on this host")
    while True:
        try:
            capture_once(cfg, snap, backend)
        except Exception:
            log.exception("capture failed, keeping previous snapshot")
        time.sleep(interval)
