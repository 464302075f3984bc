from __future__ import annotations
import platform
from types import ModuleType
from typing import Any, Dict, Optional

from . import darwin, linux


def select_backend(system: Optional[str] = None, proc_net: str = linux.PROC_NET,
                   netstat: str = darwin.NETSTAT) -> Optional[ModuleType]:
    system = system or platform.system()
    if system == 'Linux' and linux.supported(proc_net):
        return linux
    if system == 'Darwin' and darwin.supported(netstat):
        return darwin
    return None


def backend_options(backend: Optional[ModuleType], cfg) -> Dict[str, Any]:
    if backend is linux:
        return {"proc_net": cfg.proc_net}
    if backend is darwin:
        return {"netstat": cfg.netstat}
    return {}


from .loop import capture_once, collector_loop  # noqa: E402
