from __future__ import annotations
import logging
import os
import re
import subprocess
from typing import Dict, Iterable, Optional, Set

from ..models import Listener
from ..utils.net import format_key
from .linux import Filter, _as_list

log = logging.getLogger(__name__)

NAME = "darwin"
NETSTAT = "/usr/sbin/netstat"

QUEUE_RE = re.compile(r"^(?P<qlen>\d+)/(?P<incqlen>\d+)/(?P<maxqlen>\d+)$")
ADDR_RE = re.compile(r"^(?P<ip>[0-9A-Fa-f.:%a-z]+)\.(?P<port>\d+)$")


def supported(netstat: str = NETSTAT) -> bool:
    return os.path.isfile(netstat) and os.access(netstat, os.X_OK)


def parse_address(token: str) -> str:
    """
    netstat separates the port with a dot:
      - '*.8080'          -> '0.0.0.0:8080'
      - '127.0.0.1.50876' -> '127.0.0.1:50876'
      - '::1.8080'        -> '[::1]:8080'
    Anything else is returned unchanged.
    """
    if token.startswith("*."):
        return f"0.0.0.0:{token[2:]}"
    m = ADDR_RE.match(token)
    if not m:
        return token
    return format_key(m.group("ip"), int(m.group("port")))


def parse_netstat_lines(lines: Iterable[str], addresses: Filter = None) -> Dict[str, Listener]:
    wanted: Optional[Set[str]] = None
    if addresses is not None:
        wanted = {a.lower() for a in _as_list(addresses)}
    stats: Dict[str, Listener] = {}
    for line in lines:
        if line.startswith(("Current", "Listen")) or not line.strip():
            continue
        fields = line.split()
        if len(fields) < 2:
            continue
        m = QUEUE_RE.match(fields[0])
        if not m:
            continue
        address = parse_address(fields[1])
        if wanted is not None and address not in wanted:
            continue
        # netstat -L has no per-connection state to attribute to listeners
        stats[address] = Listener(queue_size=int(m.group("qlen")), active_connections=0)
    return stats


def capture_tcp(addresses: Filter = None, netstat: str = NETSTAT) -> Dict[str, Listener]:
    try:
        out = subprocess.check_output([netstat, "-L", "-an", "-p", "tcp"],
                                      text=True, errors="replace", stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError) as e:
        log.debug("netstat unavailable: %s (%s)", netstat, e)
        return {}
    return parse_netstat_lines(out.splitlines(), addresses)


def capture(addresses: Filter = None, paths: Filter = None, netstat: str = NETSTAT) -> Dict[str, Listener]:
    # Unix domain sockets are not reported by netstat -L.
    if addresses is None and paths is not None:
        return {}
    return capture_tcp(addresses, netstat=netstat)
