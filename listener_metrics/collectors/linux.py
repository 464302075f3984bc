from __future__ import annotations
import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..matching import attribute_connections
from ..models import Listener, TcpRecord
from ..utils.net import decode_ipv4, decode_ipv6, decode_port, decode_state, format_key

log = logging.getLogger(__name__)

NAME = "linux"
PROC_NET = "/proc/net"

# sl local_address rem_address st tx_queue:rx_queue ...
TCP_LINE_RE = re.compile(
    r"^\s*\d+:\s+(?P<lip>[0-9A-Fa-f]+):(?P<lport>[0-9A-Fa-f]+)\s+"
    r"(?P<rip>[0-9A-Fa-f]+):(?P<rport>[0-9A-Fa-f]+)\s+(?P<state>[0-9A-Fa-f]+)\s+"
    r"(?P<tx>[0-9A-Fa-f]+):(?P<rx>[0-9A-Fa-f]+)")

# include/uapi/linux/net.h
SS_CONNECTING = 0x02
SS_CONNECTED = 0x03

# Num RefCount Protocol Flags Type St Inode [Path]
UNIX_MIN_FIELDS = 7
UNIX_STATE_FIELD = 5
UNIX_PATH_FIELD = 7

Filter = Union[str, Sequence[str], None]


def _as_list(value: Filter) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    return list(value)


def supported(proc_net: str = PROC_NET) -> bool:
    return os.access(os.path.join(proc_net, "tcp"), os.R_OK)


def parse_tcp_line(line: str, ipv6: bool = False) -> Optional[TcpRecord]:
    m = TCP_LINE_RE.match(line)
    if not m:
        return None
    lip = m.group("lip")
    if len(lip) != (32 if ipv6 else 8):
        return None
    ip = decode_ipv6(lip) if ipv6 else decode_ipv4(lip)
    return TcpRecord(local=format_key(ip, decode_port(m.group("lport"))),
                     state=decode_state(m.group("state")),
                     rx_queue=int(m.group("rx"), 16))


def parse_tcp_table(lines: Iterable[str], ipv6: bool = False,
                    addresses: Filter = None) -> Tuple[Dict[str, Listener], List[str]]:
    """
    First pass over /proc/net/tcp{,6}: listening sockets keyed by address
    (rx_queue of a LISTEN socket is its accept backlog) and the local
    addresses of established connections, left for the matcher.
    """
    wanted: Optional[Set[str]] = None
    if addresses is not None:
        wanted = {a.lower() for a in _as_list(addresses)}
    listeners: Dict[str, Listener] = {}
    connections: List[str] = []
    for line in lines:
        if line.lstrip().startswith("sl"):
            continue
        rec = parse_tcp_line(line, ipv6=ipv6)
        if rec is None:
            continue
        if rec.state == "listen":
            if wanted is not None and rec.local not in wanted:
                continue
            listeners[rec.local] = Listener(queue_size=rec.rx_queue, active_connections=0)
        elif rec.state == "established":
            connections.append(rec.local)
    return listeners, connections


def capture_tcp_file(file: str, addresses: Filter = None, ipv6: bool = False) -> Dict[str, Listener]:
    try:
        with open(file, "r", encoding="ascii", errors="replace") as f:
            listeners, connections = parse_tcp_table(f, ipv6=ipv6, addresses=addresses)
    except OSError as e:
        log.debug("tcp table unavailable: %s (%s)", file, e)
        return {}
    return attribute_connections(listeners, connections)


def capture_tcp(addresses: Filter = None, proc_net: str = PROC_NET) -> Dict[str, Listener]:
    stats: Dict[str, Listener] = {}
    stats.update(capture_tcp_file(os.path.join(proc_net, "tcp"), addresses, ipv6=False))
    stats.update(capture_tcp_file(os.path.join(proc_net, "tcp6"), addresses, ipv6=True))
    return stats


def parse_unix_table(lines: Iterable[str], paths: Filter = None) -> Dict[str, Listener]:
    """
    /proc/net/unix has no separate listener rows: each row carries its bound
    path, so CONNECTING rows count as queued and CONNECTED rows as active.
    The bound (unconnected) socket itself only creates the zero entry.
    """
    wanted = set(_as_list(paths)) if paths is not None else None
    stats: Dict[str, Listener] = {}
    for line in lines:
        line = line.strip()
        if line.startswith("Num"):
            continue
        fields = line.split()
        if len(fields) < UNIX_MIN_FIELDS:
            continue
        path = " ".join(fields[UNIX_PATH_FIELD:])
        if wanted is not None and path not in wanted:
            continue
        if not path:
            continue
        try:
            state = int(fields[UNIX_STATE_FIELD], 16)
        except ValueError:
            continue
        entry = stats.setdefault(path, Listener.zero())
        if state == SS_CONNECTING:
            entry.queue_size += 1
        elif state == SS_CONNECTED:
            entry.active_connections += 1
    return stats


def capture_unix(paths: Filter = None, file: Optional[str] = None,
                 proc_net: str = PROC_NET) -> Dict[str, Listener]:
    file = file or os.path.join(proc_net, "unix")
    try:
        with open(file, "r", encoding="utf-8", errors="surrogateescape") as f:
            return parse_unix_table(f, paths)
    except OSError as e:
        log.debug("unix table unavailable: %s (%s)", file, e)
        return {}


def capture(addresses: Filter = None, paths: Filter = None,
            proc_net: str = PROC_NET, unix_file: Optional[str] = None) -> Dict[str, Listener]:
    """
    Both filters None: everything. Only one given: only that kind is captured,
    the other backend is not consulted at all.
    """
    stats: Dict[str, Listener] = {}
    if addresses is not None or paths is None:
        stats.update(capture_tcp(addresses, proc_net=proc_net))
    if paths is not None or addresses is None:
        stats.update(capture_unix(paths, file=unix_file, proc_net=proc_net))
    return stats
