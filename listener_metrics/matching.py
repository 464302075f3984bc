from __future__ import annotations
import ipaddress
from dataclasses import replace
from typing import Container, Dict, Iterable, Mapping, Optional

from .models import Listener
from .utils.net import format_key, split_key


def find_matching_listener(address: str, listeners: Container[str]) -> Optional[str]:
    """
    Resolve the local address of an established connection to the key of the
    listener that accepted it: the exact key first, then the wildcard listener
    of the same family on the same port.
    """
    if address in listeners:
        return address
    parsed = split_key(address)
    if parsed is None:
        return None
    ip, port = parsed
    try:
        family = ipaddress.ip_address(ip).version
    except ValueError:
        return None
    wildcard = format_key("0.0.0.0" if family == 4 else "::", port)
    if wildcard in listeners:
        return wildcard
    return None


def attribute_connections(listeners: Mapping[str, Listener],
                          connections: Iterable[str]) -> Dict[str, Listener]:
    """Return a copy of `listeners` with every matched connection counted once."""
    out = {k: replace(v) for k, v in listeners.items()}
    for local in connections:
        key = find_matching_listener(local, out)
        if key is not None:
            out[key].active_connections += 1
    return out
