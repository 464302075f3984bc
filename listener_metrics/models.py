from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict, Mapping

import orjson


@dataclass
class Listener:
    """Queue statistics of one listening socket (TCP address or Unix path)."""
    queue_size: int = 0          # waiting to be accepted
    active_connections: int = 0  # already accepted

    def __post_init__(self):
        if self.queue_size < 0 or self.active_connections < 0:
            raise ValueError(f"negative listener counters: {self!r}")

    @classmethod
    def zero(cls) -> "Listener":
        return cls(0, 0)

    def as_json(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class TcpRecord:
    local: str     # canonical key, 'ip:port' or '[ip]:port'
    state: str     # 'listen', 'established', ...
    rx_queue: int


def _printable_key(key: str) -> str:
    # unix paths are decoded with surrogateescape; orjson rejects lone surrogates
    return key.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def to_json(result: Mapping[str, Listener]) -> bytes:
    return orjson.dumps({_printable_key(k): v.as_json() for k, v in result.items()},
                        option=orjson.OPT_SORT_KEYS)
