from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_PROC_NET = "/proc/net"
DEFAULT_NETSTAT = "/usr/sbin/netstat"
SYSTEM_CONFIG_DIR = Path("/etc/listener-metrics")


class ConfigError(ValueError):
    pass


@dataclass
class CFG:
    addresses: Optional[List[str]] = None
    paths: Optional[List[str]] = None
    interval: float = 1.0
    host: str = "127.0.0.1"
    port: int = 9465
    proc_net: str = DEFAULT_PROC_NET
    netstat: str = DEFAULT_NETSTAT
    log_level: str = "INFO"


def _str_list(name: str, value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"{name}: expected a string or a list of strings, got {value!r}")


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.is_absolute() and not p.exists():
        # bare names are also looked up in the system config dir
        p = SYSTEM_CONFIG_DIR / p if (SYSTEM_CONFIG_DIR / p).exists() else p
    if not p.exists():
        print(f"[warn] config not found: {p}")
        return {}
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top level must be a mapping")
    return data


def apply_settings(cfg: CFG, data: Dict[str, Any]) -> CFG:
    known = {f.name for f in fields(CFG)}
    for key, value in data.items():
        if key not in known:
            print(f"[warn] unknown config key ignored: {key}")
            continue
        if value is None:
            # an empty YAML value keeps the default
            continue
        if key in ("addresses", "paths"):
            value = _str_list(key, value)
        elif key == "interval":
            value = float(value)
            if value <= 0:
                raise ConfigError(f"interval must be positive, got {value}")
        elif key == "port":
            value = int(value)
        elif key == "log_level":
            value = str(value).upper()
            if not isinstance(logging.getLevelName(value), int):
                raise ConfigError(f"unknown log level: {value}")
        else:
            value = str(value)
        setattr(cfg, key, value)
    return cfg


def init_cfg_from_args(args) -> CFG:
    cfg = CFG()
    try:
        apply_settings(cfg, load_config_file(getattr(args, "config", None)))
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e
    overrides = {}
    for key in ("addresses", "paths", "interval", "host", "port", "proc_net", "netstat", "log_level"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value
    try:
        apply_settings(cfg, overrides)
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e
    return cfg
