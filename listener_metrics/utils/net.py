from __future__ import annotations
import ipaddress, re, socket, struct
from typing import Optional, Tuple, Union

HEX4_RE = re.compile(r"\A[0-9A-Fa-f]{8}\Z")
HEX16_RE = re.compile(r"\A[0-9A-Fa-f]{32}\Z")
KEY6_RE = re.compile(r"\A\[(?P<ip>.+)\]:(?P<port>\d+)\Z")

# include/net/tcp_states.h
TCP_STATES = {
    0x01: "established", 0x02: "syn_sent", 0x03: "syn_recv", 0x04: "fin_wait1",
    0x05: "fin_wait2", 0x06: "time_wait", 0x07: "close", 0x08: "close_wait",
    0x09: "last_ack", 0x0A: "listen", 0x0B: "closing",
}


class MalformedInput(ValueError):
    """A kernel table field did not have the expected fixed width/format."""


def ipv4_from_dword(dw: int) -> str:
    return socket.inet_ntoa(struct.pack('<I', dw & 0xFFFFFFFF))


def ipv6_from_bytes(b: bytes) -> str:
    addr = ipaddress.IPv6Address(b)
    # Only IPv4-mapped addresses get the dotted tail; deprecated IPv4-compatible
    # ones (::7f00:1) stay in hex form.
    if addr.ipv4_mapped is not None:
        return f"::ffff:{addr.ipv4_mapped}"
    return str(addr)


def decode_ipv4(hex4: str) -> str:
    """'0100007F' -> '127.0.0.1' (the kernel prints the address as a host-order u32)."""
    if not isinstance(hex4, str) or not HEX4_RE.match(hex4):
        raise MalformedInput(f"invalid IPv4 hex: {hex4!r}")
    return ipv4_from_dword(int(hex4, 16))


def decode_ipv6(hex32: str) -> str:
    """
    /proc/net/tcp6 prints the 16 address bytes as four host-order u32 words,
    so each 8-char word has its bytes reversed while word order is kept.
    """
    if not isinstance(hex32, str) or not HEX16_RE.match(hex32):
        raise MalformedInput(f"invalid IPv6 hex: {hex32!r}")
    raw = b"".join(struct.pack('<I', int(hex32[i:i + 8], 16)) for i in range(0, 32, 8))
    return ipv6_from_bytes(raw)


def decode_port(hex_port: str) -> int:
    try:
        return int(hex_port, 16)
    except (TypeError, ValueError):
        raise MalformedInput(f"invalid port hex: {hex_port!r}") from None


def decode_state(code: Union[int, str]) -> str:
    if isinstance(code, str):
        try:
            code = int(code, 16)
        except ValueError:
            return "unknown"
    return TCP_STATES.get(code, "unknown")


def format_key(ip: str, port: int) -> str:
    if ':' in ip:
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


def split_key(address: str) -> Optional[Tuple[str, int]]:
    """
    Inverse of format_key:
      - '1.2.3.4:5678'
      - '[::1]:443'
    Returns None when the string is not in either form.
    """
    if not address:
        return None
    if address.startswith('['):
        m = KEY6_RE.match(address)
        if not m:
            return None
        return m.group("ip"), int(m.group("port"))
    host, sep, port = address.partition(':')
    if not sep or not port.isdigit():
        return None
    return host, int(port)
