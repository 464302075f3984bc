"""Shared fixtures: synthetic /proc/net tables."""
from __future__ import annotations
from pathlib import Path

import pytest

TCP_HEADER = ("  sl  local_address rem_address   st tx_queue rx_queue tr tm->when retrnsmt"
              "   uid  timeout inode\n")
TCP6_HEADER = ("  sl  local_address                         remote_address                        st"
               " tx_queue rx_queue tr tm->when retrnsmt   uid  timeout inode\n")
UNIX_HEADER = "Num       RefCount Protocol Flags    Type St Inode Path\n"


def tcp_line(n: int, local: str, remote: str, state: str, rx: int = 0, tx: int = 0) -> str:
    return (f"{n:4d}: {local} {remote} {state} {tx:08X}:{rx:08X} 00:00000000 00000000"
            f"  1000        0 {10000 + n} 1 0000000000000000 100 0 0 10 0\n")


def unix_line(state: str, path: str = "", inode: int = 20000) -> str:
    return f"0000000000000000: 00000002 00000000 00010000 0001 {state} {inode} {path}".rstrip() + "\n"


@pytest.fixture
def proc_net(tmp_path: Path) -> Path:
    # 0.0.0.0:3306 listening with 2 queued, two established on 127.0.0.1:3306,
    # 10.0.0.1:80 and 10.0.0.2:81 listening, one unrelated established socket.
    (tmp_path / "tcp").write_text(
        TCP_HEADER
        + tcp_line(0, "00000000:0CEA", "00000000:0000", "0A", rx=2)
        + tcp_line(1, "0100007F:0CEA", "0100007F:C350", "01")
        + tcp_line(2, "0100000A:0050", "00000000:0000", "0A")
        + tcp_line(3, "0200000A:0051", "00000000:0000", "0A", rx=1)
        + tcp_line(4, "0100007F:0CEA", "0100007F:C351", "01")
        + tcp_line(5, "0100007F:1F90", "0100007F:C352", "01")
        + tcp_line(6, "0100007F:0CEA", "0100007F:C353", "06")
    )
    # [::]:80 listening, ::1 and an IPv4-mapped connection accepted on it
    (tmp_path / "tcp6").write_text(
        TCP6_HEADER
        + tcp_line(0, "00000000000000000000000000000000:0050", "00000000000000000000000000000000:0000", "0A", rx=5)
        + tcp_line(1, "00000000000000000000000001000000:0050", "00000000000000000000000001000000:D431", "01")
        + tcp_line(2, "0000000000000000FFFF00000100007F:0050", "0000000000000000FFFF00000100007F:D432", "01")
    )
    (tmp_path / "unix").write_text(
        UNIX_HEADER
        + unix_line("01", "/run/app.sock", 1)
        + unix_line("02", "/run/app.sock", 2)
        + unix_line("03", "/run/app.sock", 3)
        + unix_line("03", "", 4)
        + unix_line("01", "/tmp/with space.sock", 5)
        + unix_line("03", "/tmp/with space.sock", 6)
    )
    return tmp_path
