#!/usr/bin/env python3
"""Local end-to-end demo — writes a synthetic capture and parses it.

The capture mixes price quote packets with traffic the parser must
skip (other ports, other message types, TCP, a runt frame).

Usage:
    python scripts/demo.py [OUTPUT.pcap]
"""

from __future__ import annotations

import random
import struct
import sys
import tempfile
import time
from pathlib import Path

import dpkt

# -- path fixup so we can import from src/ without installing ------------
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pcap_quotes.main import main as cli_main
from pcap_quotes.quote_decoder import FIELDS, SEQ, TEXT, TIME

# -----------------------------------------------------------------------
# Fake frame builders
# -----------------------------------------------------------------------

_ETH_FMT = "!6s6sH"
_IP4_FMT = "!BBHHHBBH4s4s"
_UDP_FMT = "!HHHH"
_LEVELS = ("1st", "2nd", "3rd", "4th", "5th")


def _udp_frame(payload: bytes, dport: int, proto: int = 17) -> bytes:
    udp = struct.pack(_UDP_FMT, 40000, dport, 8 + len(payload), 0) + payload
    ip = struct.pack(
        _IP4_FMT, 0x45, 0, 20 + len(udp), 0, 0, 64, proto, 0,
        b"\x0a\x00\x00\x01", b"\xe9\x00\x00\x01",
    )
    eth = struct.pack(_ETH_FMT, b"\x01\x00\x5e\x00\x00\x01", b"\x00\x11\x22\x33\x44\x55", 0x0800)
    return eth + ip + udp


def _build_quote(issue_code: str, mid: int, seq: int, accept: str) -> bytes:
    """Build one big-endian price quote payload around *mid*."""
    tick = 100
    values: dict = {
        "data_type": int.from_bytes(b"B6", "big"),
        "information_type": int.from_bytes(b"03", "big"),
        "market_type": ord("4"),
        "issue_code": issue_code,
        "issue_seq_no": seq,
        "market_status_type": int.from_bytes(b"40", "big"),
        "quote_accept_time": accept.encode("ascii"),
    }
    for side, sign in (("bid", -1), ("ask", 1)):
        qtys = [random.randint(1, 500) for _ in _LEVELS]
        values[f"total_{side}_quote_volume"] = sum(qtys)
        values[f"no_of_best_{side}_valid_quote_total"] = len(_LEVELS)
        for i, level in enumerate(_LEVELS):
            offset = i if sign < 0 else i + 1
            values[f"best_{side}_price_{level}"] = mid + sign * offset * tick
            values[f"best_{side}_quantity_{level}"] = qtys[i]
            values[f"no_of_best_{side}_quote_{level}"] = random.randint(1, 20)

    out = bytearray()
    for name, width, kind in FIELDS:
        value = values[name]
        if kind == TEXT:
            out += value.encode("ascii").ljust(width)
        elif kind == SEQ:
            out += value.to_bytes(width, "big")
        elif kind == TIME:
            out += value
        else:
            out += value.to_bytes(width, "big")
    return bytes(out)


def write_capture(path: Path, n_quotes: int = 20) -> None:
    issues = {"005930      ": 70_000, "000660      ": 130_000}
    start = time.time()
    with open(path, "wb") as fh:
        writer = dpkt.pcap.Writer(fh)
        for n in range(n_quotes):
            code = random.choice(list(issues))
            issues[code] += random.choice((-100, 0, 100))
            accept = f"0930{n // 100:02d}{n % 100:02d}"
            payload = _build_quote(code, issues[code], n + 1, accept)
            ts = start + n * 0.01
            writer.writepkt(_udp_frame(payload, random.choice((15515, 15516))), ts=ts)

            # noise between quotes
            writer.writepkt(_udp_frame(b"A3011" + b"0" * 120, 15515), ts=ts + 0.001)
            writer.writepkt(_udp_frame(payload, 5353), ts=ts + 0.002)
        writer.writepkt(_udp_frame(b"", 15515, proto=6), ts=start + n_quotes * 0.01)
        writer.writepkt(b"\x00" * 8, ts=start + n_quotes * 0.01)


def main() -> int:
    if len(sys.argv) > 1:
        path = Path(sys.argv[1])
    else:
        path = Path(tempfile.gettempdir()) / "pcap_quotes_demo.pcap"

    write_capture(path)
    print(f"  [demo] wrote synthetic capture to {path}\n")
    return cli_main([str(path)])


if __name__ == "__main__":
    sys.exit(main())
