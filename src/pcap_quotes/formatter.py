"""Human-readable rendering of quotes and run statistics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from pcap_quotes.models import PriceQuote
from pcap_quotes.stats import PacketParseStats, percent

# ANSI SGR colour codes
_RED = "31"
_YELLOW = "33"
_BLUE = "34"


def _paint(text: str, code: str, enabled: bool) -> str:
    if not enabled:
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def format_rcv_time(ts: float) -> str:
    """Capture timestamp as ``YYYY-MM-DD HH:MM:SS`` in UTC."""
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    except (OverflowError, OSError, ValueError):
        return "Invalid time"


def format_pairs(pairs: Iterable[tuple[int, int]], color: bool = False) -> str:
    """Render ``(price, quantity)`` pairs as `` qty@price`` each."""
    at = _paint("@", _RED, color)
    return "".join(f" {qty}{at}{price}" for price, qty in pairs)


def format_quote(quote: PriceQuote, color: bool = False) -> str:
    """One line per quote.

    Bids run from the 5th level in to the 1st, asks from the 1st out to
    the 5th, so the two ladders meet at the touch in the middle of the
    line.
    """
    head = " ".join((
        format_rcv_time(quote.packet_rcv_time),
        _paint(str(quote.quote_accept_time), _BLUE, color),
        _paint(quote.issue_code, _YELLOW, color),
    ))
    bids = format_pairs(reversed(quote.bid_levels), color)
    asks = format_pairs(quote.ask_levels, color)
    return f"{head} {bids} {asks}"


def format_stats(stats: PacketParseStats) -> str:
    """Render the end-of-run statistics block."""
    total = stats.total_frames

    def line(label: str, count: int) -> str:
        return f"  {label}: {count} ({percent(count, total):.2f}%)"

    return "\n".join((
        "Packet Parse Stats:",
        f"  Parse Time: {stats.parse_time * 1000.0:.2f}ms",
        f"  Total Packets: {total}",
        line("Successfully Parsed", stats.successfully_parsed),
        line("Rejected", stats.rejected),
        line("Failed", stats.failed),
        line("Non UDP", stats.rejected_non_udp),
        line("Wrong Port", stats.rejected_wrong_port),
        line("Not a Price Quote", stats.rejected_not_a_quote),
        line("Frame Decode Failed", stats.failed_frame),
    ))
