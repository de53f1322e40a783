"""Per-run frame outcome counters."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from pcap_quotes.models import RejectReason


class Outcome(str, Enum):
    """What happened to one captured frame."""
    SUCCESS = "success"
    REJECTED_NON_UDP = "rejected_non_udp"
    REJECTED_WRONG_PORT = "rejected_wrong_port"
    REJECTED_NOT_A_QUOTE = "rejected_not_a_quote"
    FAILED = "failed"
    FRAME_DECODE_FAILED = "frame_decode_failed"


REJECT_OUTCOMES: dict[RejectReason, Outcome] = {
    RejectReason.NON_UDP: Outcome.REJECTED_NON_UDP,
    RejectReason.WRONG_PORT: Outcome.REJECTED_WRONG_PORT,
    RejectReason.NOT_A_PRICE_QUOTE: Outcome.REJECTED_NOT_A_QUOTE,
}


def percent(count: int, total: int) -> float:
    """``count / total * 100``, or ``0.0`` for an empty run."""
    if total == 0:
        return 0.0
    return count / total * 100.0


@dataclass(frozen=True, slots=True)
class PacketParseStats:
    """Snapshot of the counters at the end of a run."""

    total_frames: int = 0
    successfully_parsed: int = 0
    rejected_non_udp: int = 0
    rejected_wrong_port: int = 0
    rejected_not_a_quote: int = 0
    failed_decode: int = 0
    failed_frame: int = 0
    parse_time: float = 0.0  # seconds

    @property
    def rejected(self) -> int:
        return self.rejected_non_udp + self.rejected_wrong_port + self.rejected_not_a_quote

    @property
    def failed(self) -> int:
        return self.failed_decode + self.failed_frame


class ParseStatsAggregator:
    """Additive outcome counters with a single writer.

    Shards built on separate workers are combined with :meth:`merge`.
    """

    def __init__(self) -> None:
        self._counts: Counter[Outcome] = Counter()

    def record(self, outcome: Outcome) -> None:
        self._counts[outcome] += 1

    def merge(self, other: ParseStatsAggregator) -> None:
        self._counts.update(other._counts)

    def count(self, outcome: Outcome) -> int:
        return self._counts[outcome]

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def summary(self, parse_time: float = 0.0) -> PacketParseStats:
        c = self._counts
        return PacketParseStats(
            total_frames=self.total,
            successfully_parsed=c[Outcome.SUCCESS],
            rejected_non_udp=c[Outcome.REJECTED_NON_UDP],
            rejected_wrong_port=c[Outcome.REJECTED_WRONG_PORT],
            rejected_not_a_quote=c[Outcome.REJECTED_NOT_A_QUOTE],
            failed_decode=c[Outcome.FAILED],
            failed_frame=c[Outcome.FRAME_DECODE_FAILED],
            parse_time=parse_time,
        )
