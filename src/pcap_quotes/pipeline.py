"""Pipeline driver that classifies, matches and decodes frames in capture order."""

from __future__ import annotations

import time
from typing import Iterable

import structlog

from pcap_quotes.config import AppConfig
from pcap_quotes.errors import DecodeError, FrameDecodeError
from pcap_quotes.frames import classify, matches_signature
from pcap_quotes.models import PriceQuote, RejectReason
from pcap_quotes.quote_decoder import decode
from pcap_quotes.stats import REJECT_OUTCOMES, Outcome, PacketParseStats, ParseStatsAggregator

log = structlog.get_logger(__name__)


class QuotePipeline:
    """Turns a sequence of captured frames into price quotes.

    Per-frame problems never escape :meth:`process_frame`; they are
    logged and reported as an :class:`Outcome`.
    """

    def __init__(self, config: AppConfig) -> None:
        self._ports = frozenset(config.filter.ports)
        self._signature = config.filter.signature.encode("ascii")
        self._byte_order = config.decoder.order
        self._time_format = config.decoder.time_format

    # ------------------------------------------------------------------
    # Single frame
    # ------------------------------------------------------------------

    def process_frame(self, timestamp: float, frame: bytes) -> tuple[Outcome, PriceQuote | None]:
        try:
            classified = classify(timestamp, frame, self._ports)
        except FrameDecodeError as exc:
            log.warning("frame.decode_failed", ts=timestamp, size=len(frame), error=str(exc))
            return Outcome.FRAME_DECODE_FAILED, None

        if isinstance(classified, RejectReason):
            return REJECT_OUTCOMES[classified], None

        payload = classified.payload
        if not matches_signature(payload, self._signature):
            return Outcome.REJECTED_NOT_A_QUOTE, None

        try:
            quote = decode(timestamp, payload, self._byte_order, self._time_format)
        except DecodeError as exc:
            log.warning("quote.decode_failed", ts=timestamp, dport=classified.dport, error=str(exc))
            return Outcome.FAILED, None

        return Outcome.SUCCESS, quote

    def decode_single(self, payload: bytes) -> PriceQuote:
        """Decode one raw quote payload with no capture framing around it."""
        return decode(0.0, payload, self._byte_order, self._time_format)

    # ------------------------------------------------------------------
    # Whole capture
    # ------------------------------------------------------------------

    def run(self, frames: Iterable[tuple[float, bytes]]) -> tuple[list[PriceQuote], PacketParseStats]:
        """Process *frames* in order and return the quotes plus run stats."""
        stats = ParseStatsAggregator()
        quotes: list[PriceQuote] = []

        start = time.perf_counter()
        for timestamp, frame in frames:
            outcome, quote = self.process_frame(timestamp, frame)
            stats.record(outcome)
            if quote is not None:
                quotes.append(quote)
        elapsed = time.perf_counter() - start

        summary = stats.summary(parse_time=elapsed)
        log.info(
            "pipeline.done",
            frames=summary.total_frames,
            quotes=summary.successfully_parsed,
            rejected=summary.rejected,
            failed=summary.failed,
        )
        return quotes, summary


def sort_by_accept_time(quotes: Iterable[PriceQuote]) -> list[PriceQuote]:
    """Quotes ordered by exchange accept time; ties keep capture order."""
    return sorted(quotes, key=lambda q: q.quote_accept_time)
