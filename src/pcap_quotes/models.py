"""Data models for captured frames and decoded price quotes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


# ---------------------------------------------------------------------------
# Decoder options
# ---------------------------------------------------------------------------

class ByteOrder(str, Enum):
    """Byte order of the multi-byte numeric fields in a quote record."""
    BIG = "big"
    LITTLE = "little"


class AcceptTimeFormat(str, Enum):
    """How the 8-byte ``quote_accept_time`` field is laid out."""
    ASCII_DIGITS = "ascii_digits"      # "HHMMSSCC" as ASCII text
    PACKED_NIBBLES = "packed_nibbles"  # [hours:16][minutes:16][seconds:16][fraction:16]


# ---------------------------------------------------------------------------
# Frame classification
# ---------------------------------------------------------------------------

class RejectReason(str, Enum):
    """Why a well-formed frame is not a quote packet."""
    NON_UDP = "non_udp"
    WRONG_PORT = "wrong_port"
    NOT_A_PRICE_QUOTE = "not_a_price_quote"


@dataclass(frozen=True, slots=True)
class ClassifiedPayload:
    """UDP payload of a frame addressed to one of the quote ports."""

    timestamp: float   # capture time, seconds since the Unix epoch
    dport: int
    payload: bytes


# ---------------------------------------------------------------------------
# Price quote record
# ---------------------------------------------------------------------------

class QuoteTime(NamedTuple):
    """Exchange quote-accept time of day."""

    hours: int
    minutes: int
    seconds: int
    fraction: int

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.fraction:02d}"


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """One top-5 order book snapshot for one issue.

    Field order matches the wire layout (see ``quote_decoder.FIELDS``).
    Only ``packet_rcv_time`` is not on the wire; it is the capture
    timestamp of the frame the quote arrived in.
    """

    packet_rcv_time: float
    data_type: int
    information_type: int
    market_type: int
    issue_code: str
    issue_seq_no: int
    market_status_type: int

    total_bid_quote_volume: int
    best_bid_price_1st: int
    best_bid_quantity_1st: int
    best_bid_price_2nd: int
    best_bid_quantity_2nd: int
    best_bid_price_3rd: int
    best_bid_quantity_3rd: int
    best_bid_price_4th: int
    best_bid_quantity_4th: int
    best_bid_price_5th: int
    best_bid_quantity_5th: int

    total_ask_quote_volume: int
    best_ask_price_1st: int
    best_ask_quantity_1st: int
    best_ask_price_2nd: int
    best_ask_quantity_2nd: int
    best_ask_price_3rd: int
    best_ask_quantity_3rd: int
    best_ask_price_4th: int
    best_ask_quantity_4th: int
    best_ask_price_5th: int
    best_ask_quantity_5th: int

    no_of_best_bid_valid_quote_total: int
    no_of_best_bid_quote_1st: int
    no_of_best_bid_quote_2nd: int
    no_of_best_bid_quote_3rd: int
    no_of_best_bid_quote_4th: int
    no_of_best_bid_quote_5th: int

    no_of_best_ask_valid_quote_total: int
    no_of_best_ask_quote_1st: int
    no_of_best_ask_quote_2nd: int
    no_of_best_ask_quote_3rd: int
    no_of_best_ask_quote_4th: int
    no_of_best_ask_quote_5th: int

    quote_accept_time: QuoteTime

    # ---- ladder views ------------------------------------------------------

    @property
    def bid_levels(self) -> tuple[tuple[int, int], ...]:
        """Bid ``(price, quantity)`` pairs, nearest to the touch first."""
        return (
            (self.best_bid_price_1st, self.best_bid_quantity_1st),
            (self.best_bid_price_2nd, self.best_bid_quantity_2nd),
            (self.best_bid_price_3rd, self.best_bid_quantity_3rd),
            (self.best_bid_price_4th, self.best_bid_quantity_4th),
            (self.best_bid_price_5th, self.best_bid_quantity_5th),
        )

    @property
    def ask_levels(self) -> tuple[tuple[int, int], ...]:
        """Ask ``(price, quantity)`` pairs, nearest to the touch first."""
        return (
            (self.best_ask_price_1st, self.best_ask_quantity_1st),
            (self.best_ask_price_2nd, self.best_ask_quantity_2nd),
            (self.best_ask_price_3rd, self.best_ask_quantity_3rd),
            (self.best_ask_price_4th, self.best_ask_quantity_4th),
            (self.best_ask_price_5th, self.best_ask_quantity_5th),
        )
