"""Binary decoder for ``B6034`` price quote payloads.

A quote payload is a fixed-length record with no length prefix and no
padding.  The first five bytes (``data_type``, ``information_type`` and
``market_type``) spell the ASCII signature ``B6034``, so the decoder is
fed the whole UDP payload, signature included.

Numeric fields are unsigned integers of odd widths (1, 2, 3, 4, 5, 7 or
8 bytes) so they are read with ``int.from_bytes`` rather than ``struct``.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

from pcap_quotes.errors import InvalidField, TruncatedPayload
from pcap_quotes.models import AcceptTimeFormat, ByteOrder, PriceQuote, QuoteTime

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Record layout
# ---------------------------------------------------------------------------

SIGNATURE = b"B6034"

# Field kinds
UINT = "uint"
TEXT = "text"
SEQ = "seq"      # 3-byte counter, always most-significant byte first
TIME = "time"    # quote_accept_time, see AcceptTimeFormat

_LEVELS = ("1st", "2nd", "3rd", "4th", "5th")


def _ladder(side: str) -> list[tuple[str, int, str]]:
    fields = [(f"total_{side}_quote_volume", 7, UINT)]
    for level in _LEVELS:
        fields.append((f"best_{side}_price_{level}", 5, UINT))
        fields.append((f"best_{side}_quantity_{level}", 7, UINT))
    return fields


def _depth_counts(side: str) -> list[tuple[str, int, str]]:
    fields = [(f"no_of_best_{side}_valid_quote_total", 5, UINT)]
    for level in _LEVELS:
        fields.append((f"no_of_best_{side}_quote_{level}", 4, UINT))
    return fields


# (name, width, kind) in wire order
FIELDS: tuple[tuple[str, int, str], ...] = (
    ("data_type", 2, UINT),
    ("information_type", 2, UINT),
    ("market_type", 1, UINT),
    ("issue_code", 12, TEXT),
    ("issue_seq_no", 3, SEQ),
    ("market_status_type", 2, UINT),
    *_ladder("bid"),
    *_ladder("ask"),
    *_depth_counts("bid"),
    *_depth_counts("ask"),
    ("quote_accept_time", 8, TIME),
)

QUOTE_LENGTH = sum(width for _, width, _ in FIELDS)  # 214 bytes


# ---------------------------------------------------------------------------
# quote_accept_time strategies
# ---------------------------------------------------------------------------

_DIGITS = frozenset(b"0123456789")

_TimeDecoderFn = Callable[[bytes, int, ByteOrder], QuoteTime]
_time_decoders: dict[AcceptTimeFormat, _TimeDecoderFn] = {}


def register_time_decoder(fmt: AcceptTimeFormat):
    """Decorator to register a decoder for a ``quote_accept_time`` layout."""
    def wrapper(fn: _TimeDecoderFn) -> _TimeDecoderFn:
        _time_decoders[fmt] = fn
        return fn
    return wrapper


@register_time_decoder(AcceptTimeFormat.ASCII_DIGITS)
def _decode_ascii_time(raw: bytes, offset: int, byte_order: ByteOrder) -> QuoteTime:
    """``HHMMSSCC`` as eight ASCII digits in wire order."""
    if not all(b in _DIGITS for b in raw):
        raise InvalidField("quote_accept_time", offset, raw)
    return QuoteTime(
        hours=int(raw[0:2]),
        minutes=int(raw[2:4]),
        seconds=int(raw[4:6]),
        fraction=int(raw[6:8]),
    )


@register_time_decoder(AcceptTimeFormat.PACKED_NIBBLES)
def _decode_packed_time(raw: bytes, offset: int, byte_order: ByteOrder) -> QuoteTime:
    """Four 16-bit fields packed MSB first into one 64-bit integer."""
    value = int.from_bytes(raw, byte_order.value)
    return QuoteTime(
        hours=(value >> 48) & 0xFFFF,
        minutes=(value >> 32) & 0xFFFF,
        seconds=(value >> 16) & 0xFFFF,
        fraction=value & 0xFFFF,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode(
    rcv_time: float,
    payload: bytes,
    byte_order: ByteOrder = ByteOrder.BIG,
    time_format: AcceptTimeFormat = AcceptTimeFormat.ASCII_DIGITS,
) -> PriceQuote:
    """Decode one quote payload into a :class:`PriceQuote`.

    Raises :class:`TruncatedPayload` if *payload* is shorter than
    ``QUOTE_LENGTH`` and :class:`InvalidField` if a field cannot be
    interpreted.  Bytes past ``QUOTE_LENGTH`` are ignored.
    """
    if len(payload) < QUOTE_LENGTH:
        raise TruncatedPayload(QUOTE_LENGTH, len(payload))

    decode_time = _time_decoders[time_format]
    order = byte_order.value
    values: dict[str, Any] = {"packet_rcv_time": rcv_time}
    offset = 0

    for name, width, kind in FIELDS:
        raw = payload[offset:offset + width]
        if kind == UINT:
            values[name] = int.from_bytes(raw, order)
        elif kind == TEXT:
            # trailing padding is part of the value
            values[name] = raw.decode("utf-8", errors="replace")
        elif kind == SEQ:
            values[name] = raw[0] << 16 | raw[1] << 8 | raw[2]
        else:
            values[name] = decode_time(raw, offset, byte_order)
        offset += width

    if len(payload) > QUOTE_LENGTH:
        log.debug("quote.trailing_bytes", extra=len(payload) - QUOTE_LENGTH)

    return PriceQuote(**values)
