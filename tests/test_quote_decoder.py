"""Unit tests for the quote payload decoder."""

import pytest

from builders import (
    ASK_PRICES,
    ASK_QTYS,
    BID_PRICES,
    BID_QTYS,
    ISSUE_CODE,
    build_quote_payload,
)
from pcap_quotes.errors import DecodeError, InvalidField, TruncatedPayload
from pcap_quotes.models import AcceptTimeFormat, ByteOrder, PriceQuote, QuoteTime
from pcap_quotes.quote_decoder import FIELDS, QUOTE_LENGTH, SIGNATURE, decode


# -------------------------------------------------------------------
# Layout
# -------------------------------------------------------------------

class TestLayout:
    def test_record_length(self):
        assert QUOTE_LENGTH == 214

    def test_field_count_matches_model(self):
        # every PriceQuote field except packet_rcv_time is on the wire
        assert [name for name, _, _ in FIELDS] == list(PriceQuote.__dataclass_fields__)[1:]

    def test_payload_starts_with_signature(self):
        assert build_quote_payload().startswith(SIGNATURE)

    def test_hand_placed_offsets(self):
        buf = bytearray(QUOTE_LENGTH)
        buf[0:5] = b"B6034"
        buf[5:17] = b"KR7005930003"
        buf[17:20] = b"\x01\x02\x03"
        buf[29:34] = (69_900).to_bytes(5, "big")       # best_bid_price_1st
        buf[34:41] = (101).to_bytes(7, "big")          # best_bid_quantity_1st
        buf[96:101] = (70_000).to_bytes(5, "big")      # best_ask_price_1st
        buf[206:214] = b"09300001"

        quote = decode(0.0, bytes(buf))

        assert quote.data_type == int.from_bytes(b"B6", "big")
        assert quote.information_type == int.from_bytes(b"03", "big")
        assert quote.market_type == ord("4")
        assert quote.issue_code == "KR7005930003"
        assert quote.issue_seq_no == 0x010203
        assert quote.best_bid_price_1st == 69_900
        assert quote.best_bid_quantity_1st == 101
        assert quote.best_ask_price_1st == 70_000
        assert quote.quote_accept_time == QuoteTime(9, 30, 0, 1)


# -------------------------------------------------------------------
# Happy path
# -------------------------------------------------------------------

class TestDecodeQuote:
    def test_decode_returns_price_quote(self):
        result = decode(1.5, build_quote_payload())
        assert isinstance(result, PriceQuote)
        assert result.packet_rcv_time == 1.5

    def test_issue_code_keeps_padding(self):
        result = decode(0.0, build_quote_payload())
        assert result.issue_code == ISSUE_CODE

    def test_issue_code_lossy(self):
        result = decode(0.0, build_quote_payload(issue_code=b"0059\xff\xfe      "))
        assert result.issue_code.startswith("0059")
        assert "\ufffd" in result.issue_code

    def test_issue_seq_no(self):
        payload = bytearray(build_quote_payload())
        payload[17:20] = b"\x01\x02\x03"
        result = decode(0.0, bytes(payload))
        assert result.issue_seq_no == 66051

    def test_bid_ladder(self):
        result = decode(0.0, build_quote_payload())
        assert result.bid_levels == tuple(zip(BID_PRICES, BID_QTYS))

    def test_ask_ladder(self):
        result = decode(0.0, build_quote_payload())
        assert result.ask_levels == tuple(zip(ASK_PRICES, ASK_QTYS))

    def test_depth_counts(self):
        result = decode(0.0, build_quote_payload())
        assert result.no_of_best_bid_valid_quote_total == 15
        assert result.no_of_best_bid_quote_3rd == 3
        assert result.no_of_best_ask_valid_quote_total == 25
        assert result.no_of_best_ask_quote_5th == 15

    def test_ascii_accept_time(self):
        result = decode(0.0, build_quote_payload(quote_accept_time=b"15200059"))
        assert result.quote_accept_time == QuoteTime(15, 20, 0, 59)
        assert str(result.quote_accept_time) == "15:20:00.59"

    def test_trailing_bytes_ignored(self):
        payload = build_quote_payload()
        assert decode(0.0, payload + b"\xff") == decode(0.0, payload)

    def test_structural_equality(self):
        assert decode(2.0, build_quote_payload()) == decode(2.0, build_quote_payload())


class TestFieldWidths:
    """Values at the top of each field's range catch off-by-one widths."""

    def test_one_byte(self):
        result = decode(0.0, build_quote_payload(market_type=0xFF))
        assert result.market_type == 0xFF

    def test_two_bytes(self):
        result = decode(0.0, build_quote_payload(market_status_type=0xFFFE))
        assert result.market_status_type == 0xFFFE

    def test_three_bytes(self):
        result = decode(0.0, build_quote_payload(issue_seq_no=0xFFFFFF))
        assert result.issue_seq_no == 0xFFFFFF

    def test_four_bytes(self):
        result = decode(0.0, build_quote_payload(no_of_best_bid_quote_1st=0xFFFFFFFF))
        assert result.no_of_best_bid_quote_1st == 0xFFFFFFFF
        assert result.no_of_best_bid_quote_2nd == 2

    def test_five_bytes(self):
        result = decode(0.0, build_quote_payload(best_bid_price_1st=2**40 - 1))
        assert result.best_bid_price_1st == 2**40 - 1
        assert result.best_bid_quantity_1st == BID_QTYS[0]

    def test_seven_bytes(self):
        result = decode(0.0, build_quote_payload(best_ask_quantity_5th=2**56 - 2))
        assert result.best_ask_quantity_5th == 2**56 - 2
        assert result.best_ask_price_5th == ASK_PRICES[4]

    def test_eight_bytes(self):
        raw = (0x0009 << 48 | 0x001E << 32 | 0x0007 << 16 | 0x1234).to_bytes(8, "big")
        result = decode(
            0.0,
            build_quote_payload(quote_accept_time=raw),
            time_format=AcceptTimeFormat.PACKED_NIBBLES,
        )
        assert result.quote_accept_time == QuoteTime(9, 30, 7, 0x1234)


class TestByteOrder:
    def test_little_endian_fields(self):
        payload = build_quote_payload("little", best_bid_price_1st=0x0102030405)
        result = decode(0.0, payload, byte_order=ByteOrder.LITTLE)
        assert result.best_bid_price_1st == 0x0102030405
        assert result.bid_levels[1:] == tuple(zip(BID_PRICES, BID_QTYS))[1:]

    def test_seq_no_always_big_endian(self):
        payload = bytearray(build_quote_payload("little"))
        payload[17:20] = b"\x01\x02\x03"
        result = decode(0.0, bytes(payload), byte_order=ByteOrder.LITTLE)
        assert result.issue_seq_no == 0x010203

    def test_ascii_time_independent_of_byte_order(self):
        payload = build_quote_payload("little", quote_accept_time=b"09300001")
        result = decode(0.0, payload, byte_order=ByteOrder.LITTLE)
        assert result.quote_accept_time == QuoteTime(9, 30, 0, 1)

    def test_packed_time_little_endian(self):
        value = 0x000A << 48 | 0x0001 << 32 | 0x0002 << 16 | 0x0003
        payload = build_quote_payload("little", quote_accept_time=value.to_bytes(8, "little"))
        result = decode(
            0.0, payload,
            byte_order=ByteOrder.LITTLE,
            time_format=AcceptTimeFormat.PACKED_NIBBLES,
        )
        assert result.quote_accept_time == QuoteTime(10, 1, 2, 3)


# -------------------------------------------------------------------
# Edge / error cases
# -------------------------------------------------------------------

class TestDecodeErrors:
    def test_empty_payload(self):
        with pytest.raises(TruncatedPayload):
            decode(0.0, b"")

    def test_signature_only(self):
        with pytest.raises(TruncatedPayload) as excinfo:
            decode(0.0, SIGNATURE)
        assert excinfo.value.got == 5

    def test_one_byte_short(self):
        payload = build_quote_payload()[:-1]
        with pytest.raises(TruncatedPayload) as excinfo:
            decode(0.0, payload)
        assert excinfo.value.expected == QUOTE_LENGTH
        assert excinfo.value.got == QUOTE_LENGTH - 1

    def test_non_digit_accept_time(self):
        payload = build_quote_payload(quote_accept_time=b"09:30:00")
        with pytest.raises(InvalidField) as excinfo:
            decode(0.0, payload)
        assert excinfo.value.field == "quote_accept_time"
        assert excinfo.value.offset == 206

    def test_binary_accept_time_rejected_as_ascii(self):
        payload = build_quote_payload(quote_accept_time=b"\x00" * 8)
        with pytest.raises(DecodeError):
            decode(0.0, payload)

    def test_binary_accept_time_ok_as_packed(self):
        payload = build_quote_payload(quote_accept_time=b"\x00" * 8)
        result = decode(0.0, payload, time_format=AcceptTimeFormat.PACKED_NIBBLES)
        assert result.quote_accept_time == QuoteTime(0, 0, 0, 0)
