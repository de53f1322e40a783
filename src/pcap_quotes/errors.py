"""Exceptions raised while turning captured frames into quotes."""

from __future__ import annotations


class FrameDecodeError(Exception):
    """Link, network or transport header could not be parsed."""


class DecodeError(Exception):
    """A signature-matched payload could not be decoded into a quote."""


class TruncatedPayload(DecodeError):
    """Payload is shorter than the fixed quote record length."""

    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"quote payload truncated: need {expected} bytes, got {got}")
        self.expected = expected
        self.got = got


class InvalidField(DecodeError):
    """A field holds bytes that are not valid for its format."""

    def __init__(self, field: str, offset: int, raw: bytes) -> None:
        super().__init__(f"invalid {field} at offset {offset}: {raw!r}")
        self.field = field
        self.offset = offset
        self.raw = raw


class CaptureError(Exception):
    """The capture container could not be opened or parsed."""
