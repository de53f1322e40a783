"""Capture file reader yielding ``(timestamp, frame)`` pairs from pcap/pcapng."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import dpkt
import structlog

from pcap_quotes.errors import CaptureError

log = structlog.get_logger(__name__)

# pcapng files open with a Section Header Block
_PCAPNG_MAGIC = b"\x0a\x0d\x0d\x0a"


def read_capture(path: str | Path) -> Iterator[tuple[float, bytes]]:
    """Open a capture file and iterate its frames in file order.

    Timestamps are float seconds since the Unix epoch.  The file is
    opened here, not on first iteration: :class:`CaptureError` if it is
    not a readable capture, :class:`OSError` unchanged if it cannot be
    opened.  A corrupt record later in the file ends the stream with a
    ``capture.truncated`` warning, keeping the frames read so far.
    """
    path = Path(path)
    fh = open(path, "rb")
    magic = fh.read(4)
    fh.seek(0)

    try:
        if magic == _PCAPNG_MAGIC:
            reader = dpkt.pcapng.Reader(fh)
        else:
            reader = dpkt.pcap.Reader(fh)
    except (ValueError, dpkt.UnpackError) as exc:
        fh.close()
        raise CaptureError(f"{path}: {exc}") from exc

    datalink = reader.datalink()
    if datalink != dpkt.pcap.DLT_EN10MB:
        log.warning("capture.unexpected_linktype", path=str(path), datalink=datalink)

    log.debug("capture.opened", path=str(path), pcapng=magic == _PCAPNG_MAGIC)
    return _frames(path, fh, reader)


def _frames(path: Path, fh, reader) -> Iterator[tuple[float, bytes]]:
    count = 0
    with fh:
        try:
            for ts, buf in reader:
                count += 1
                yield float(ts), bytes(buf)
        except dpkt.UnpackError as exc:
            log.warning("capture.truncated", path=str(path), frames=count, error=str(exc))
