"""Frame classification: Ethernet/IP/UDP filtering and signature matching."""

from __future__ import annotations

from typing import Collection

import dpkt

from pcap_quotes.errors import FrameDecodeError
from pcap_quotes.models import ClassifiedPayload, RejectReason
from pcap_quotes.quote_decoder import SIGNATURE

# UDP destination ports the quote feed is published on
QUOTE_PORTS: frozenset[int] = frozenset({15515, 15516})

_IP_ETH_TYPES = (dpkt.ethernet.ETH_TYPE_IP, dpkt.ethernet.ETH_TYPE_IP6)
_IP_CLASSES = (dpkt.ip.IP, dpkt.ip6.IP6)


def classify(
    timestamp: float,
    frame: bytes,
    ports: Collection[int] = QUOTE_PORTS,
) -> ClassifiedPayload | RejectReason:
    """Decode *frame* down to its UDP payload.

    Returns a :class:`ClassifiedPayload` for UDP traffic addressed to one
    of *ports*, otherwise the :class:`RejectReason`.  Raises
    :class:`FrameDecodeError` when a header that should be present cannot
    be parsed.

    dpkt leaves an inner layer as raw ``bytes`` when it fails to unpack
    it, so a malformed IP or UDP header shows up as a type mismatch
    rather than an exception.  The payload is dpkt's own ``udp.data``,
    handed on without another copy.
    """
    try:
        eth = dpkt.ethernet.Ethernet(frame)
    except dpkt.UnpackError as exc:
        raise FrameDecodeError(f"ethernet: {exc}") from exc

    ip = eth.data
    if not isinstance(ip, _IP_CLASSES):
        if eth.type in _IP_ETH_TYPES:
            raise FrameDecodeError(f"malformed IP header (ethertype 0x{eth.type:04x})")
        return RejectReason.NON_UDP

    udp = ip.data
    if not isinstance(udp, dpkt.udp.UDP):
        if getattr(ip, "p", None) == dpkt.ip.IP_PROTO_UDP:
            raise FrameDecodeError("malformed UDP header")
        return RejectReason.NON_UDP

    if udp.dport not in ports:
        return RejectReason.WRONG_PORT

    return ClassifiedPayload(timestamp=timestamp, dport=udp.dport, payload=udp.data)


def matches_signature(payload: bytes, signature: bytes = SIGNATURE) -> bool:
    """True if *payload* is a price quote packet."""
    return payload.startswith(signature)
