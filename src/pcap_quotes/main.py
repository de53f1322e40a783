"""Main entry point — parses a capture and prints the decoded quotes."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from pcap_quotes.capture import read_capture
from pcap_quotes.config import AppConfig, load_config
from pcap_quotes.errors import CaptureError, DecodeError
from pcap_quotes.formatter import format_quote, format_stats
from pcap_quotes.pipeline import QuotePipeline, sort_by_accept_time

log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(cfg: AppConfig) -> None:
    """Initialise ``structlog`` based on config."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if cfg.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            structlog.stdlib.NAME_TO_LEVEL.get(
                cfg.logging.level.lower(), 20,  # default INFO
            ),
        ),
        context_class=dict,
        # stdout carries the quotes
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcap-quotes",
        description="Extract B6034 price quotes from a packet capture",
    )
    parser.add_argument("path", type=Path, help="path to the pcap/pcapng file")
    parser.add_argument(
        "-r", "--sorted", action="store_true", default=None,
        help="sort quotes by quote accept time",
    )
    parser.add_argument(
        "-s", "--only-one", action="store_true",
        help="treat PATH as a single raw quote payload, not a capture",
    )
    parser.add_argument("-c", "--config", default=None, help="path to config YAML")
    parser.add_argument("--no-color", action="store_true", help="disable ANSI colours")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)

    config = load_config(args.config)
    _configure_logging(config)

    if args.sorted is not None:
        config.output.sorted = args.sorted
    if args.no_color:
        config.output.color = False

    pipeline = QuotePipeline(config)
    color = config.output.color

    if args.only_one:
        try:
            quote = pipeline.decode_single(args.path.read_bytes())
        except (OSError, DecodeError) as exc:
            log.error("app.single_decode_failed", path=str(args.path), error=str(exc))
            return 1
        print(format_quote(quote, color))
        return 0

    try:
        quotes, stats = pipeline.run(read_capture(args.path))
    except (OSError, CaptureError) as exc:
        log.error("app.capture_failed", path=str(args.path), error=str(exc))
        return 1

    if config.output.sorted:
        quotes = sort_by_accept_time(quotes)

    for quote in quotes:
        print(format_quote(quote, color))

    print()
    print(format_stats(stats))
    return 0


if __name__ == "__main__":
    sys.exit(main())
