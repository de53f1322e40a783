"""Configuration loader — reads YAML config and exposes typed settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pcap_quotes.models import AcceptTimeFormat, ByteOrder


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class FilterConfig:
    ports: list[int] = field(default_factory=lambda: [15515, 15516])
    signature: str = "B6034"


@dataclass(slots=True)
class DecoderConfig:
    byte_order: str = "big"               # "big" or "little"
    accept_time_format: str = "ascii_digits"  # or "packed_nibbles"

    @property
    def order(self) -> ByteOrder:
        return ByteOrder(self.byte_order)

    @property
    def time_format(self) -> AcceptTimeFormat:
        return AcceptTimeFormat(self.accept_time_format)


@dataclass(slots=True)
class OutputConfig:
    sorted: bool = False  # order by quote_accept_time
    color: bool = True


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "console"  # "json" or "console"


@dataclass(slots=True)
class AppConfig:
    filter: FilterConfig = field(default_factory=FilterConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _merge(dc_cls: type, raw: dict[str, Any] | None):
    """Create a dataclass instance from a dict, ignoring unknown keys."""
    if raw is None:
        return dc_cls()
    known = {f.name for f in dc_cls.__dataclass_fields__.values()}
    return dc_cls(**{k: v for k, v in raw.items() if k in known})


def _default_path() -> Path:
    return Path(__file__).resolve().parents[2] / "config" / "config.yaml"


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Resolution order for the config path:
        1. Explicit *path* argument
        2. ``PCAP_QUOTES_CONFIG`` environment variable
        3. ``config/config.yaml`` relative to the repo root

    A path given by 1. or 2. must exist.  If the default file is absent
    the built-in defaults are used.
    """
    if path is None:
        path = os.environ.get("PCAP_QUOTES_CONFIG")
    if path is None:
        path = _default_path()
        if not path.exists():
            return AppConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    decoder = _merge(DecoderConfig, raw.get("decoder"))
    # raises ValueError on an unknown byte order or time format
    ByteOrder(decoder.byte_order)
    AcceptTimeFormat(decoder.accept_time_format)

    return AppConfig(
        filter=_merge(FilterConfig, raw.get("filter")),
        decoder=decoder,
        output=_merge(OutputConfig, raw.get("output")),
        logging=_merge(LoggingConfig, raw.get("logging")),
    )
