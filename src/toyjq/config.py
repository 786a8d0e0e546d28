"""TOML config loading for .toyjq.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from toyjq.errors import ConfigError
from toyjq.printer import DEFAULT_INDENT, DEFAULT_WIDTH

logger = logging.getLogger(__name__)

CONFIG_NAME = ".toyjq.toml"


@dataclass
class FormatConfig:
    width: int = DEFAULT_WIDTH
    indent: int = DEFAULT_INDENT


@dataclass
class OutputConfig:
    color: bool = False
    strict: bool = False


@dataclass
class ToyjqConfig:
    format: FormatConfig = field(default_factory=FormatConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find .toyjq.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            logger.debug("using config %s", candidate)
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def _table(data: dict, name: str) -> dict:
    value = data[name]
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table, got {value!r}")
    return value


def _non_negative_int(table: dict, key: str, default: int) -> int:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{key} must be a non-negative integer, got {value!r}")
    return value


def _flag(table: dict, key: str, default: bool) -> bool:
    value = table.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def load_config(path: Path) -> ToyjqConfig:
    """Parse a .toyjq.toml file into a ToyjqConfig."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e

    config = ToyjqConfig()

    if "format" in data:
        fmt = _table(data, "format")
        config.format = FormatConfig(
            width=_non_negative_int(fmt, "width", DEFAULT_WIDTH),
            indent=_non_negative_int(fmt, "indent", DEFAULT_INDENT),
        )

    if "output" in data:
        out = _table(data, "output")
        config.output = OutputConfig(
            color=_flag(out, "color", False),
            strict=_flag(out, "strict", False),
        )

    return config


def discover_config(start_path: Path | None = None) -> ToyjqConfig:
    """Load the nearest config file, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        logger.debug("no %s found, using defaults", CONFIG_NAME)
        return ToyjqConfig()
