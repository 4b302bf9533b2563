"""Per-vault settings read from .vaultscripts.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_FILENAME = ".vaultscripts.toml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    """Settings read from `<vault>/.vaultscripts.toml`; every key is optional."""

    backlink_timeout: float = 30.0
    loader_min_seconds: float = 1.0
    log_level: str = "WARNING"
    audit: bool = True


def _number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    if value < 0:
        raise ValueError(f"{key} must not be negative")
    return float(value)


def parse_config(data: dict[str, Any]) -> Config:
    """
    Build a Config from parsed TOML.

    Unknown keys are ignored; a known key with a bad value raises ValueError
    naming the key.
    """
    log_level = data.get("log_level", Config.log_level)
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    audit = data.get("audit", Config.audit)
    if not isinstance(audit, bool):
        raise ValueError("audit must be a boolean")

    backlink_timeout = _number(data, "backlink_timeout", Config.backlink_timeout)
    if backlink_timeout == 0:
        raise ValueError("backlink_timeout must be positive")

    return Config(
        backlink_timeout=backlink_timeout,
        loader_min_seconds=_number(data, "loader_min_seconds", Config.loader_min_seconds),
        log_level=log_level.upper(),
        audit=audit,
    )


def load_config(vault_path: Path) -> Config:
    """Load the vault's config file, or the defaults when there is none."""
    config_path = Path(vault_path) / CONFIG_FILENAME
    if not config_path.exists():
        return Config()
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"{config_path.name}: {e}") from e
    return parse_config(data)
