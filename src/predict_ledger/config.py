"""
Configuration for the prediction-market ledger.

Merge order: dataclass defaults → YAML ``ledger:`` section → environment variables
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = Path("config/ledger.yaml")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    db_url: str | None = None  # None → sqlite:///data/ledger.db
    sqlite_wal: bool = True
    verbose: bool = False

    # How loudly a repeated resolution for an already-resolved market is reported
    duplicate_resolution_log_level: str = "WARNING"

    # Binary markets: outcome index must be 0 or 1
    outcome_slots: int = 2

    @property
    def duplicate_log_level(self) -> int:
        return logging.getLevelName(self.duplicate_resolution_log_level.upper())


def validate_config(cfg: LedgerConfig) -> None:
    """Validate config values. Raises ValueError with all issues found."""
    errors: list[str] = []

    if cfg.db_url is not None and not cfg.db_url.strip():
        errors.append("db_url must not be empty when set")
    if cfg.duplicate_resolution_log_level.upper() not in _LOG_LEVELS:
        errors.append(
            f"duplicate_resolution_log_level must be one of {', '.join(_LOG_LEVELS)}, "
            f"got {cfg.duplicate_resolution_log_level!r}"
        )
    if cfg.outcome_slots < 2:
        errors.append(f"outcome_slots must be >= 2, got {cfg.outcome_slots}")

    if errors:
        raise ValueError("Config validation failed:\n  " + "\n  ".join(errors))


def load_yaml_config(config_path: Path) -> dict:
    """Load configuration from YAML file"""
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def load_ledger_config(raw: dict[str, Any]) -> LedgerConfig:
    """Load LedgerConfig from config.yaml's ledger section."""
    section = raw.get("ledger", {})
    if not section:
        return LedgerConfig()

    cfg = LedgerConfig(
        db_url=section.get("db_url"),
        sqlite_wal=bool(section.get("sqlite_wal", True)),
        verbose=bool(section.get("verbose", False)),
        duplicate_resolution_log_level=str(
            section.get("duplicate_resolution_log_level", "WARNING")
        ),
        outcome_slots=int(section.get("outcome_slots", 2)),
    )
    validate_config(cfg)
    return cfg


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def build_config(config_path: Path | None = None) -> LedgerConfig:
    """
    Build configuration by merging:
    1. Defaults (from dataclass)
    2. YAML config file
    3. Environment variables (LEDGER_DB_URL, LEDGER_VERBOSE; .env is honored)
    """
    load_dotenv()
    cfg = load_ledger_config(load_yaml_config(config_path or DEFAULT_CONFIG_PATH))

    if os.getenv("LEDGER_DB_URL"):
        cfg = replace(cfg, db_url=os.getenv("LEDGER_DB_URL"))
    if os.getenv("LEDGER_VERBOSE"):
        cfg = replace(cfg, verbose=_env_flag(os.getenv("LEDGER_VERBOSE", "")))

    validate_config(cfg)
    return cfg
