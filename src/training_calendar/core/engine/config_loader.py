"""
YAML → typed settings loader.

Loads runtime settings from settings.yaml (bundled with the package) and
optionally merges user overrides from ~/.training-calendar/settings.yaml.

Usage:
    from training_calendar.core.engine.config_loader import load_settings
    settings = load_settings()
    store_dir = settings.data_dir

A missing user file is not an error.  A user file that fails to parse is
ignored with a warning and the bundled values are used.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from loguru import logger

from ..config import MONTH_INDICATOR_CAP, READINESS_WINDOW_DAYS, TOP_RECORDS_LIMIT, WEEKLY_BUCKETS_BACK

USER_DIR_NAME = ".training-calendar"
SETTINGS_FILE = "settings.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} when it is empty or unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"[CONFIG] Ignoring unreadable settings file {path}: {e!r}")
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_dir() -> Path:
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / USER_DIR_NAME


def get_bundled_yaml_path() -> Path:
    """Return the path of the settings.yaml shipped inside the package."""
    return Path(__file__).resolve().parent.parent.parent / SETTINGS_FILE


def get_user_yaml_path() -> Path | None:
    """Return ~/.training-calendar/settings.yaml if it exists, else None."""
    p = get_user_dir() / SETTINGS_FILE
    return p if p.exists() else None


def load_config() -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/training_calendar/settings.yaml
    2. User override at ~/.training-calendar/settings.yaml

    Returns:
        Merged dict of settings sections.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled.exists():
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from YAML."""

    data_dir: Path
    athlete_id: str = "local"
    month_indicator_cap: int = MONTH_INDICATOR_CAP
    weeks_back: int = WEEKLY_BUCKETS_BACK
    top_records: int = TOP_RECORDS_LIMIT
    readiness_window_days: int = READINESS_WINDOW_DAYS
    log_level: str = "WARNING"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "Settings":
        storage = config.get("storage", {}) or {}
        identity = config.get("identity", {}) or {}
        calendar = config.get("calendar", {}) or {}
        progress = config.get("progress", {}) or {}
        readiness = config.get("readiness", {}) or {}
        logging_cfg = config.get("logging", {}) or {}

        data_dir = storage.get("data_dir")
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else get_user_dir(),
            athlete_id=str(identity.get("athlete_id", "local")),
            month_indicator_cap=int(calendar.get("month_indicator_cap", MONTH_INDICATOR_CAP)),
            weeks_back=int(progress.get("weeks_back", WEEKLY_BUCKETS_BACK)),
            top_records=int(progress.get("top_records", TOP_RECORDS_LIMIT)),
            readiness_window_days=int(readiness.get("window_days", READINESS_WINDOW_DAYS)),
            log_level=str(logging_cfg.get("level", "WARNING")).upper(),
        )


def load_settings() -> Settings:
    return Settings.from_mapping(load_config())
