"""Configuration management via .env file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class BuildConfig:
    # Book defaults
    dialect: str = "3.0"
    language: str = "en"
    page_progression: str = ""  # "", "ltr" or "rtl"
    compress_level: int = 9  # zlib level for every entry except mimetype

    # Logging
    log_level: str = "INFO"
    log_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not 0 <= self.compress_level <= 9:
            raise ValueError(f"compress_level must be 0-9, got {self.compress_level}")
        if self.page_progression not in ("", "ltr", "rtl"):
            raise ValueError(
                f"page_progression must be 'ltr' or 'rtl', got {self.page_progression!r}"
            )

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def load_config(env_path: Optional[Path] = None) -> BuildConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "bookpress" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    defaults = BuildConfig()
    log_path = os.getenv("BOOKPRESS_LOG_PATH", "")
    return BuildConfig(
        dialect=os.getenv("BOOKPRESS_DIALECT", defaults.dialect),
        language=os.getenv("BOOKPRESS_LANGUAGE", defaults.language),
        page_progression=os.getenv(
            "BOOKPRESS_PAGE_PROGRESSION", defaults.page_progression
        ),
        compress_level=_int_env("BOOKPRESS_COMPRESS_LEVEL", defaults.compress_level),
        log_level=os.getenv("BOOKPRESS_LOG_LEVEL", defaults.log_level),
        log_path=Path(log_path).expanduser() if log_path else None,
    )
