from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DB_ENV_VAR = "PERCEIVED_LOAD_DB"
DEFAULT_DB_RELATIVE = Path(".config") / "perceived-load.csv"


def cascade(*values, fallback=None):
    """Return the first non-None value from a list, or fallback."""
    for value in values:
        if value is not None:
            return value
    return fallback


def _level_name(value: Optional[str]) -> Optional[str]:
    """Upper-cased level name, or None when unset or not a known level."""
    if value is None:
        return None
    name = str(value).strip().upper()
    return name if name in logging._nameToLevel else None


@dataclass(frozen=True)
class LogLevelDecision:
    name: str
    value: int


def resolve_log_level(
    *levels: Optional[str],
    fallback: str = "WARNING",
) -> LogLevelDecision:
    """Pick the first recognised level name; CLI flag before config file."""
    name = cascade(*(_level_name(level) for level in levels), _level_name(fallback), fallback="WARNING")
    return LogLevelDecision(name=name, value=logging._nameToLevel[name])


def default_db_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """``$PERCEIVED_LOAD_DB`` when set, else ``~/.config/perceived-load.csv``."""
    env = os.environ if environ is None else environ
    override = (env.get(DB_ENV_VAR) or "").strip()
    if override:
        return Path(override).expanduser()
    home = env.get("HOME")
    base = Path(home) if home else Path.home()
    return base / DEFAULT_DB_RELATIVE


def resolve_db_path(
    cli_db: Optional[str],
    config_db: Optional[Path],
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    chosen = cascade(
        Path(cli_db).expanduser() if cli_db else None,
        config_db,
    )
    return chosen if chosen is not None else default_db_path(environ)
