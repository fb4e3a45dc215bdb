from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from perceivedload.utils.time import parse_timecode

CONFIG_FILENAME = "perceived-load.yaml"
DEFAULT_LOOKBACKS = (1, 5, 15)
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoadConfig(BaseModel):
    db: Optional[str] = Field(default=None, description="CSV database path")
    lookbacks: list[int] = Field(default_factory=lambda: list(DEFAULT_LOOKBACKS))
    granularity: timedelta = Field(default=timedelta(days=1))
    log_level: Optional[str] = None

    @field_validator("db", mode="before")
    @classmethod
    def _normalize_db(cls, value: object):
        if value is None:
            return None
        text = str(value).strip()
        return text if text else None

    @field_validator("lookbacks")
    @classmethod
    def _positive_lookbacks(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("lookbacks must list at least one window")
        bad = [v for v in value if v < 1]
        if bad:
            raise ValueError(f"lookbacks must be positive day counts, got {bad}")
        return value

    @field_validator("granularity", mode="before")
    @classmethod
    def _parse_granularity(cls, value: object):
        if isinstance(value, timedelta):
            return value
        return parse_timecode(str(value))

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object):
        if value is None:
            return None
        name = str(value).strip().upper()
        if not name:
            return None
        if name not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}"
            )
        return name


@dataclass
class ConfigContext:
    file_path: Optional[Path]
    config: LoadConfig

    @property
    def root(self) -> Path:
        return self.file_path.parent if self.file_path else Path.cwd()

    def resolve_db(self) -> Optional[Path]:
        raw = self.config.db
        if not raw:
            return None
        candidate = Path(raw).expanduser()
        return (
            candidate.resolve()
            if candidate.is_absolute()
            else (self.root / candidate).resolve()
        )


def read_config_yaml(path: Path) -> dict:
    """Parse a config file; an empty file counts as an empty mapping."""
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(
            f"{path.name} must be a mapping at the top level, got {type(data).__name__}")
    return data


def load_config_file(path: Path) -> ConfigContext:
    data = read_config_yaml(path)
    cfg = LoadConfig.model_validate(data)
    return ConfigContext(file_path=path, config=cfg)


def load_config_context(start_dir: Optional[Path] = None) -> ConfigContext:
    """Search from start_dir upward for perceived-load.yaml; defaults when absent."""
    directory = (start_dir or Path.cwd()).resolve()
    for path in [directory, *directory.parents]:
        candidate = path / CONFIG_FILENAME
        if candidate.is_file():
            return load_config_file(candidate)
    return ConfigContext(file_path=None, config=LoadConfig())
