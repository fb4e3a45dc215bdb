import textwrap
from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from perceivedload.config.settings import (
    DEFAULT_LOOKBACKS,
    LoadConfig,
    load_config_context,
    load_config_file,
)


def _write_config(directory: Path, content: str) -> Path:
    path = directory / "perceived-load.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_defaults_when_no_config_found(tmp_path):
    context = load_config_context(tmp_path)
    assert context.file_path is None
    assert context.config.lookbacks == list(DEFAULT_LOOKBACKS)
    assert context.config.granularity == timedelta(days=1)
    assert context.resolve_db() is None


def test_config_is_discovered_from_parent_directory(tmp_path):
    _write_config(
        tmp_path,
        """
        db: data/load.csv
        lookbacks: [1, 7, 30]
        granularity: 24h
        log_level: debug
        """,
    )
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    context = load_config_context(nested)
    assert context.file_path == (tmp_path / "perceived-load.yaml").resolve()
    assert context.config.lookbacks == [1, 7, 30]
    assert context.config.granularity == timedelta(hours=24)
    assert context.config.log_level == "DEBUG"
    assert context.resolve_db() == (tmp_path / "data" / "load.csv").resolve()


def test_absolute_db_path_is_kept(tmp_path):
    target = tmp_path / "elsewhere.csv"
    path = _write_config(tmp_path, f"db: {target}\n")
    assert load_config_file(path).resolve_db() == target.resolve()


def test_empty_config_file_uses_defaults(tmp_path):
    path = _write_config(tmp_path, "")
    assert load_config_file(path).config == LoadConfig()


@pytest.mark.parametrize(
    "content",
    [
        "lookbacks: [0, 5]\n",
        "lookbacks: []\n",
        "granularity: fortnightly\n",
        "log_level: chatty\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path, content):
    path = _write_config(tmp_path, content)
    with pytest.raises(ValidationError):
        load_config_file(path)


def test_non_mapping_config_is_rejected(tmp_path):
    path = _write_config(tmp_path, "- 1\n- 2\n")
    with pytest.raises(TypeError, match="must be a mapping"):
        load_config_file(path)


def test_invalid_yaml_is_rejected(tmp_path):
    path = _write_config(tmp_path, "lookbacks: [1, 2\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config_file(path)
