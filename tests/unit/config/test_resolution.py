import logging
from pathlib import Path

from perceivedload.config.resolution import (
    cascade,
    default_db_path,
    resolve_db_path,
    resolve_log_level,
)


def test_cascade_returns_first_non_none():
    assert cascade(None, 0, 5) == 0
    assert cascade(None, None, fallback="x") == "x"


def test_default_db_path_prefers_environment():
    env = {"PERCEIVED_LOAD_DB": "/data/load.csv", "HOME": "/home/me"}
    assert default_db_path(env) == Path("/data/load.csv")


def test_default_db_path_falls_back_to_home_config():
    assert default_db_path({"HOME": "/home/me"}) == Path("/home/me/.config/perceived-load.csv")
    assert default_db_path({"PERCEIVED_LOAD_DB": "  ", "HOME": "/h"}) == Path("/h/.config/perceived-load.csv")


def test_default_db_path_reads_process_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PERCEIVED_LOAD_DB", str(tmp_path / "env.csv"))
    assert default_db_path() == tmp_path / "env.csv"


def test_resolve_db_path_precedence(tmp_path):
    env = {"HOME": "/home/me"}
    from_config = tmp_path / "config.csv"
    assert resolve_db_path("cli.csv", from_config, env) == Path("cli.csv")
    assert resolve_db_path(None, from_config, env) == from_config
    assert resolve_db_path(None, None, env) == Path("/home/me/.config/perceived-load.csv")


def test_resolve_log_level():
    assert resolve_log_level(None, "info").value == logging.INFO
    assert resolve_log_level("DEBUG", "info").name == "DEBUG"
    assert resolve_log_level(None, None).name == "WARNING"


def test_resolve_log_level_skips_unknown_names():
    assert resolve_log_level("verbose", " debug ").name == "DEBUG"
    assert resolve_log_level("verbose", fallback="nonsense").value == logging.WARNING
