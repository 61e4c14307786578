"""Tests for loading client options from the environment."""

import pytest
from pydantic import ValidationError

from halite.core.env_config import HaliteSettings, load_from_env
from halite.core.logging import HaliteLogger
from halite.core.options import Options


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "HALITE_USER_AGENT", "HALITE_CONNECT_TIMEOUT", "HALITE_READ_TIMEOUT",
        "HALITE_FOLLOW", "HALITE_FOLLOW_STRICT", "HALITE_LOGGING",
        "HALITE_LOG_LEVEL", "HALITE_LOG_FORMAT", "HALITE_LOG_FILE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_are_not_explicit():
    options = load_from_env()
    assert options.explicit_fields == frozenset()
    assert options.follow.hops == 0
    assert options.timeout.read is None


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("HALITE_USER_AGENT", "svc/1.0")
    monkeypatch.setenv("HALITE_CONNECT_TIMEOUT", "2.5")
    monkeypatch.setenv("HALITE_READ_TIMEOUT", "30")
    monkeypatch.setenv("HALITE_FOLLOW", "3")
    monkeypatch.setenv("HALITE_FOLLOW_STRICT", "false")

    options = load_from_env()

    assert options.headers["User-Agent"] == "svc/1.0"
    assert (options.timeout.connect, options.timeout.read) == (2.5, 30.0)
    assert (options.follow.hops, options.follow.strict) == (3, False)
    assert {"timeout", "follow"} <= options.explicit_fields


def test_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("HALITE_FOLLOW=4\nHALITE_READ_TIMEOUT=10\n", encoding="utf-8")

    options = load_from_env(str(env_file))

    assert options.follow.hops == 4
    assert options.timeout.read == 10.0


def test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("HALITE_FOLLOW", "3")
    assert load_from_env(follow=1).follow.hops == 1


def test_invalid_values_rejected(monkeypatch):
    monkeypatch.setenv("HALITE_READ_TIMEOUT", "-1")
    with pytest.raises(ValidationError):
        load_from_env()


def test_negative_follow_rejected():
    with pytest.raises(ValidationError):
        HaliteSettings(follow=-2)


def test_loaded_options_merge_like_hand_built():
    base = Options.create(follow=2, timeout=5)
    merged = base.merge(load_from_env())
    assert merged.follow.hops == 2
    assert merged.timeout.read == 5.0


def test_logging_builds_logger(monkeypatch, tmp_path):
    monkeypatch.setenv("HALITE_LOGGING", "true")
    monkeypatch.setenv("HALITE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("HALITE_LOG_FORMAT", "json")

    options = load_from_env()
    try:
        assert options.logging is True
        assert isinstance(options.logger, HaliteLogger)
        assert options.logger.config.format.value == "json"
    finally:
        options.logger.close()


def test_logging_config_with_file(tmp_path):
    settings = HaliteSettings(log_file_path=str(tmp_path / "halite.log"))
    config = settings.to_logging_config()
    assert config.enable_file is True
    assert config.file_path == str(tmp_path / "halite.log")
