"""
Tests for configuration loading and validation
"""
import logging

import pytest
from pydantic import ValidationError

from finnova.config.settings import Settings
from finnova.src.utils.logger import get_logger, resolve_level


def test_defaults():
    cfg = Settings(_env_file=None)

    assert cfg.SEARCH_RESULTS_LIMIT == 3
    assert cfg.CHUNK_SIZE == 300
    assert cfg.CHUNK_OVERLAP == 50
    assert cfg.SUMMARIZE_TAX_TURNS is False
    assert cfg.DEFAULT_SESSION_ID == "default"


def test_api_key_is_secret():
    cfg = Settings(_env_file=None, GOOGLE_API_KEY="super-secret-key")

    assert "super-secret-key" not in repr(cfg)
    assert cfg.GOOGLE_API_KEY.get_secret_value() == "super-secret-key"


def test_missing_api_key_fails(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize(
    "overrides",
    [
        {"CHUNK_SIZE": 10},
        {"CHUNK_SIZE": 100, "CHUNK_OVERLAP": 100},
        {"LLM_TEMPERATURE": 3.0},
        {"SEARCH_RESULTS_LIMIT": 0},
        {"UPSTREAM_TIMEOUT_SECONDS": 0},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SUMMARIZE_TAX_TURNS", "true")
    monkeypatch.setenv("UPSTREAM_TIMEOUT_SECONDS", "12.5")

    cfg = Settings(_env_file=None)

    assert cfg.SUMMARIZE_TAX_TURNS is True
    assert cfg.UPSTREAM_TIMEOUT_SECONDS == 12.5


def test_session_bound_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, MAX_SESSIONS=0)


@pytest.mark.parametrize(
    "env, explicit, level",
    [("dev", None, logging.DEBUG), ("prod", None, logging.WARNING), ("prod", "INFO", logging.INFO), ("dev", "error", logging.ERROR)],
)
def test_log_level_resolution(env, explicit, level):
    assert resolve_level(env, explicit) == level


def test_logger_is_configured_once():
    first = get_logger("finnova.tests.once", level=logging.INFO)
    second = get_logger("finnova.tests.once", level=logging.DEBUG)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.INFO
    assert second.propagate is False
