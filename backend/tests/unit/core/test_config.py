"""Unit tests for configuration parsing."""

from __future__ import annotations

from datetime import timedelta

import pytest
from issuer.container import token_config_from
from issuer.core.config import (
    DevelopmentConfig,
    TestingConfig,
    get_config,
    parse_duration,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("60s", timedelta(seconds=60)),
        ("2h", timedelta(hours=2)),
        ("1w", timedelta(weeks=1)),
        ("3600", timedelta(seconds=3600)),
        (" 30M ", timedelta(minutes=30)),
        (90, timedelta(seconds=90)),
        (timedelta(days=1), timedelta(days=1)),
    ],
)
def test_parse_duration_accepts_compact_forms(raw, expected) -> None:
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "15 minutes", "-5m", "1.5h", "m"])
def test_parse_duration_rejects_garbage(raw) -> None:
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_get_config_follows_app_env(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "testing")
    assert get_config() is TestingConfig

    monkeypatch.setenv("APP_ENV", "nonsense")
    assert get_config() is DevelopmentConfig


def test_token_config_from_mapping_uses_defaults() -> None:
    """Missing lifetimes fall back to 15m / 7d / 60s."""
    cfg = token_config_from({"TOKEN_ISSUER": "iss", "TOKEN_AUDIENCE": "aud"})

    assert cfg.issuer == "iss"
    assert cfg.audience == "aud"
    assert cfg.access_max_age == timedelta(minutes=15)
    assert cfg.refresh_max_age == timedelta(days=7)
    assert cfg.clock_tolerance == timedelta(seconds=60)
