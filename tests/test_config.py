from __future__ import annotations

import pytest

from app.core.config import _build_config
from app.core.exceptions import ConfigurationError


def test_defaults_are_valid(monkeypatch):
    monkeypatch.delenv("BUSINESS_TIMEZONE", raising=False)
    monkeypatch.delenv("DISPATCH_INTERVAL_SECONDS", raising=False)
    config = _build_config("development")
    assert config.BUSINESS_TIMEZONE == "America/Sao_Paulo"
    assert config.DISPATCH_INTERVAL_SECONDS == 20


def test_unknown_timezone_is_rejected(monkeypatch):
    monkeypatch.setenv("BUSINESS_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_dispatch_interval_must_be_positive(monkeypatch):
    monkeypatch.setenv("DISPATCH_INTERVAL_SECONDS", "0")
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_unsupported_database_scheme_is_rejected(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "mysql://localhost/funnel")
    with pytest.raises(ConfigurationError):
        _build_config("development")
