"""Unit tests for core/config.py -- Settings validation.

Settings(...) is constructed directly with keyword arguments so the cached
get_settings() singleton used by the running app is never touched.
"""

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_dev_generates_secret_key():
    settings = Settings(environment="development", secret_key="")
    assert len(settings.secret_key) >= 32


def test_production_requires_secret_key():
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(environment="production", secret_key="")


def test_short_secret_key_rejected():
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(environment="development", secret_key="too-short")


def test_cookie_policy_follows_environment():
    dev = Settings(environment="development", secret_key="k" * 32)
    prod = Settings(environment="production", secret_key="k" * 32)
    assert dev.cookie_same_site == "strict"
    assert not dev.is_production
    assert prod.cookie_same_site == "none"
    assert prod.is_production


def test_unknown_environment_rejected():
    with pytest.raises(ValidationError):
        Settings(environment="staging", secret_key="k" * 32)
