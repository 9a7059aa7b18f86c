"""Startup checks refuse to build the app with an untrusted signing setup."""

import pytest

from apihub.core.startup import StartupCheckError
from apihub.factory import create_app
from tests.conftest import TestConfig


class NoSecretConfig(TestConfig):
    JWT_SECRET_KEY = None


class BlankSecretConfig(TestConfig):
    JWT_SECRET_KEY = "   "


class WeakProductionConfig(TestConfig):
    ENV_NAME = "production"
    JWT_SECRET_KEY = "short"
    JWT_SECRET_MIN_LENGTH = 32
    SECRET_KEY = "CHANGE_ME"


@pytest.mark.parametrize("config", [NoSecretConfig, BlankSecretConfig])
def test_missing_signing_secret_blocks_startup(config):
    with pytest.raises(StartupCheckError, match="JWT_SECRET_KEY is not configured"):
        create_app(config)


def test_production_rejects_weak_secrets():
    with pytest.raises(StartupCheckError) as info:
        create_app(WeakProductionConfig)
    message = str(info.value)
    assert "at least 32 characters" in message
    assert "SECRET_KEY uses a placeholder value" in message


def test_valid_secret_boots(app):
    assert app.config["JWT_SECRET_KEY"]
