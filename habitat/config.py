"""Application configuration for habitat."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()

REQUIRED_SECRETS = ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET", "EMAIL_TOKEN_SECRET")


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    if url.get_backend_name() == "sqlite":
        return {
            "pool_pre_ping": True,
            "connect_args": {"timeout": 30},
        }
    if url.get_backend_name() in {"postgresql", "postgres"}:
        timeout = int(os.environ.get("DB_CONNECT_TIMEOUT_SECONDS", "10"))
        return {"pool_pre_ping": True, "connect_args": {"connect_timeout": timeout}}
    return {"pool_pre_ping": True}


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/habitat.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)

    # Three independent signing secrets. flask-jwt-extended signs access tokens.
    ACCESS_TOKEN_SECRET = os.environ.get("ACCESS_TOKEN_SECRET", "")
    REFRESH_TOKEN_SECRET = os.environ.get("REFRESH_TOKEN_SECRET", "")
    EMAIL_TOKEN_SECRET = os.environ.get("EMAIL_TOKEN_SECRET", "")

    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    REFRESH_TOKEN_EXPIRES = timedelta(days=365)
    REFRESH_TOKEN_GRACE = timedelta(minutes=5)
    FORGOT_PASSWORD_TOKEN_EXPIRES = timedelta(minutes=10)

    # memory:// keeps refresh tokens in-process; production refuses it.
    REVOCATION_STORE_URI = os.environ.get("REDIS_URL", "memory://")

    PUSH_GATEWAY_URL = os.environ.get("PUSH_GATEWAY_URL", "https://exp.host/--/api/v2/push/send")
    PUSH_GATEWAY_TIMEOUT = float(os.environ.get("PUSH_GATEWAY_TIMEOUT", "10"))
    PUSH_GATEWAY_ACCESS_TOKEN = os.environ.get("PUSH_GATEWAY_ACCESS_TOKEN", "")
    WELCOME_NOTIFICATION_DELAY_SECONDS = float(os.environ.get("WELCOME_NOTIFICATION_DELAY_SECONDS", "2"))

    RATELIMIT_DEFAULT = "200/hour"
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "true")

    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(1024 * 1024)))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"


class TestingConfig(BaseConfig):
    TESTING = True
    ENV = "testing"
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///instance/test.db")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    RATELIMIT_ENABLED = False

    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    EMAIL_TOKEN_SECRET = "test-email-secret"
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET

    REVOCATION_STORE_URI = "memory://"
    PUSH_GATEWAY_URL = "memory://"
    WELCOME_NOTIFICATION_DELAY_SECONDS = 0.0


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
