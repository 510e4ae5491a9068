# server/linkgate/config.py

import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    FLASK_ENV = "production"
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///linkgate.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    REDIS_URL = os.environ.get("REDIS_URL")
    CACHE_TTL_LINK = int(os.environ.get("CACHE_TTL_LINK", 3600))

    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5000")
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()]

    # Passphrase for the AES secret encoding
    SECRET_ENCRYPTION_KEY = os.environ.get(
        "SECRET_ENCRYPTION_KEY", "default-development-key-change-in-production"
    )
    PASSWORD_STORAGE = os.environ.get("PASSWORD_STORAGE", "aes")

    SPLASH_REDIRECT_SECONDS = int(os.environ.get("SPLASH_REDIRECT_SECONDS", 3))
    DEFAULT_LOADING_TEXT = os.environ.get("DEFAULT_LOADING_TEXT", "Loading…")

    AFFILIATE_COOKIE_NAME = os.environ.get("AFFILIATE_COOKIE_NAME", "aff_ref")
    AFFILIATE_COOKIE_SECURE = _env_bool("AFFILIATE_COOKIE_SECURE", False)

    TIME_RULES_TIMEZONE = os.environ.get("TIME_RULES_TIMEZONE", "UTC")
    TRUSTED_COUNTRY_HEADERS = ("CF-IPCountry", "X-Country-Code")

    CLICK_RECORDING_ASYNC = _env_bool("CLICK_RECORDING_ASYNC", True)
    CLICK_QUEUE_SIZE = int(os.environ.get("CLICK_QUEUE_SIZE", 10000))

    SHORT_CODE_LENGTH = int(os.environ.get("SHORT_CODE_LENGTH", 7))
    SHORT_CODE_MAX_LENGTH = 50

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    PASSWORD_ATTEMPT_LIMIT = os.environ.get("PASSWORD_ATTEMPT_LIMIT", "10 per minute")


class DevelopmentConfig(Config):
    FLASK_ENV = "development"
    DEBUG = True


class ProductionConfig(Config):
    FLASK_ENV = "production"
    AFFILIATE_COOKIE_SECURE = _env_bool("AFFILIATE_COOKIE_SECURE", True)


class TestingConfig(Config):
    FLASK_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    REDIS_URL = None
    SECRET_ENCRYPTION_KEY = "test-encryption-key"
    CLICK_RECORDING_ASYNC = False
    RATELIMIT_ENABLED = False


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
