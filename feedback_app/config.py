import os
from dotenv import dotenv_values

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")

    # Database (env in prod; dev/test may use default)
    _ENV_FALLBACK = dotenv_values(".env")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    APP_ENV = os.environ.get("APP_ENV", "development")
    JSON_SORT_KEYS = False

    # Flask-Limiter default: off globally; prefer per-route limits
    RATELIMIT_DEFAULT = None
    RATELIMIT_HEADERS_ENABLED = True

    # Public submission endpoint (token in URL, no login)
    SUBMISSION_RATE_LIMIT = os.getenv("SUBMISSION_RATE_LIMIT", "30 per minute")

    # --- Observability ---
    SENTRY_DSN = os.getenv("SENTRY_DSN")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    # REQUIRE env vars in production (fail fast if missing); read lazily so
    # importing this module in dev/test never raises
    @property
    def SECRET_KEY(self):
        return os.environ["SECRET_KEY"]

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        return os.environ["DATABASE_URL"]

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False

_ENV_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "staging": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    cfg = _ENV_MAP.get(env, DevelopmentConfig)
    # Instances resolve the production properties; plain classes are fine elsewhere
    return cfg() if cfg is ProductionConfig else cfg
