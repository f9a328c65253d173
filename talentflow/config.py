import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default="false"):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration class with common settings."""
    # CORS configuration
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE")  # e.g. logs/app.log, stdout only when unset
    LOG_JSON = _env_flag("LOG_JSON", "true")  # key=value console lines when false

    # Background scheduler (business-days backfill)
    # Only one process should run it, so it stays off unless explicitly enabled
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED")
    BACKFILL_INTERVAL_MINUTES = int(os.environ.get("BACKFILL_INTERVAL_MINUTES", "5"))

    # Holidays dated before today are rejected unless this is set
    HOLIDAY_ALLOW_PAST_DATES = _env_flag("HOLIDAY_ALLOW_PAST_DATES")


class LocalConfig(Config):
    """Configuration for local development."""
    ENV = "local"
    DEBUG = True
    LOG_JSON = _env_flag("LOG_JSON", "false")


class SandboxConfig(Config):
    """Configuration for sandbox/staging environment."""
    ENV = "sandbox"
    DEBUG = False


class ProductionConfig(Config):
    """Configuration for production environment."""
    ENV = "production"
    DEBUG = False


class TestingConfig(Config):
    """Configuration for the test suite (in-memory SQLite, no scheduler)."""
    ENV = "testing"
    DEBUG = False
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SCHEDULER_ENABLED = False
    LOG_FILE = None


def get_config():
    """Get the appropriate configuration class based on environment variable.

    Environment is determined by FLASK_ENV or ENVIRONMENT variable:
    - 'local' or 'development' -> LocalConfig
    - 'sandbox' or 'staging' -> SandboxConfig
    - 'production' or 'prod' -> ProductionConfig
    - 'testing' or 'test' -> TestingConfig

    Defaults to LocalConfig if not set.
    """
    env = (os.environ.get("FLASK_ENV") or os.environ.get("ENVIRONMENT", "local")).lower()

    if env in ["local", "development", "dev"]:
        return LocalConfig
    elif env in ["sandbox", "staging", "stage"]:
        return SandboxConfig
    elif env in ["production", "prod"]:
        return ProductionConfig
    elif env in ["testing", "test"]:
        return TestingConfig
    else:
        # Default to local for safety
        return LocalConfig
