"""
Database URI and engine options per environment.

    local       LOCAL_DATABASE_URL, falls back to a SQLite file
    sandbox     SANDBOX_DATABASE_URL (required)
    production  PRODUCTION_DATABASE_URL or DATABASE_URL (required)
"""
import os

from sqlalchemy.pool import QueuePool

_ENVIRONMENTS = {
    "local": ("local", "development", "dev"),
    "sandbox": ("sandbox", "staging", "stage"),
    "production": ("production", "prod"),
}

_URL_VARIABLES = {
    "local": ("LOCAL_DATABASE_URL",),
    "sandbox": ("SANDBOX_DATABASE_URL",),
    "production": ("PRODUCTION_DATABASE_URL", "DATABASE_URL"),
}

LOCAL_FALLBACK_URL = "sqlite:///talentflow.sqlite"


def get_database_engine_options():
    """Engine options for the hosted PostgreSQL databases."""
    return {
        "pool_pre_ping": True,
        "pool_recycle": 280,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_reset_on_return": "commit",
        "poolclass": QueuePool,
        # Stage completion relies on read-check-write under a row lock
        "isolation_level": "READ COMMITTED",
        "connect_args": {
            "sslmode": "require",
            "connect_timeout": 10,
            "application_name": "talentflow_scheduler",
            "options": "-c statement_timeout=30000",  # 30s per statement
        },
    }


def normalize_environment(environment=None):
    if environment is None:
        environment = os.environ.get("FLASK_ENV") or os.environ.get("ENVIRONMENT", "local")
    environment = environment.lower()
    for name, aliases in _ENVIRONMENTS.items():
        if environment in aliases:
            return name
    return "local"


def normalize_url(url):
    # SQLAlchemy 2 only accepts the postgresql:// scheme
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def get_database_config(environment=None):
    """
    Resolve the database for an environment.

    Args:
        environment: Environment name or alias. Read from FLASK_ENV /
            ENVIRONMENT when None; unknown names fall back to local.

    Returns:
        tuple: (database_uri, engine_options). engine_options is None for local.

    Raises:
        ValueError: sandbox or production without a configured URL
    """
    environment = normalize_environment(environment)
    variables = _URL_VARIABLES[environment]
    url = next((os.environ[name] for name in variables if os.environ.get(name)), None)

    if environment == "local":
        return normalize_url(url or LOCAL_FALLBACK_URL), None

    if not url:
        raise ValueError(f"{' or '.join(variables)} must be set for the {environment} environment")
    return normalize_url(url), get_database_engine_options()


def configure_database(app):
    """
    Set SQLALCHEMY_DATABASE_URI and SQLALCHEMY_ENGINE_OPTIONS for the app.

    A URI already provided by the config class (TestingConfig) is kept.
    """
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config.setdefault("SQLALCHEMY_ECHO", False)

    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        return

    database_uri, engine_options = get_database_config(app.config.get("ENV"))
    app.config["SQLALCHEMY_DATABASE_URI"] = database_uri
    if engine_options:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options
