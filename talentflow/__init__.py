from flask import Flask, jsonify
from flask_cors import CORS

from talentflow.errors import SchedulingError
from talentflow.logging_config import configure_logging, get_logger
from talentflow.models import db

logger = get_logger(__name__)


def create_app(config_class=None):
    """
    Application factory.

    Args:
        config_class: Config class to load. Defaults to get_config(), which
            picks one from FLASK_ENV / ENVIRONMENT.
    """
    # Import config after dotenv is loaded
    from talentflow.config import get_config
    from talentflow.db_config import configure_database
    from talentflow.api import api_bp
    from talentflow.jobs.scheduler import init_scheduler

    config_class = config_class or get_config()

    configure_logging(
        log_level=config_class.LOG_LEVEL,
        log_file=config_class.LOG_FILE,
        json_console=config_class.LOG_JSON,
    )

    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_database(app)

    logger.info("Starting application", environment=config_class.ENV)
    logger.info("Database configured", uri=app.config.get("SQLALCHEMY_DATABASE_URI", "Not set")[:50])

    allowed_origins = app.config.get("CORS_ORIGINS", "*")
    if allowed_origins != "*":
        # Parse comma-separated list if provided
        allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

    CORS(app,
         resources={r"/api/*": {"origins": allowed_origins}},
         allow_headers=["Content-Type", "Authorization", "X-Tenant-Id", "X-Actor-Id"],
         methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"])

    db.init_app(app)

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle everything else as JSON, keeping HTTP errors' own status codes."""
        logger.error("Unhandled exception", error=str(e), exc_info=True)

        status_code = getattr(e, "code", None)
        if not isinstance(status_code, int):
            status_code = 500

        response = jsonify({
            "error": str(e),
            "message": "An error occurred processing your request"
        })
        response.status_code = status_code
        return response

    # Initialize scheduler safely
    try:
        init_scheduler(app)
    except Exception as e:
        logger.error("Failed to start scheduler", error=str(e))

    return app
