"""Household Income Planner Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from income_planner.config import get_global_settings


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production)

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = config_name or settings.app_env
    app.config["DEBUG"] = settings.app_env == "development"
    app.config["TESTING"] = config_name == "testing"

    logging.basicConfig(level=settings.log_level)
    app.logger.setLevel(settings.log_level)

    # Register blueprints
    from income_planner.blueprints.health import health_bp
    from income_planner.blueprints.planning import planning_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(planning_bp)

    return app
