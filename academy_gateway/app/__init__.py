"""Application factory for the academy gateway."""
from __future__ import annotations

import logging
import os

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from academy_gateway.config import get_config, resolve_backend_base
from academy_gateway.app.middleware import register_access_guard, register_request_logging
from academy_gateway.extensions import cors, jwt


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    config_cls = get_config(config_name or os.getenv("FLASK_ENV"))
    app.config.from_object(config_cls)
    # Resolved once; handlers read it from the app config only.
    app.config["BACKEND_API_BASE"] = resolve_backend_base()

    configure_logging(app)
    register_blueprints(app)
    register_extensions(app)
    register_request_logging(app)
    register_access_guard(app)
    register_error_handlers(app)

    app.logger.info("Forwarding API calls to %s", app.config["BACKEND_API_BASE"])
    return app


def configure_logging(app: Flask) -> None:
    """Apply the configured log level to the application logger."""

    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if isinstance(level, int):
        app.logger.setLevel(level)
        logging.getLogger("academy_gateway").setLevel(level)


def register_extensions(app: Flask) -> None:
    """Initialize Flask extensions."""

    from academy_gateway.app.api.proxy import cors_resources
    from academy_gateway.app.api.routes import ROUTES

    jwt.init_app(app)
    cors.init_app(
        app,
        resources=cors_resources(ROUTES, app.config["PUBLIC_CORS_ORIGIN"]),
        vary_header=True,
    )


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""

    from academy_gateway.app.api import api_bp
    from academy_gateway.app.frontend import debug_cookies, frontend_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(frontend_bp)
    if app.debug:
        app.add_url_rule("/debug/cookies", view_func=debug_cookies)


def register_error_handlers(app: Flask) -> None:
    """Answer unmatched API calls with JSON instead of HTML error pages."""

    from academy_gateway.app.api.relay import error_response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        if not request.path.startswith("/api/"):
            return exc.get_response()
        response = error_response(exc.name, exc.code or 500)
        valid_methods = getattr(exc, "valid_methods", None)
        if valid_methods:
            response.headers["Allow"] = ", ".join(valid_methods)
        return response
