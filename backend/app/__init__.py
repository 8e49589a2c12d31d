"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time, which enables:
           - Multiple isolated test app instances
           - Running Alembic without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure logging and initialise extensions via init_app()
  3. Create the app's HitCounter (app.extensions["hit_counter"])
  4. Register all route blueprints
  5. Register global error handlers; every error body is {"error": "..."}
"""

from __future__ import annotations

import traceback

from flask import Flask, jsonify
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from backend.config import config_by_name, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
                     Defaults to "development".
    """
    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO").upper())

    # Keep serializer field order in response bodies.
    app.json.sort_keys = False

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from backend.app.extensions import db
    from backend.app.services.metrics_service import EXTENSION_KEY, HitCounter

    db.init_app(app)
    app.extensions[EXTENSION_KEY] = HitCounter()

    # ── Model registration ─────────────────────────────────────────────────
    # Import all models so that SQLAlchemy's MetaData is populated.
    with app.app_context():
        from backend.app.models import chirp, refresh_token, user  # noqa: F401

    _register_blueprints(app)
    _register_error_handlers(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints.

    The url_prefix is set here so individual route files only specify the
    path relative to their resource.
    """
    from backend.app.routes.admin import admin_bp, fileserver_bp, health_bp
    from backend.app.routes.auth import auth_bp
    from backend.app.routes.chirps import chirps_bp
    from backend.app.routes.users import users_bp
    from backend.app.routes.webhooks import webhooks_bp

    app.register_blueprint(users_bp,      url_prefix="/api/users")
    app.register_blueprint(auth_bp,       url_prefix="/api")
    app.register_blueprint(chirps_bp,     url_prefix="/api")
    app.register_blueprint(webhooks_bp,   url_prefix="/api/polka")
    app.register_blueprint(health_bp,     url_prefix="/api")
    app.register_blueprint(admin_bp,      url_prefix="/admin")
    app.register_blueprint(fileserver_bp, url_prefix="/app")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError              → {"error": message} with the error's HTTP status
      marshmallow errors    → first field message, 400
      HTTPException         → werkzeug's description and status (404, 405, ...)
      SQLAlchemyError       → session rolled back, 500
      Exception             → generic 500; traceback logged, never returned
    """
    from backend.app.errors import AppError, StorageError
    from backend.app.extensions import db

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (middleware, service, route) into the error body.

        Routes never catch AppError; they let it propagate here.
        """
        if error.http_status >= 500:
            app.logger.error("%r", error)
        else:
            app.logger.info("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(error: SchemaValidationError):
        """
        Marshmallow raises ValidationError with a messages dict keyed by field
        name. Only the FIRST field's first message is returned.
        """
        return jsonify({"error": _first_schema_message(error.messages)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        db.session.rollback()
        app.logger.error(
            "Database error: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        storage_error = StorageError("A database error occurred.")
        return jsonify(storage_error.to_dict()), storage_error.http_status

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.
        Stack traces never leave the server.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": "An unexpected error occurred. Please try again later.",
        }), 500


def _first_schema_message(messages) -> str:
    """
    Flattens marshmallow's nested messages to "<field>: <message>" for the
    first error found.

    {"email": ["Not a valid email address."]} → "email: Not a valid email address."
    """
    if isinstance(messages, dict):
        for field_name, field_errors in messages.items():
            inner = _first_schema_message(field_errors)
            if field_name == "_schema":
                return inner
            return f"{field_name}: {inner}"
        return "Invalid input."
    if isinstance(messages, list):
        return _first_schema_message(messages[0]) if messages else "Invalid input."
    return str(messages)
