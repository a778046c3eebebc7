"""
Record State
Flask Application Factory.

Usage:
    from record_state import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from record_state.config import config
from record_state.core.exceptions import ConflictError, NotFoundError, ValidationError
from record_state.middleware.logging_config import configure_logging
from record_state.models import db
from record_state.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def _register_error_handlers(app):
    """Map service exceptions and database errors to JSON responses."""

    @app.errorhandler(NotFoundError)
    def _not_found(exc):
        return api_error(E.NOT_FOUND, str(exc))

    @app.errorhandler(ValidationError)
    def _validation(exc):
        return api_error(E.VALIDATION_INVALID, str(exc), details=exc.details)

    @app.errorhandler(ConflictError)
    def _conflict(exc):
        return api_error(E.CONFLICT_DUPLICATE, str(exc), details={exc.field: exc.value})

    @app.errorhandler(IntegrityError)
    def _integrity(exc):
        logger.warning("Integrity error: %s", exc.orig)
        return api_error(E.CONFLICT_DUPLICATE, "Duplicate or constraint violation")

    @app.errorhandler(SQLAlchemyError)
    def _database(exc):
        logger.exception("Database error on %s %s", request.method, request.path)
        return api_error(E.DATABASE, "Database error")

    @app.errorhandler(404)
    def _route_not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return {"error": "Method not allowed"}, 405


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse a missing DATABASE_URL
    app.config.from_object(config[config_name]())
    os.makedirs(app.instance_path, exist_ok=True)

    # ── Logging (must be first) ──────────────────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)

    # ── Import models so create_all sees them ────────────────────────────
    from record_state.models import document as _document_models  # noqa: F401

    with app.app_context():
        db.create_all()

    # ── Blueprints ───────────────────────────────────────────────────────
    from record_state.blueprints.document_bp import document_bp

    app.register_blueprint(document_bp)

    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "record-state"}

    _register_error_handlers(app)

    return app
