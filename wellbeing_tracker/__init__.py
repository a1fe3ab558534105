"""
Application factory for the Wellbeing Tracker.

This module provides a function to create and configure the Flask
application. Extensions (SQLAlchemy, Migrate) are initialised here,
the API blueprints are registered, and the application's
``ActivityStore`` is created and loaded from its storage slot.

Environment variables control the database connection, the storage
key and logging. In production, set ``DATABASE_URL`` in your
environment. A default configuration is provided for development,
using SQLite when no database URL is available.
"""

from __future__ import annotations

import os

from flask import Flask
from flask_migrate import Migrate

from .db import db  # use shared db object from db.py
migrate = Migrate()


def create_app(test_config: dict | None = None) -> Flask:
    """Create and configure a Flask application.

    Parameters
    ----------
    test_config: dict | None, optional
        Optional configuration overrides used when running tests.
        ``ACTIVITY_STORAGE`` may supply a storage backend to use
        instead of the database.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    app = Flask(__name__)

    # Default configuration. Override using environment variables or
    # by passing a ``test_config`` mapping.
    app.config.update(
        SQLALCHEMY_DATABASE_URI=os.environ.get("DATABASE_URL", "sqlite:///wellbeing.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        WELLBEING_STORAGE_KEY=os.environ.get("WELLBEING_STORAGE_KEY", "wellbeing-storage"),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
        LOG_FILE=os.environ.get("LOG_FILE"),
        ACTIVITY_STORAGE=None,
    )

    if test_config:
        app.config.update(test_config)

    from .logger import setup_logger
    setup_logger(level=app.config["LOG_LEVEL"], log_file=app.config["LOG_FILE"])

    # Initialise extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)

    # Register custom error handlers
    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints. Importing here avoids circular imports.
    from .routes.logs import logs_bp
    from .routes.stats import stats_bp

    app.register_blueprint(logs_bp, url_prefix="/api")
    app.register_blueprint(stats_bp, url_prefix="/api")

    # One store per application, loaded once at startup
    from .services import ActivityStore
    from .storage import DatabaseStorage

    storage = app.config["ACTIVITY_STORAGE"] or DatabaseStorage(db)
    with app.app_context():
        db.create_all()
        store = ActivityStore.open(storage, key=app.config["WELLBEING_STORAGE_KEY"])
    app.extensions["activity_store"] = store

    @app.teardown_appcontext
    def flush_store(exc: BaseException | None) -> None:
        store.flush()

    # Provide a simple health check route
    @app.route("/api/health")
    def health_check() -> dict[str, str]:
        """Return a simple health check response.

        This endpoint can be used by deployment platforms to verify
        that the application has started correctly.
        """
        return {"status": "ok"}

    return app
