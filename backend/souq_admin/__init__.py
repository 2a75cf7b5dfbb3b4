# backend/souq_admin/__init__.py
import logging

from flask import Flask, current_app, request

from .config import Config
from .extensions import db, migrate


def create_app(test_config=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config is not None:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.commands import commands_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(commands_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(app.config["CORS_ALLOWED_ORIGINS"])
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def get_registry():
    """
    Command registry bound to the current app's session-backed store.

    Built per call: the store wraps db.session, which is scoped to the
    current app context.
    """
    from .commands import build_registry
    from .services.datastore import SqlAlchemyDataStore

    config = current_app.config
    store = SqlAlchemyDataStore(
        db.session,
        atomic_counters=config["ATOMIC_STOCK_COUNTERS"],
        readonly_sql=config["READONLY_SQL_ENABLED"],
    )
    return build_registry(
        store,
        page_size=config["DEFAULT_PAGE_SIZE"],
        timezone_name=config["STORE_TIMEZONE"],
    )
