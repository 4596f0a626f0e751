# backend/retail_pos/__init__.py
from flask import Flask, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .extensions import db, migrate
from .errors import RetailPosError, PersistenceError
from .settings import AppSettings


def create_app(config_overrides: dict | None = None, storage=None) -> Flask:
    """
    Application factory.

    config_overrides are applied on top of Config before anything is built.
    storage replaces the backend chosen by STORAGE_BACKEND (tests).
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Settings are frozen here; components never read app.config afterwards
    from .services.container import EXTENSION_KEY, build_services
    settings = AppSettings.from_mapping(app.config)
    services = build_services(settings, storage=storage)
    app.extensions[EXTENSION_KEY] = services
    app.logger.info("Storage: %s", services.storage.describe())

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.users import users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(users_bp)

    @app.errorhandler(RetailPosError)
    def handle_domain_error(error: RetailPosError):
        return jsonify({"error": str(error)}), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception("Database operation failed")
        wrapped = PersistenceError()
        return jsonify({"error": str(wrapped)}), wrapped.status_code

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = app.config.get("CORS_ALLOWED_ORIGINS") or {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        }
        if origin and (origin in allowed_origins or "*" in allowed_origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
