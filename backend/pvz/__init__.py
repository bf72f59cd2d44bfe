# backend/pvz/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def _configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)
    logging.getLogger("pvz").setLevel(level)


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # SQLite has no row locks; status checks and writes share the database lock.
    # An in-memory database is a single shared connection with no second writer.
    with app.app_context():
        url = db.engine.url
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            from .services.concurrency import serialize_sqlite_transactions
            serialize_sqlite_transactions(db.engine)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.pickup_points import pickup_points_bp
    from .routes.receptions import receptions_bp
    from .routes.products import products_bp
    from .routes.audit import audit_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(pickup_points_bp)
    app.register_blueprint(receptions_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(audit_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
