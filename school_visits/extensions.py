# extensions.py
"""
Extension handles shared by the models and services, bound to the app in
create_app(). Flask-SQLAlchemy removes the scoped session when each app
context tears down; dispose_engine() releases the pool when the process exits.
"""

import logging
import sqlite3

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def register_sqlite_functions(dbapi_connection, connection_record):
    """Unicode lower() on SQLite connections, the built-in one folds ASCII only."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def check_database_health():
    """
    Run a trivial query against the visits store.
    Requires an active application context.

    Returns:
        tuple: (healthy, message)
    """
    try:
        with db.engine.connect() as connection:
            connection.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Visits store unreachable: {e}")
        return False, f"Visits store unreachable: {str(e)}"

    return True, "Visits store reachable"


def init_extensions(app):
    """Bind SQLAlchemy and Flask-Migrate to the application."""
    db.init_app(app)
    migrate.init_app(app, db)


def dispose_engine(app):
    """Release pooled connections held by the engine."""
    with app.app_context():
        db.engine.dispose()
    logger.info("Database engine disposed")
