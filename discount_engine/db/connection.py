"""SQLAlchemy engine setup for the orders database"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from discount_engine.utils.errors import DatabaseConnectionError
from discount_engine.utils.logging import get_logger

logger = get_logger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine and verify the database answers

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite:///data/orders.db
        echo: Log emitted SQL

    Returns:
        Connected engine

    Raises:
        DatabaseConnectionError: If the URL is invalid, the driver is missing or the database is unreachable
    """
    try:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError, ValueError) as e:
        raise DatabaseConnectionError(f"Invalid database configuration: {e}") from e

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise DatabaseConnectionError(f"Database unreachable: {e}") from e

    logger.info("Connected to database", dialect=engine.dialect.name)
    return engine


def check_database_health(engine: Engine) -> bool:
    """
    Check if the database connection is healthy.

    Returns:
        True if SELECT 1 succeeds, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
