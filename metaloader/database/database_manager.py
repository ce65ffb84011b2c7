"""Destination database connection handling.

One engine is created per manager; a load run uses the manager's engine for
provisioning, every chunk transaction and post-load analytics.
"""

from typing import List, Optional

from sqlalchemy import create_engine, func, inspect, select, table, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from metaloader.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Database handler for the destination store.

    Any SQLAlchemy URL works: ``postgresql://`` URLs use the psycopg2
    driver, ``sqlite:///`` URLs are handy for local runs.

    Connection problems are recorded in ``connection_error`` instead of being
    raised, so commands can report them and abort cleanly.
    """

    def __init__(self, db_url: str, schema: Optional[str] = None) -> None:
        self.connection_error = ""
        self.schema = schema
        self._engine: Optional[Engine] = None

        try:
            self._engine = create_engine(db_url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            self.connection_error = str(e)
            logger.error(f"Unable to create database engine: {e}")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(f"No database engine: {self.connection_error}")
        return self._engine

    @property
    def is_valid_connection(self) -> bool:
        return self._engine is not None and self.test_connection()

    def test_connection(self) -> bool:
        if self._engine is None:
            return False
        try:
            with self._engine.connect() as connection:
                connection.execute(text("select 1"))
            return True
        except SQLAlchemyError as e:
            self.connection_error = str(e)
            logger.error(f"Connection error: {e}")
            return False

    def check_table(self, table_name: str) -> bool:
        return inspect(self.engine).has_table(table_name, schema=self.schema)

    def table_names(self) -> List[str]:
        return sorted(inspect(self.engine).get_table_names(schema=self.schema))

    def row_count(self, table_name: str) -> int:
        query = select(func.count()).select_from(table(table_name, schema=self.schema))
        with self.engine.connect() as connection:
            return int(connection.execute(query).scalar_one())

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
