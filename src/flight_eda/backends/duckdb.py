"""
DuckDB analytical backend.

In-process engine holding the source and derived tables of one report run.
"""

from pathlib import Path
from typing import Optional
import logging

import duckdb
import pandas as pd
import pyarrow as pa

from .base import AnalyticalBackend
from ..config import DuckDBConfig
from ..errors import QueryError, TableExistsError


logger = logging.getLogger(__name__)

_STAGING_VIEW = "_incoming_rows"


class DuckDBBackend(AnalyticalBackend):
    """
    DuckDB analytical engine.

    The connection is opened lazily and lives until ``close()``.
    Engine errors surface as ``QueryError`` carrying DuckDB's message.
    """

    def __init__(self, config: Optional[DuckDBConfig] = None):
        self.config = config or DuckDBConfig()
        self._conn: Optional[duckdb.DuckDBPyConnection] = None

        if not self.config.in_memory:
            Path(self.config.database_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get or create DuckDB connection."""
        if self._conn is None:
            self._conn = self._create_connection()
        return self._conn

    def _create_connection(self) -> duckdb.DuckDBPyConnection:
        """Create and configure DuckDB connection."""
        logger.debug(f"Opening DuckDB connection: {self.config.get_connection_string()}")
        conn = duckdb.connect(self.config.get_connection_string())

        if self.config.threads:
            conn.execute(f"SET threads = {self.config.threads}")

        if self.config.memory_limit:
            conn.execute(f"SET memory_limit = '{self.config.memory_limit}'")

        return conn

    def write(self, table_name: str, data: pa.Table) -> None:
        """
        Create a DuckDB table from an Arrow table.

        Args:
            table_name: Name of the new table
            data: PyArrow table to write

        Raises:
            TableExistsError: a relation with this name already exists
        """
        if self.table_exists(table_name):
            raise TableExistsError(table_name)

        self.conn.register(_STAGING_VIEW, data)
        try:
            self.execute(f"CREATE TABLE {table_name} AS SELECT * FROM {_STAGING_VIEW}")
        finally:
            self.conn.unregister(_STAGING_VIEW)

        logger.debug(f"Wrote {len(data)} rows to {table_name}")

    def execute(
        self, query: str, params: Optional[list] = None
    ) -> duckdb.DuckDBPyConnection:
        """
        Execute a SQL statement.

        Args:
            query: SQL query string
            params: Optional positional parameters

        Returns:
            The connection, positioned on the result
        """
        try:
            if params:
                return self.conn.execute(query, params)
            return self.conn.execute(query)
        except duckdb.Error as e:
            raise QueryError("sql", str(e), sql=query) from e

    def query(self, query: str, params: Optional[list] = None) -> pa.Table:
        """Execute query and return as PyArrow Table."""
        return self.execute(query, params).to_arrow_table()

    def query_df(self, query: str, params: Optional[list] = None) -> pd.DataFrame:
        """Execute query and return as pandas DataFrame."""
        return self.execute(query, params).df()

    def materialize(
        self,
        table_name: str,
        query: str,
        replace: bool = True,
    ) -> int:
        """
        Materialize a query result as a table.

        Args:
            table_name: Name for the materialized table
            query: SQL query to materialize
            replace: Whether to replace existing table

        Returns:
            Number of rows in the materialized table
        """
        if replace:
            self.execute(f"DROP TABLE IF EXISTS {table_name}")

        self.execute(f"CREATE TABLE {table_name} AS {query}")

        result = self.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()
        return result[0] if result else 0

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        result = self.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return result[0] > 0 if result else False

    def get_schema(self, table_name: str) -> pa.Schema:
        """Get the schema of a table."""
        return self.query(f"SELECT * FROM {table_name} LIMIT 0").schema

    def close(self) -> None:
        """Close the DuckDB connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __del__(self):
        self.close()
