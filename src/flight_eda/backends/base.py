"""Base analytical backend interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
import pandas as pd
import pyarrow as pa


class AnalyticalBackend(ABC):
    """
    Abstract base class for embedded analytical engines.

    The report depends only on loading a table from structured rows,
    running read-only SQL and running table-creating statements.
    """

    @abstractmethod
    def write(self, table_name: str, data: pa.Table) -> None:
        """Create a new table from structured rows. Fails if it exists."""
        pass

    @abstractmethod
    def execute(self, query: str, params: Optional[list] = None) -> Any:
        """Execute a statement against the backend."""
        pass

    @abstractmethod
    def query(self, query: str, params: Optional[list] = None) -> pa.Table:
        """Execute a read-only query and return a PyArrow table."""
        pass

    @abstractmethod
    def query_df(self, query: str, params: Optional[list] = None) -> pd.DataFrame:
        """Execute a read-only query and return a pandas DataFrame."""
        pass

    @abstractmethod
    def materialize(self, table_name: str, query: str, replace: bool = True) -> int:
        """Create a table from a query. Returns its row count."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        pass

    @abstractmethod
    def get_schema(self, table_name: str) -> pa.Schema:
        """Get the schema of a table."""
        pass

    def close(self) -> None:
        """Close any open connections."""
        pass

    def __enter__(self) -> "AnalyticalBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
