"""Exceptions raised by the report pipeline."""

from typing import Optional


class FlightEDAError(Exception):
    """Base exception for report errors."""
    pass


class SchemaMismatchError(FlightEDAError):
    """Dataset does not match the expected column schema."""
    def __init__(self, table: str, errors: list[str]):
        self.table = table
        self.errors = errors
        super().__init__(f"Schema validation failed for '{table}': {'; '.join(errors)}")


class TableExistsError(FlightEDAError):
    """A relation with the same name is already loaded."""
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table already exists: {table}")


class QueryError(FlightEDAError):
    """The analytical engine rejected a query."""
    def __init__(self, query_name: str, message: str, sql: Optional[str] = None):
        self.query_name = query_name
        self.message = message
        self.sql = sql
        super().__init__(f"Query '{query_name}' failed: {message}")


class DegenerateRegressionError(FlightEDAError):
    """Regression input cannot produce a unique least-squares fit."""
    pass
