"""Analytical backends for the flight delay report."""

from .base import AnalyticalBackend
from .duckdb import DuckDBBackend

__all__ = ["AnalyticalBackend", "DuckDBBackend"]
