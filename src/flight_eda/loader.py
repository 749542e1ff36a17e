"""
Data loader.

Validates the flight and airport datasets and creates the ``flights`` and
``airports`` relations in the analytical backend. Values are loaded as-is.
"""

from typing import Union
import logging

import pandas as pd
import pyarrow as pa

from .backends import AnalyticalBackend
from .errors import SchemaMismatchError, TableExistsError
from .schemas import BaseSchema, FlightSchema, AirportSchema


logger = logging.getLogger(__name__)

Dataset = Union[pd.DataFrame, pa.Table]


def to_arrow(data: Dataset) -> pa.Table:
    """Convert a pandas or PyArrow dataset to a PyArrow table."""
    if isinstance(data, pa.Table):
        return data
    if isinstance(data, pd.DataFrame):
        return pa.Table.from_pandas(data, preserve_index=False)
    raise TypeError(f"Unsupported dataset type: {type(data).__name__}")


class DataLoader:
    """Loads source datasets into an analytical backend."""

    def __init__(self, backend: AnalyticalBackend):
        self.backend = backend

    def load_table(self, table_name: str, data: Dataset, schema: type[BaseSchema]) -> int:
        """
        Validate a dataset and create a table from it.

        Args:
            table_name: Name of the relation to create
            data: pandas DataFrame or PyArrow table
            schema: Schema the dataset must satisfy

        Returns:
            Number of rows loaded

        Raises:
            SchemaMismatchError: a required column is missing or has the wrong type
            TableExistsError: a relation with this name already exists
        """
        table = to_arrow(data)

        errors = schema.validate(table)
        if errors:
            raise SchemaMismatchError(table_name, errors)

        if self.backend.table_exists(table_name):
            raise TableExistsError(table_name)

        self.backend.write(table_name, table)
        logger.info(f"Loaded {len(table):,} rows into '{table_name}'")
        return len(table)

    def load_flights(self, data: Dataset, table_name: str = FlightSchema.table_name) -> int:
        return self.load_table(table_name, data, FlightSchema)

    def load_airports(self, data: Dataset, table_name: str = AirportSchema.table_name) -> int:
        return self.load_table(table_name, data, AirportSchema)

    def load(self, flights: Dataset, airports: Dataset) -> dict:
        """
        Load both source datasets.

        Both are validated and checked for name collisions before either is
        written, so a failure in one dataset writes neither.
        """
        for name, data, schema in (
            (FlightSchema.table_name, flights, FlightSchema),
            (AirportSchema.table_name, airports, AirportSchema),
        ):
            errors = schema.validate(to_arrow(data))
            if errors:
                raise SchemaMismatchError(name, errors)
            if self.backend.table_exists(name):
                raise TableExistsError(name)

        return {
            "flights": self.load_flights(flights),
            "airports": self.load_airports(airports),
        }
