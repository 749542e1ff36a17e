"""
Source datasets for the report.

Flights and airports come either from the ``nycflights13`` package or
from CSV / Parquet files.
"""

from pathlib import Path
from typing import Optional, Union
import logging

import pandas as pd

from .config import DatasetConfig


logger = logging.getLogger(__name__)


def read_table(path: Union[str, Path]) -> pd.DataFrame:
    """Read a CSV or Parquet file into a DataFrame."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".parquet", ".pq"):
        return pd.read_parquet(path)
    if suffix in (".csv", ".gz"):
        return pd.read_csv(path, low_memory=False)
    raise ValueError(f"Unsupported dataset format: {path.suffix}")


def load_nycflights13() -> tuple[pd.DataFrame, pd.DataFrame]:
    """Flights and airports tables from the nycflights13 package."""
    from nycflights13 import airports, flights

    return flights.copy(), airports.copy()


def load_datasets(config: Optional[DatasetConfig] = None) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load the flights and airports datasets.

    Returns:
        (flights, airports) DataFrames
    """
    config = config or DatasetConfig()

    if config.source == "nycflights13":
        flights, airports = load_nycflights13()
    elif config.source == "files":
        if not config.flights_path or not config.airports_path:
            raise ValueError("source='files' requires flights_path and airports_path")
        flights = read_table(config.flights_path)
        airports = read_table(config.airports_path)
    else:
        raise ValueError(f"Unknown dataset source: {config.source}")

    logger.info(
        f"Read {len(flights):,} flights and {len(airports):,} airports from {config.source}"
    )
    return flights, airports
