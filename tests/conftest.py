"""Shared fixtures: in-memory backends and small synthetic datasets."""

import pandas as pd
import pytest

from flight_eda.backends import DuckDBBackend
from flight_eda.config import DuckDBConfig


def make_flights(rows: list[dict]) -> pd.DataFrame:
    """Flights frame with every required column, filling unspecified values."""
    defaults = {
        "carrier": "AA",
        "hour": 8,
        "minute": 0,
        "dep_delay": 0.0,
        "arr_delay": 0.0,
        "distance": 100.0,
    }
    records = [{**defaults, **row} for row in rows]
    df = pd.DataFrame(records)
    return df.astype({
        "hour": "int64",
        "minute": "int64",
        "dep_delay": "float64",
        "arr_delay": "float64",
        "distance": "float64",
    })


@pytest.fixture
def backend():
    """In-memory DuckDB backend closed after the test."""
    b = DuckDBBackend(DuckDBConfig())
    yield b
    b.close()


@pytest.fixture
def triangle_airports():
    """Airports A(0,0), B(0,3), C(4,0): pairwise distances 3, 4 and 5."""
    return pd.DataFrame({
        "faa": ["A", "B", "C"],
        "name": ["Alpha", "Bravo", "Charlie"],
        "lat": [0.0, 0.0, 4.0],
        "lon": [0.0, 3.0, 0.0],
    })


@pytest.fixture
def triangle_flights():
    """Two A->B flights (dep_delay 5 and 15) and one A->C flight (10)."""
    return make_flights([
        {"origin": "A", "dest": "B", "dep_delay": 5.0},
        {"origin": "A", "dest": "B", "dep_delay": 15.0},
        {"origin": "A", "dest": "C", "dep_delay": 10.0},
    ])
