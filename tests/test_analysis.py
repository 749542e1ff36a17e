"""Tests for the delay versus distance analysis."""

import pandas as pd
import pyarrow as pa
import pytest

from conftest import make_flights
from flight_eda.analysis import DelayDistanceAnalysis
from flight_eda.config import RegressionConfig
from flight_eda.distances import DistanceTableBuilder
from flight_eda.errors import DegenerateRegressionError, SchemaMismatchError
from flight_eda.loader import DataLoader


@pytest.fixture
def line_airports():
    """Hub O at the origin and six airports 1 to 6 degrees north of it."""
    return pd.DataFrame({
        "faa": ["O", "D1", "D2", "D3", "D4", "D5", "D6"],
        "name": ["Hub", "One", "Two", "Three", "Four", "Five", "Six"],
        "lat": [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "lon": [0.0] * 7,
    })


@pytest.fixture
def line_flights():
    """Flights from the hub whose delay grows with distance."""
    rows = []
    for i in range(1, 7):
        for delay in (2.0 * i - 1.0, 2.0 * i + 1.0):
            rows.append({"origin": "O", "dest": f"D{i}", "dep_delay": delay})
    return make_flights(rows)


def prepare(backend, flights, airports):
    DataLoader(backend).load(flights, airports)
    DistanceTableBuilder(backend).build()


class TestRegressionInput:
    """Tests for the aggregate/distance join."""

    def test_triangle(self, backend, triangle_flights, triangle_airports):
        """Test per-route mean delay, count and distance."""
        prepare(backend, triangle_flights, triangle_airports)

        result = DelayDistanceAnalysis(backend).regression_input()

        assert list(result.columns) == ["origin", "dest", "dist", "avg_dep_delay", "n"]
        assert [tuple(r) for r in result.itertuples(index=False)] == [
            ("A", "B", 3.0, 10.0, 2),
            ("A", "C", 4.0, 10.0, 1),
        ]

    def test_routes_without_delays_excluded(self, backend, triangle_airports):
        """Test a route whose flights all lack a delay has no row."""
        flights = make_flights([
            {"origin": "A", "dest": "B", "dep_delay": 5.0},
            {"origin": "B", "dest": "C", "dep_delay": None},
        ])
        prepare(backend, flights, triangle_airports)

        result = DelayDistanceAnalysis(backend).regression_input()

        assert list(zip(result["origin"], result["dest"])) == [("A", "B")]

    def test_unknown_airports_dropped(self, backend, triangle_flights, triangle_airports):
        """Test routes to airports missing from the distance table are dropped."""
        flights = pd.concat([
            triangle_flights,
            make_flights([{"origin": "A", "dest": "ZZZ", "dep_delay": 60.0}]),
        ])
        prepare(backend, flights, triangle_airports)

        result = DelayDistanceAnalysis(backend).regression_input()

        assert "ZZZ" not in set(result["dest"])
        assert len(result) == 2

    def test_distance_type_checked(self, backend, triangle_flights):
        """Test a distance table with text distances is rejected before fitting."""
        DataLoader(backend).load_flights(triangle_flights)
        backend.write("distances", pa.table({
            "origin": ["A", "A"],
            "dest": ["B", "C"],
            "origin_name": ["Alpha", "Alpha"],
            "dest_name": ["Bravo", "Charlie"],
            "dist": ["3", "4"],
        }))

        with pytest.raises(SchemaMismatchError) as exc_info:
            DelayDistanceAnalysis(backend).regression_input()

        assert exc_info.value.table == "regression_input"
        assert any("Type mismatch for dist" in e for e in exc_info.value.errors)


class TestDelayDistanceAnalysis:
    """Tests for DelayDistanceAnalysis.run."""

    def test_fit(self, backend, line_flights, line_airports):
        """Test a fit and curve over six routes."""
        prepare(backend, line_flights, line_airports)
        config = RegressionConfig(knot_count=4, bandwidth=2.0, prediction_grid_size=25)

        result = DelayDistanceAnalysis(backend, config).run()

        assert not result.is_empty
        assert result.fit is not None
        assert result.fit.n_observations == 6
        assert len(result.curve) == 25
        assert result.curve["dist"].iloc[0] == pytest.approx(1.0)
        assert result.curve["dist"].iloc[-1] == pytest.approx(6.0)

    def test_empty_join(self, backend, triangle_airports):
        """Test no matching routes gives empty results rather than an error."""
        flights = make_flights([{"origin": "XXX", "dest": "YYY", "dep_delay": 3.0}])
        prepare(backend, flights, triangle_airports)

        result = DelayDistanceAnalysis(backend).run()

        assert result.is_empty
        assert result.fit is None
        assert result.curve.empty

    def test_degenerate_input_not_masked(self, backend, triangle_flights, triangle_airports):
        """Test two distinct distances cannot support four knots."""
        prepare(backend, triangle_flights, triangle_airports)

        with pytest.raises(DegenerateRegressionError):
            DelayDistanceAnalysis(backend, RegressionConfig(knot_count=4)).run()

    def test_single_knot_triangle(self, backend, triangle_flights, triangle_airports):
        """Test equal route delays give a flat prediction."""
        prepare(backend, triangle_flights, triangle_airports)

        result = DelayDistanceAnalysis(backend, RegressionConfig(knot_count=1)).run()

        assert result.fit.predict([3.0, 3.5, 4.0]).tolist() == pytest.approx([10.0, 10.0, 10.0], abs=1e-6)
