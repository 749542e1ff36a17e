"""Tests for schema definitions."""

import pyarrow as pa

from flight_eda.schemas import (
    AirportSchema,
    DistanceSchema,
    FlightSchema,
    RegressionInputSchema,
)
from flight_eda.schemas.base import SchemaField


class TestBaseSchema:
    """Tests for BaseSchema."""

    def test_fields_keep_declaration_order(self):
        """Test field order follows the class body."""
        assert DistanceSchema.field_names() == [
            "origin", "dest", "origin_name", "dest_name", "dist",
        ]
        assert RegressionInputSchema.field_names() == [
            "origin", "dest", "dist", "avg_dep_delay", "n",
        ]

    def test_subclass_inherits_fields(self):
        """Test fields declared on a parent schema are kept."""
        class ExtendedAirportSchema(AirportSchema):
            country = SchemaField(name="country", dtype=pa.string(), required=False)

        assert ExtendedAirportSchema.field_names() == AirportSchema.field_names() + ["country"]
        assert ExtendedAirportSchema.table_name == "airports"


class TestValidateSchema:
    """Tests for column-level validation without rows."""

    def test_matching_schema(self):
        """Test an engine-shaped distance schema passes."""
        schema = pa.schema([
            ("origin", pa.string()),
            ("dest", pa.string()),
            ("origin_name", pa.string()),
            ("dest_name", pa.string()),
            ("dist", pa.float64()),
        ])

        assert DistanceSchema.validate_schema(schema) == []

    def test_wrong_type_and_missing_column(self):
        """Test both problems are reported."""
        schema = pa.schema([
            ("origin", pa.string()),
            ("dest", pa.string()),
            ("origin_name", pa.int64()),
            ("dist", pa.float64()),
        ])

        errors = DistanceSchema.validate_schema(schema)

        assert "Missing required column: dest_name" in errors
        assert any("Type mismatch for origin_name" in e for e in errors)

    def test_null_type_is_compatible(self):
        """Test an all-null column carries no type to reject."""
        schema = pa.schema([
            ("faa", pa.string()),
            ("name", pa.null()),
            ("lat", pa.float64()),
            ("lon", pa.float64()),
        ])

        assert AirportSchema.validate_schema(schema) == []


class TestValidation:
    """Tests for schema validation."""

    def test_valid_minimal_flights(self):
        """Test a table with only the required columns validates."""
        table = pa.table({
            "origin": ["JFK"],
            "dest": ["LAX"],
            "carrier": ["AA"],
            "hour": [8],
            "minute": [30],
            "dep_delay": [2.0],
            "arr_delay": [-5.0],
            "distance": [2475.0],
        })

        assert FlightSchema.validate(table) == []

    def test_missing_required_column(self):
        """Test validation reports a missing column."""
        table = pa.table({
            "faa": ["JFK"],
            "name": ["John F Kennedy Intl"],
            "lat": [40.64],
        })

        errors = AirportSchema.validate(table)

        assert "Missing required column: lon" in errors

    def test_type_mismatch(self):
        """Test validation reports an incompatible type."""
        table = pa.table({
            "faa": ["JFK"],
            "name": ["John F Kennedy Intl"],
            "lat": ["forty"],
            "lon": [-73.78],
        })

        errors = AirportSchema.validate(table)

        assert any("Type mismatch for lat" in e for e in errors)

    def test_integer_coordinates_are_compatible(self):
        """Test int columns satisfy float fields."""
        table = pa.table({
            "faa": ["A"],
            "name": ["Alpha"],
            "lat": [0],
            "lon": [3],
        })

        assert AirportSchema.validate(table) == []

    def test_nulls_in_non_nullable_column(self):
        """Test validation reports nulls where they are not allowed."""
        table = pa.table({
            "faa": ["JFK", None],
            "name": ["John F Kennedy Intl", "Unknown"],
            "lat": [40.64, 41.0],
            "lon": [-73.78, -74.0],
        })

        errors = AirportSchema.validate(table)

        assert "Null values in non-nullable column: faa" in errors

    def test_null_delays_allowed(self):
        """Test cancelled flights with null delays validate."""
        table = pa.table({
            "origin": ["JFK", "JFK"],
            "dest": ["LAX", "LAX"],
            "carrier": ["AA", "AA"],
            "hour": [8, 9],
            "minute": [30, 0],
            "dep_delay": [2.0, None],
            "arr_delay": [-5.0, None],
            "distance": [2475.0, 2475.0],
        })

        assert FlightSchema.validate(table) == []
