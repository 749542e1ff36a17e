"""Schemas for tables derived during a report run."""

import pyarrow as pa
from .base import BaseSchema, SchemaField


class DistanceSchema(BaseSchema):
    """
    Schema for the planar distance table.

    Directed airport pairs; (A, B) and (B, A) are both present.
    """

    table_name = "distances"

    origin = SchemaField(name="origin", dtype=pa.string(), nullable=False)
    dest = SchemaField(name="dest", dtype=pa.string(), nullable=False)
    origin_name = SchemaField(name="origin_name", dtype=pa.string())
    dest_name = SchemaField(name="dest_name", dtype=pa.string())
    dist = SchemaField(
        name="dist",
        dtype=pa.float64(),
        nullable=False,
        description="Euclidean distance on raw lat/lon degrees",
    )


class RouteAggregateSchema(BaseSchema):
    """Per-route flight count and mean delays."""

    origin = SchemaField(name="origin", dtype=pa.string(), nullable=False)
    dest = SchemaField(name="dest", dtype=pa.string(), nullable=False)
    n = SchemaField(name="n", dtype=pa.int64(), nullable=False, description="Flight count")
    avg_dep_delay = SchemaField(name="avg_dep_delay", dtype=pa.float64())
    avg_arr_delay = SchemaField(name="avg_arr_delay", dtype=pa.float64())


class RegressionInputSchema(BaseSchema):
    """Routes present in both the aggregates and the distance table."""

    origin = SchemaField(name="origin", dtype=pa.string(), nullable=False)
    dest = SchemaField(name="dest", dtype=pa.string(), nullable=False)
    dist = SchemaField(name="dist", dtype=pa.float64(), nullable=False)
    avg_dep_delay = SchemaField(name="avg_dep_delay", dtype=pa.float64(), nullable=False)
    n = SchemaField(
        name="n",
        dtype=pa.int64(),
        nullable=False,
        description="Flight count, used as regression weight",
    )
