"""Source dataset schemas: flight and airport records."""

import pyarrow as pa
from .base import BaseSchema, SchemaField


class FlightSchema(BaseSchema):
    """
    Schema for flight records.

    One row per flight, column names as in the nycflights13 ``flights``
    table. Delays are signed minutes; cancelled flights carry null delays.
    """

    table_name = "flights"

    # Route and carrier
    origin = SchemaField(
        name="origin",
        dtype=pa.string(),
        nullable=False,
        description="Origin airport code",
    )
    dest = SchemaField(
        name="dest",
        dtype=pa.string(),
        nullable=False,
        description="Destination airport code",
    )
    carrier = SchemaField(
        name="carrier",
        dtype=pa.string(),
        nullable=False,
        description="Two-letter carrier code",
    )

    # Scheduled departure, decomposed
    hour = SchemaField(
        name="hour",
        dtype=pa.int64(),
        nullable=False,
        description="Scheduled departure hour",
    )
    minute = SchemaField(
        name="minute",
        dtype=pa.int64(),
        nullable=False,
        description="Scheduled departure minute",
    )

    # Delays
    dep_delay = SchemaField(
        name="dep_delay",
        dtype=pa.float64(),
        description="Departure delay in minutes (negative = early)",
    )
    arr_delay = SchemaField(
        name="arr_delay",
        dtype=pa.float64(),
        description="Arrival delay in minutes (negative = early)",
    )
    distance = SchemaField(
        name="distance",
        dtype=pa.float64(),
        description="Reported great-circle distance in miles",
    )

    # Carried when present
    year = SchemaField(name="year", dtype=pa.int64(), required=False)
    month = SchemaField(name="month", dtype=pa.int64(), required=False)
    day = SchemaField(name="day", dtype=pa.int64(), required=False)
    dep_time = SchemaField(
        name="dep_time",
        dtype=pa.float64(),
        required=False,
        description="Actual departure time (HHMM)",
    )
    sched_dep_time = SchemaField(
        name="sched_dep_time",
        dtype=pa.float64(),
        required=False,
        description="Scheduled departure time (HHMM)",
    )
    arr_time = SchemaField(
        name="arr_time",
        dtype=pa.float64(),
        required=False,
        description="Actual arrival time (HHMM)",
    )
    sched_arr_time = SchemaField(
        name="sched_arr_time",
        dtype=pa.float64(),
        required=False,
        description="Scheduled arrival time (HHMM)",
    )
    flight = SchemaField(name="flight", dtype=pa.int64(), required=False)
    tailnum = SchemaField(name="tailnum", dtype=pa.string(), required=False)
    air_time = SchemaField(
        name="air_time",
        dtype=pa.float64(),
        required=False,
        description="Minutes in the air",
    )
    time_hour = SchemaField(
        name="time_hour",
        dtype=pa.timestamp("us"),
        required=False,
        description="Scheduled departure rounded to the hour",
    )


class AirportSchema(BaseSchema):
    """Schema for airport records, keyed by FAA code."""

    table_name = "airports"

    faa = SchemaField(
        name="faa",
        dtype=pa.string(),
        nullable=False,
        description="FAA airport code",
    )
    name = SchemaField(
        name="name",
        dtype=pa.string(),
        description="Airport display name",
    )
    lat = SchemaField(
        name="lat",
        dtype=pa.float64(),
        nullable=False,
        description="Latitude in degrees",
    )
    lon = SchemaField(
        name="lon",
        dtype=pa.float64(),
        nullable=False,
        description="Longitude in degrees",
    )

    alt = SchemaField(name="alt", dtype=pa.float64(), required=False, description="Altitude in feet")
    tz = SchemaField(name="tz", dtype=pa.float64(), required=False, description="Offset from GMT")
    dst = SchemaField(name="dst", dtype=pa.string(), required=False)
    tzone = SchemaField(name="tzone", dtype=pa.string(), required=False)
