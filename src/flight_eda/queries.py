"""
Descriptive queries over the loaded flight records.

Each query is a named, parameterless operation. The SQL text lives in the
``QUERIES`` registry so every query can be run against a fixture dataset
on its own; result sizes come from ``QueryConfig``.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import pandas as pd

from .backends import AnalyticalBackend
from .config import QueryConfig
from .errors import QueryError
from .schemas import RouteAggregateSchema


logger = logging.getLogger(__name__)


ROW_COUNT_SQL = """
SELECT COUNT(*) AS n
FROM flights
"""

TOP_ROUTES_SQL = """
SELECT origin, dest, COUNT(*) AS n
FROM flights
GROUP BY origin, dest
ORDER BY n DESC, origin, dest
LIMIT {limit}
"""

# AVG skips NULL delays (cancelled flights)
WORST_CARRIERS_DEPARTURE_SQL = """
SELECT carrier, AVG(dep_delay) AS avg_dep_delay
FROM flights
GROUP BY carrier
ORDER BY avg_dep_delay DESC NULLS LAST, carrier
LIMIT {limit}
"""

WORST_CARRIERS_ARRIVAL_SQL = """
SELECT carrier, AVG(arr_delay) AS avg_arr_delay
FROM flights
GROUP BY carrier
ORDER BY avg_arr_delay DESC NULLS LAST, carrier
LIMIT {limit}
"""

SHORTEST_RELATIVE_TO_MEDIAN_SQL = """
WITH flight_times AS (
    SELECT DISTINCT origin, dest, hour, minute, hour * 60 + minute AS flight_time
    FROM flights
),
route_medians AS (
    SELECT
        *,
        MEDIAN(flight_time) OVER (PARTITION BY origin, dest) AS median_flight_time
    FROM flight_times
)
SELECT
    origin,
    dest,
    hour,
    minute,
    flight_time,
    median_flight_time,
    flight_time / NULLIF(median_flight_time, 0) AS ratio
FROM route_medians
ORDER BY ratio ASC NULLS LAST, origin, dest, flight_time
LIMIT {limit}
"""

ROUTE_AGGREGATES_SQL = """
SELECT
    origin,
    dest,
    COUNT(*) AS n,
    AVG(dep_delay) AS avg_dep_delay,
    AVG(arr_delay) AS avg_arr_delay
FROM flights
GROUP BY origin, dest
ORDER BY origin, dest
"""


@dataclass(frozen=True)
class NamedQuery:
    """A registered read-only query."""

    name: str
    sql: str
    description: str
    limit_setting: Optional[str] = None

    def render(self, config: QueryConfig) -> str:
        if self.limit_setting is None:
            return self.sql
        return self.sql.format(limit=int(getattr(config, self.limit_setting)))


QUERIES: dict[str, NamedQuery] = {
    q.name: q
    for q in [
        NamedQuery("row_count", ROW_COUNT_SQL, "Total number of flight records"),
        NamedQuery(
            "top_routes",
            TOP_ROUTES_SQL,
            "Most frequent (origin, dest) routes",
            limit_setting="top_routes_limit",
        ),
        NamedQuery(
            "worst_carriers_departure",
            WORST_CARRIERS_DEPARTURE_SQL,
            "Carriers with the highest mean departure delay",
            limit_setting="worst_carriers_limit",
        ),
        NamedQuery(
            "worst_carriers_arrival",
            WORST_CARRIERS_ARRIVAL_SQL,
            "Carriers with the highest mean arrival delay",
            limit_setting="worst_carriers_limit",
        ),
        NamedQuery(
            "shortest_relative_to_median",
            SHORTEST_RELATIVE_TO_MEDIAN_SQL,
            "Departure times smallest relative to their route median",
            limit_setting="shortest_flights_limit",
        ),
        NamedQuery(
            "route_aggregates",
            ROUTE_AGGREGATES_SQL,
            "Flight count and mean delays per route",
        ),
    ]
}


class FlightQueries:
    """
    Query layer over the ``flights`` relation.

    Every method is parameterless and returns a pandas DataFrame
    (``row_count`` returns an int).
    """

    def __init__(self, backend: AnalyticalBackend, config: Optional[QueryConfig] = None):
        self.backend = backend
        self.config = config or QueryConfig()

    @staticmethod
    def available() -> list[str]:
        """List registered query names."""
        return list(QUERIES)

    def run(self, name: str) -> pd.DataFrame:
        """Run a registered query by name."""
        if name not in QUERIES:
            raise KeyError(f"Query not found: {name}")

        sql = QUERIES[name].render(self.config)
        logger.debug(f"Running query '{name}'")

        try:
            result = self.backend.query_df(sql)
        except QueryError as e:
            raise QueryError(name, e.message, sql=sql) from e

        logger.info(f"Query '{name}' returned {len(result)} rows")
        return result

    def row_count(self) -> int:
        return int(self.run("row_count")["n"].iloc[0])

    def top_routes(self) -> pd.DataFrame:
        return self.run("top_routes")

    def worst_carriers_departure(self) -> pd.DataFrame:
        return self.run("worst_carriers_departure")

    def worst_carriers_arrival(self) -> pd.DataFrame:
        return self.run("worst_carriers_arrival")

    def shortest_relative_to_median(self) -> pd.DataFrame:
        """
        Departure times that are small relative to their route's median.

        Works over distinct (origin, dest, hour, minute) combinations with
        ``flight_time = hour * 60 + minute``. ``ratio`` is NULL for routes
        whose median time is 0 and such rows sort last.
        """
        return self.run("shortest_relative_to_median")

    def route_aggregates(self) -> pd.DataFrame:
        return self.run("route_aggregates")[RouteAggregateSchema.field_names()]

    def summary(self) -> dict[str, object]:
        """Run every descriptive query used by the report."""
        return {
            "row_count": self.row_count(),
            "top_routes": self.top_routes(),
            "worst_carriers_departure": self.worst_carriers_departure(),
            "worst_carriers_arrival": self.worst_carriers_arrival(),
            "shortest_relative_to_median": self.shortest_relative_to_median(),
        }
