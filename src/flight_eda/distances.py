"""
Planar distance table.

Self-joins the airport relation and materializes the Euclidean distance
between every ordered pair of airports, computed on raw latitude and
longitude. Pairs at distance 0 are dropped, which removes self-pairs and
also any two distinct airports sharing the exact same coordinates.
"""

import logging

import pandas as pd

from .backends import AnalyticalBackend
from .errors import QueryError, SchemaMismatchError
from .schemas import DistanceSchema


logger = logging.getLogger(__name__)


DISTANCES_SQL = """
SELECT origin, dest, origin_name, dest_name, dist
FROM (
    SELECT
        a.faa AS origin,
        b.faa AS dest,
        a.name AS origin_name,
        b.name AS dest_name,
        SQRT(POW(a.lat - b.lat, 2) + POW(a.lon - b.lon, 2)) AS dist
    FROM {source} AS a
    CROSS JOIN {source} AS b
) AS pairs
WHERE dist > 0
"""


class DistanceTableBuilder:
    """
    Builds the ``distances`` table from the ``airports`` relation.

    N airports with distinct coordinates give N * (N - 1) directed rows.
    There is no incremental path: every ``build()`` replaces the table.
    """

    def __init__(
        self,
        backend: AnalyticalBackend,
        source: str = "airports",
        target: str = "distances",
    ):
        self.backend = backend
        self.source = source
        self.target = target

    @property
    def sql(self) -> str:
        return DISTANCES_SQL.format(source=self.source)

    def build(self) -> int:
        """
        Materialize the distance table. Returns its row count.

        Raises:
            QueryError: the source relation is missing or lacks coordinates
            SchemaMismatchError: the materialized columns do not match DistanceSchema
        """
        try:
            rows = self.backend.materialize(self.target, self.sql, replace=True)
        except QueryError as e:
            raise QueryError("distances", e.message, sql=self.sql) from e

        errors = DistanceSchema.validate_schema(self.backend.get_schema(self.target))
        if errors:
            raise SchemaMismatchError(self.target, errors)

        logger.info(f"Built '{self.target}' with {rows:,} airport pairs")
        return rows

    def fetch(self) -> pd.DataFrame:
        """Read the materialized table back, ordered by route."""
        return self.backend.query_df(
            f"SELECT origin, dest, origin_name, dest_name, dist "
            f"FROM {self.target} ORDER BY origin, dest"
        )
