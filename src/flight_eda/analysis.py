"""Delay versus distance analysis."""

from dataclasses import dataclass, field
from typing import Optional
import logging

import pandas as pd
import pyarrow as pa

from .backends import AnalyticalBackend
from .config import RegressionConfig
from .errors import QueryError, SchemaMismatchError
from .regression import RBFRegression, RegressionFit
from .schemas import RegressionInputSchema


logger = logging.getLogger(__name__)


# Routes whose flights all lack a departure delay have no mean to fit
REGRESSION_INPUT_SQL = """
WITH route_delays AS (
    SELECT
        origin,
        dest,
        COUNT(*) AS n,
        AVG(dep_delay) AS avg_dep_delay
    FROM {flights}
    GROUP BY origin, dest
)
SELECT r.origin, r.dest, d.dist, r.avg_dep_delay, r.n
FROM route_delays AS r
JOIN {distances} AS d
    ON r.origin = d.origin AND r.dest = d.dest
WHERE r.avg_dep_delay IS NOT NULL
ORDER BY r.origin, r.dest
"""


@dataclass
class AnalysisResult:
    """Regression input, fit and prediction curve for one run."""

    regression_input: pd.DataFrame
    fit: Optional[RegressionFit] = None
    curve: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=["dist", "predicted_dep_delay"])
    )

    @property
    def is_empty(self) -> bool:
        return self.regression_input.empty


class DelayDistanceAnalysis:
    """
    Joins per-route delay aggregates with the distance table and fits
    mean departure delay against distance, weighted by flight count.
    """

    def __init__(
        self,
        backend: AnalyticalBackend,
        config: Optional[RegressionConfig] = None,
        flights_table: str = "flights",
        distances_table: str = "distances",
    ):
        self.backend = backend
        self.config = config or RegressionConfig()
        self.flights_table = flights_table
        self.distances_table = distances_table

    def regression_input(self) -> pd.DataFrame:
        """One row per route present in both the aggregates and the distance table."""
        sql = REGRESSION_INPUT_SQL.format(
            flights=self.flights_table,
            distances=self.distances_table,
        )
        try:
            df = self.backend.query_df(sql)
        except QueryError as e:
            raise QueryError("regression_input", e.message, sql=sql) from e

        df = df[RegressionInputSchema.field_names()]
        errors = RegressionInputSchema.validate(pa.Table.from_pandas(df, preserve_index=False))
        if errors:
            raise SchemaMismatchError("regression_input", errors)
        return df

    def run(self) -> AnalysisResult:
        data = self.regression_input()

        if data.empty:
            logger.warning("No routes matched the distance table; skipping regression")
            return AnalysisResult(regression_input=data)

        model = RBFRegression.from_config(self.config)
        fit = model.fit(data["dist"], data["avg_dep_delay"], weights=data["n"])

        return AnalysisResult(
            regression_input=data,
            fit=fit,
            curve=fit.curve(self.config.prediction_grid_size),
        )
