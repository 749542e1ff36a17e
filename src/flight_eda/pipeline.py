"""Report pipeline: load, query, build distances, fit and render."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional
import logging

from .analysis import DelayDistanceAnalysis
from .backends import DuckDBBackend
from .config import ReportSettings
from .datasets import load_datasets
from .distances import DistanceTableBuilder
from .loader import DataLoader, Dataset
from .logging import timed
from .queries import FlightQueries
from .reporting import FlightReportGenerator


logger = logging.getLogger(__name__)


class PipelineStatus(Enum):
    """Pipeline execution status."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Result of a pipeline execution."""

    status: PipelineStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    rows_processed: int = 0
    rows_written: int = 0
    error: Optional[str] = None
    exception: Optional[BaseException] = None
    outputs: dict[str, Any] = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.SUCCESS

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "rows_processed": self.rows_processed,
            "rows_written": self.rows_written,
            "error": self.error,
            "metadata": self.metadata,
        }


@dataclass
class PipelineStep:
    """A single step in a pipeline."""

    name: str
    func: Callable[[dict], Any]
    depends_on: list[str] = field(default_factory=list)


class BasePipeline:
    """
    Ordered list of named steps sharing a context dict.

    Each step receives the context and its return value is stored under
    ``context["results"][step.name]``. The first failing step stops the
    run; nothing is retried.
    """

    def __init__(self, name: str):
        self.name = name
        self._steps: list[PipelineStep] = []
        self._context: dict[str, Any] = {}

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    def add_step(
        self,
        name: str,
        func: Callable[[dict], Any],
        depends_on: Optional[list[str]] = None,
    ) -> "BasePipeline":
        """Add a step to the pipeline."""
        self._steps.append(PipelineStep(name=name, func=func, depends_on=depends_on or []))
        return self

    def _run_steps(self, result: PipelineResult) -> None:
        for step in self._steps:
            for dep in step.depends_on:
                if dep not in self._context["results"]:
                    raise ValueError(f"Dependency not met: {dep}")

            with timed(logger, f"{self.name}.{step.name}"):
                step_result = step.func(self._context)

            self._context["results"][step.name] = step_result
            result.outputs[step.name] = step_result

            if isinstance(step_result, dict):
                result.rows_processed += step_result.get("rows_read", 0)
                result.rows_written += step_result.get("rows_written", 0)

    def run(self, **kwargs) -> PipelineResult:
        """Execute the pipeline."""
        result = PipelineResult(
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(),
        )
        self._context = {"kwargs": kwargs, "results": {}}

        try:
            self._run_steps(result)
            result.status = PipelineStatus.SUCCESS
        except Exception as e:
            logger.exception(f"Pipeline '{self.name}' failed: {e}")
            result.status = PipelineStatus.FAILED
            result.error = str(e)
            result.exception = e
        finally:
            result.completed_at = datetime.now()

        return result


class FlightReportPipeline(BasePipeline):
    """
    Full report run over one in-memory DuckDB connection.

    Steps: ``load`` -> ``summary`` -> ``distances`` -> ``analysis`` -> ``render``.
    Datasets passed to the constructor are used as-is; otherwise they are
    read from the configured source when the run starts.
    """

    def __init__(
        self,
        config: Optional[ReportSettings] = None,
        flights: Optional[Dataset] = None,
        airports: Optional[Dataset] = None,
        write_report: bool = True,
    ):
        super().__init__("flight_report")
        self.config = config or ReportSettings()
        self.flights = flights
        self.airports = airports
        self.write_report = write_report
        self.backend: Optional[DuckDBBackend] = None
        self.build()

    def build(self) -> "FlightReportPipeline":
        self._steps = []
        self.add_step("load", self._load)
        self.add_step("summary", self._summary, depends_on=["load"])
        self.add_step("distances", self._distances, depends_on=["load"])
        self.add_step("analysis", self._analysis, depends_on=["distances"])
        self.add_step("render", self._render, depends_on=["summary", "analysis"])
        return self

    def _load(self, context: dict) -> dict:
        flights, airports = self.flights, self.airports
        if flights is None or airports is None:
            default_flights, default_airports = load_datasets(self.config.datasets)
            flights = default_flights if flights is None else flights
            airports = default_airports if airports is None else airports

        counts = DataLoader(self.backend).load(flights, airports)
        return {
            "rows_read": counts["flights"] + counts["airports"],
            "rows_written": counts["flights"] + counts["airports"],
            **counts,
        }

    def _summary(self, context: dict) -> dict:
        return FlightQueries(self.backend, self.config.queries).summary()

    def _distances(self, context: dict):
        builder = DistanceTableBuilder(self.backend)
        builder.build()
        return builder.fetch()

    def _analysis(self, context: dict):
        return DelayDistanceAnalysis(self.backend, self.config.regression).run()

    def _render(self, context: dict) -> Optional[Path]:
        results = context["results"]
        generator = FlightReportGenerator(self.config.report.title)
        generator.generate_from_results(
            results["summary"],
            results["distances"],
            results["analysis"],
        )
        if not self.write_report:
            return None
        return generator.save(self.config.report.output_path)

    def run(self, **kwargs) -> PipelineResult:
        """Open a fresh connection, run every step, close the connection."""
        self.backend = DuckDBBackend(self.config.duckdb)
        try:
            result = super().run(**kwargs)
        finally:
            self.backend.close()
            self.backend = None

        if result.succeeded:
            result.metadata["report_path"] = (
                str(result.outputs["render"]) if result.outputs.get("render") else None
            )
            logger.info(f"Pipeline '{self.name}' finished in {result.duration_seconds:.2f}s")
        return result
