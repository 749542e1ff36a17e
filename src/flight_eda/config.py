"""
Configuration for the flight delay report.

Supports environment variables and config files.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json


@dataclass
class DuckDBConfig:
    """Configuration for DuckDB."""

    database_path: str = ":memory:"
    threads: Optional[int] = None
    memory_limit: Optional[str] = None  # e.g., "4GB"

    @property
    def in_memory(self) -> bool:
        return self.database_path == ":memory:"

    def get_connection_string(self) -> str:
        return str(self.database_path)


@dataclass
class DatasetConfig:
    """Where the flight and airport records come from."""

    source: str = "nycflights13"  # 'nycflights13' or 'files'
    flights_path: Optional[str] = None
    airports_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "DatasetConfig":
        """Create config from environment variables."""
        return cls(
            source=os.getenv("FLIGHT_EDA_SOURCE", "nycflights13"),
            flights_path=os.getenv("FLIGHT_EDA_FLIGHTS_PATH"),
            airports_path=os.getenv("FLIGHT_EDA_AIRPORTS_PATH"),
        )


@dataclass
class QueryConfig:
    """Result sizes for the descriptive queries."""

    top_routes_limit: int = 5
    worst_carriers_limit: int = 3
    shortest_flights_limit: int = 10


@dataclass
class RegressionConfig:
    """Radial-basis regression of departure delay on distance."""

    knot_count: int = 4
    bandwidth: float = 50.0
    prediction_grid_size: int = 100

    def __post_init__(self):
        if self.knot_count < 1:
            raise ValueError(f"knot_count must be at least 1, got {self.knot_count}")
        if self.bandwidth <= 0:
            raise ValueError(f"bandwidth must be positive, got {self.bandwidth}")
        if self.prediction_grid_size < 2:
            raise ValueError(
                f"prediction_grid_size must be at least 2, got {self.prediction_grid_size}"
            )


@dataclass
class ReportConfig:
    """Configuration for the rendered HTML report."""

    title: str = "Flight Delay Report"
    output_path: Path = field(default_factory=lambda: Path("outputs/flight_report.html"))


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    console_enabled: bool = True
    console_colors: bool = True

    file_enabled: bool = False
    file_path: Optional[str] = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    file_backup_count: int = 5


@dataclass
class ReportSettings:
    """Main report configuration."""

    duckdb: DuckDBConfig = field(default_factory=DuckDBConfig)
    datasets: DatasetConfig = field(default_factory=DatasetConfig)
    queries: QueryConfig = field(default_factory=QueryConfig)
    regression: RegressionConfig = field(default_factory=RegressionConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_file(cls, path: Path) -> "ReportSettings":
        """Load configuration from JSON file."""
        with open(path) as f:
            data = json.load(f)

        report = dict(data.get("report", {}))
        if "output_path" in report:
            report["output_path"] = Path(report["output_path"])

        return cls(
            duckdb=DuckDBConfig(**data.get("duckdb", {})),
            datasets=DatasetConfig(**data.get("datasets", {})),
            queries=QueryConfig(**data.get("queries", {})),
            regression=RegressionConfig(**data.get("regression", {})),
            report=ReportConfig(**report),
            logging=LogConfig(**data.get("logging", {})),
        )

    @classmethod
    def default(cls, base_path: Optional[Path] = None) -> "ReportSettings":
        """Create default configuration."""
        if base_path is None:
            base_path = Path.cwd()

        return cls(
            datasets=DatasetConfig.from_env(),
            report=ReportConfig(output_path=base_path / "outputs" / "flight_report.html"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "duckdb": {
                "database_path": self.duckdb.database_path,
                "threads": self.duckdb.threads,
                "memory_limit": self.duckdb.memory_limit,
            },
            "datasets": {
                "source": self.datasets.source,
                "flights_path": self.datasets.flights_path,
                "airports_path": self.datasets.airports_path,
            },
            "queries": {
                "top_routes_limit": self.queries.top_routes_limit,
                "worst_carriers_limit": self.queries.worst_carriers_limit,
                "shortest_flights_limit": self.queries.shortest_flights_limit,
            },
            "regression": {
                "knot_count": self.regression.knot_count,
                "bandwidth": self.regression.bandwidth,
                "prediction_grid_size": self.regression.prediction_grid_size,
            },
            "report": {
                "title": self.report.title,
                "output_path": str(self.report.output_path),
            },
            "logging": {
                "level": self.logging.level,
                "console_colors": self.logging.console_colors,
                "file_enabled": self.logging.file_enabled,
                "file_path": self.logging.file_path,
            },
        }

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
