"""
HTML report rendering.

The report is one self-contained page: a header with links to each section,
then the sections in the order they were added. Plotly loads once from its
CDN, ahead of the first chart.
"""

from pathlib import Path
from datetime import datetime
from typing import Any, Optional, Union
import html
import logging
import numbers

import pandas as pd
import plotly.graph_objects as go


logger = logging.getLogger(__name__)


PAGE_CSS = """
body { margin: 0; font: 15px/1.5 system-ui, sans-serif; color: #1d2430; background: #f4f5f7; }
header { background: #1d2430; color: #fff; padding: 16px 32px; }
header h1 { margin: 0 0 6px; font-size: 22px; }
header nav a { color: #9cc3ff; margin-right: 18px; text-decoration: none; }
main { max-width: 1100px; margin: 0 auto; padding: 8px 32px 32px; }
section > h2 { border-bottom: 1px solid #c9ced6; padding-bottom: 4px; }
article { background: #fff; border: 1px solid #e1e4e8; border-radius: 6px; padding: 12px 18px; margin: 14px 0; overflow-x: auto; }
article h3 { margin: 0 0 10px; font-size: 16px; color: #4a5568; }
table.data-table { border-collapse: collapse; font-size: 14px; }
table.data-table th, table.data-table td { padding: 4px 12px; border-bottom: 1px solid #e1e4e8; text-align: right; }
dl.facts { display: grid; grid-template-columns: max-content auto; gap: 4px 24px; margin: 0; }
dl.facts dt { font-weight: 600; }
dl.facts dd { margin: 0; font-family: ui-monospace, monospace; }
.muted { color: #718096; font-style: italic; }
footer { text-align: center; color: #718096; font-size: 12px; padding: 16px; }
"""


def format_value(value: Any) -> str:
    """Thousands separators for numbers, two decimals for floats, blank for missing."""
    if value is None or (isinstance(value, numbers.Real) and pd.isna(value)):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return f"{value:,}"
    if isinstance(value, numbers.Real):
        value = float(value)
        return f"{value:,.2f}" if abs(value) >= 0.01 or value == 0 else f"{value:.3g}"
    return str(value)


def _anchor(*parts: str) -> str:
    text = "-".join(parts).lower()
    return "".join(c if c.isalnum() else "-" for c in text)


class ReportBuilder:
    """
    Collects named blocks under named sections and renders them as HTML.

    A block may be a DataFrame, a plotly Figure, a dict of facts, or
    anything else, which is shown as escaped text.
    """

    def __init__(self, title: str = "Flight Delay Report"):
        self.title = title
        self.sections: dict[str, dict[str, Any]] = {}
        self.created_at = datetime.now()
        self._plotly_loaded = False

    def add_section(self, name: str) -> None:
        self.sections.setdefault(name, {})

    def add_content(self, section: str, name: str, content: Any) -> None:
        """Add or replace the block ``name`` within ``section``."""
        self.add_section(section)
        self.sections[section][name] = content

    def _table(self, df: pd.DataFrame) -> str:
        if df.empty:
            return '<p class="muted">No rows</p>'
        return df.to_html(
            classes="data-table",
            index=False,
            border=0,
            na_rep="",
            float_format=format_value,
        )

    def _figure(self, fig: go.Figure) -> str:
        include = "cdn" if not self._plotly_loaded else False
        self._plotly_loaded = True
        return fig.to_html(full_html=False, include_plotlyjs=include)

    @staticmethod
    def _facts(data: dict) -> str:
        items = "".join(
            f"<dt>{html.escape(str(key))}</dt><dd>{html.escape(format_value(value))}</dd>"
            for key, value in data.items()
        )
        return f'<dl class="facts">{items}</dl>'

    def _block(self, section: str, name: str, content: Any) -> str:
        if isinstance(content, pd.DataFrame):
            body = self._table(content)
        elif isinstance(content, go.Figure):
            body = self._figure(content)
        elif isinstance(content, dict):
            body = self._facts(content)
        else:
            body = f"<p>{html.escape(str(content))}</p>"
        return (
            f'<article id="{_anchor(section, name)}">'
            f"<h3>{html.escape(name)}</h3>{body}</article>"
        )

    def generate_html(self) -> str:
        """Render the whole page."""
        self._plotly_loaded = False
        links = []
        sections = []

        for section, blocks in self.sections.items():
            anchor = _anchor(section)
            links.append(f'<a href="#{anchor}">{html.escape(section)}</a>')
            rendered = "\n".join(
                self._block(section, name, content) for name, content in blocks.items()
            )
            sections.append(
                f'<section id="{anchor}"><h2>{html.escape(section)}</h2>\n{rendered}</section>'
            )

        title = html.escape(self.title)
        generated = self.created_at.strftime("%Y-%m-%d %H:%M")
        nl = "\n"

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>{PAGE_CSS}</style>
</head>
<body>
<header><h1>{title}</h1><nav>{" ".join(links)}</nav></header>
<main>
{nl.join(sections)}
</main>
<footer>Generated {generated}</footer>
</body>
</html>
"""

    def save(self, path: Union[str, Path]) -> Path:
        """Write the page, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.generate_html(), encoding="utf-8")
        logger.info(f"Report saved to: {path}")
        return path


class FlightReportGenerator:
    """
    Generate the flight delay report.

    Creates figures and tables from the query, distance and analysis results.
    """

    def __init__(self, title: str = "Flight Delay Report"):
        self.builder = ReportBuilder(title)

    def delay_distance_figure(
        self,
        regression_input: pd.DataFrame,
        curve: Optional[pd.DataFrame] = None,
    ) -> go.Figure:
        """Scatter of per-route mean departure delay with the fitted curve."""
        fig = go.Figure()

        if not regression_input.empty:
            sizes = regression_input["n"].astype(float)
            fig.add_trace(go.Scatter(
                x=regression_input["dist"],
                y=regression_input["avg_dep_delay"],
                mode="markers",
                name="Routes",
                text=regression_input["origin"] + " → " + regression_input["dest"],
                marker=dict(
                    size=sizes,
                    sizemode="area",
                    sizeref=2.0 * sizes.max() / 30 ** 2,
                    sizemin=3,
                    color="#1a73e8",
                    opacity=0.5,
                ),
            ))

        if curve is not None and not curve.empty:
            fig.add_trace(go.Scatter(
                x=curve["dist"],
                y=curve["predicted_dep_delay"],
                mode="lines",
                name="Fitted",
                line=dict(color="#ea4335", width=2),
            ))

        fig.update_layout(
            title="Mean Departure Delay vs Distance",
            xaxis_title="Planar distance (degrees)",
            yaxis_title="Mean departure delay (min)",
            height=500,
            template="plotly_white",
        )

        return fig

    def top_routes_figure(self, top_routes: pd.DataFrame) -> go.Figure:
        """Bar chart of the most frequent routes."""
        labels = (top_routes["origin"] + " → " + top_routes["dest"]).tolist() if not top_routes.empty else []
        fig = go.Figure(go.Bar(
            x=labels,
            y=top_routes["n"].tolist() if not top_routes.empty else [],
            marker_color="#34a853",
        ))

        fig.update_layout(
            title="Most Frequent Routes",
            xaxis_title="Route",
            yaxis_title="Flights",
            height=400,
            template="plotly_white",
        )

        return fig

    def carrier_delay_figure(self, departure: pd.DataFrame, arrival: pd.DataFrame) -> go.Figure:
        """Grouped bars for the carriers with the worst mean delays."""
        fig = go.Figure()

        fig.add_trace(go.Bar(
            x=departure["carrier"].tolist() if not departure.empty else [],
            y=departure["avg_dep_delay"].tolist() if not departure.empty else [],
            name="Departure",
            marker_color="indianred",
        ))
        fig.add_trace(go.Bar(
            x=arrival["carrier"].tolist() if not arrival.empty else [],
            y=arrival["avg_arr_delay"].tolist() if not arrival.empty else [],
            name="Arrival",
            marker_color="lightsalmon",
        ))

        fig.update_layout(
            barmode="group",
            title="Worst Carriers by Mean Delay",
            xaxis_title="Carrier",
            yaxis_title="Mean delay (min)",
            height=400,
            template="plotly_white",
        )

        return fig

    def generate_from_results(
        self,
        summary: dict[str, Any],
        distances: pd.DataFrame,
        analysis: Any,
    ) -> None:
        """
        Populate the report.

        Args:
            summary: Output of ``FlightQueries.summary()``
            distances: The materialized distance table
            analysis: ``AnalysisResult`` from the delay/distance analysis
        """
        b = self.builder

        b.add_content("Overview", "Summary", {
            "Flights": f"{summary['row_count']:,}",
            "Airport pairs": f"{len(distances):,}",
            "Routes in regression": f"{len(analysis.regression_input):,}",
        })

        top_routes = summary["top_routes"]
        b.add_content("Routes", "Most Frequent Routes", top_routes)
        b.add_content("Routes", "Route Frequency Chart", self.top_routes_figure(top_routes))

        departure = summary["worst_carriers_departure"]
        arrival = summary["worst_carriers_arrival"]
        b.add_content("Carriers", "Worst Departure Delay", departure)
        b.add_content("Carriers", "Worst Arrival Delay", arrival)
        b.add_content("Carriers", "Carrier Delay Chart", self.carrier_delay_figure(departure, arrival))

        b.add_content(
            "Departure Times",
            "Earliest Relative to Route Median",
            summary["shortest_relative_to_median"],
        )

        b.add_content("Distances", "Closest Airport Pairs", distances.nsmallest(10, "dist"))

        b.add_content(
            "Delay vs Distance",
            "Delay vs Distance Chart",
            self.delay_distance_figure(analysis.regression_input, analysis.curve),
        )
        if analysis.fit is not None:
            fit = analysis.fit
            coefficients = {"bias": float(fit.coefficients[0])}
            for knot, coef in zip(fit.knots, fit.coefficients[1:]):
                coefficients[f"knot {knot:.2f}"] = float(coef)
            b.add_content("Delay vs Distance", "Coefficients", coefficients)
        else:
            b.add_content("Delay vs Distance", "Coefficients", "No routes to fit.")

    def save(self, path: Union[str, Path]) -> Path:
        """Save report to file."""
        return self.builder.save(path)
