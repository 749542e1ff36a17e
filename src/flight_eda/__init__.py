"""
Flight Delay EDA

An exploratory report over flight and airport records using:
- DuckDB (embedded analytical engine)
- scikit-learn / numpy (weighted radial-basis regression)
- Plotly (HTML report figures)
"""

__version__ = "0.1.0"
