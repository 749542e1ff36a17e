"""Schema definitions for source and derived tables."""

from .base import BaseSchema, SchemaField
from .flights import FlightSchema, AirportSchema
from .derived import DistanceSchema, RouteAggregateSchema, RegressionInputSchema

__all__ = [
    "BaseSchema",
    "SchemaField",
    "FlightSchema",
    "AirportSchema",
    "DistanceSchema",
    "RouteAggregateSchema",
    "RegressionInputSchema",
]
