"""Provider clients and data source factories for the commute helper."""

from .base import CallableTransitDataSource, TransitDataSource
from .factory import build_data_source
from .google_directions_client import fetch_commute_time
from .wmata_client import fetch_next_bus, fetch_stop_schedule

__all__ = [
    "build_data_source",
    "TransitDataSource",
    "CallableTransitDataSource",
    "fetch_commute_time",
    "fetch_next_bus",
    "fetch_stop_schedule",
]
