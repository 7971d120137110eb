"""Factory helpers for choosing a transit data source at startup."""

from __future__ import annotations

from commute_helper import config
from commute_helper.data_sources import google_directions_client, wmata_client
from commute_helper.data_sources.base import CallableTransitDataSource, TransitDataSource
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "live"


def build_data_source(settings: config.Settings | None = None) -> TransitDataSource:
    """Instantiate the configured transit data source."""
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "live":
        logger.info(
            "Using live WMATA/Google data source",
            extra={
                "wmata_base_url": mask_url(settings.wmata_base_url),
                "directions_url": mask_url(settings.google_directions_url),
            },
        )
        # Client functions are resolved per call.
        return CallableTransitDataSource(
            next_bus=lambda cfg: wmata_client.fetch_next_bus(cfg),
            stop_schedule=lambda cfg: wmata_client.fetch_stop_schedule(cfg),
            commute_time=lambda cfg, dest: google_directions_client.fetch_commute_time(cfg, dest),
        )

    raise ValueError(f"Unknown data source '{source}'")
