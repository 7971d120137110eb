"""Helper for fetching public-transit commute times from the Google Directions API."""
from __future__ import annotations

import requests

from commute_helper.config import settings
from commute_helper.data_sources.base import response_body
from commute_helper.domain import FetchResult, Processor
from commute_helper.models import Destination, HelperConfig
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="google_directions_client")

session = requests.Session()

TRAVEL_MODE = "transit"


def fetch_commute_time(config: HelperConfig, destination: Destination) -> FetchResult:
    """Fetch transit directions from the configured home to `destination`.

    Raises ValueError if the configuration has no home location.
    """
    if config.places is None or config.places.home is None:
        raise ValueError("places.home must be configured to fetch commute times")

    url = settings.google_directions_url
    params = {
        "origin": config.places.home.as_param(),
        "destination": destination.as_param(),
        "key": config.google_api_key,
        "mode": TRAVEL_MODE,
    }
    logger.debug("Directions GET %s", mask_url(url, params))

    resp = session.get(url, params=params, timeout=settings.request_timeout_seconds)
    if resp.status_code == 200:
        # The name travels with the payload so the display can label the row.
        return FetchResult.ok(response_body(resp), Processor.COMMUTE, name=destination.name)

    logger.warning(
        "Directions request failed",
        extra={"destination": destination.name, "status": resp.status_code},
    )
    return FetchResult.failed(resp.status_code)
