"""Helpers for fetching bus predictions and stop schedules from the WMATA API."""
from __future__ import annotations

from typing import Any, Dict

import requests

from commute_helper.config import settings
from commute_helper.data_sources.base import response_body
from commute_helper.domain import FetchResult, Processor
from commute_helper.models import HelperConfig
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="wmata_client")

session = requests.Session()

NEXT_BUS_PATH = "/NextBusService.svc/json/jPredictions"
STOP_SCHEDULE_PATH = "/Bus.svc/json/jStopSchedule"


def _stop_params(config: HelperConfig) -> Dict[str, Any]:
    return {
        "StopID": config.bus_stop_id,
        "api_key": config.wmata_api_key,
    }


def _get(path: str, config: HelperConfig, processor: Processor) -> FetchResult:
    """GET a WMATA endpoint for the configured stop and wrap the outcome."""
    url = f"{settings.wmata_base_url}{path}"
    params = _stop_params(config)
    logger.debug("WMATA GET %s", mask_url(url, params))

    resp = session.get(url, params=params, timeout=settings.request_timeout_seconds)
    if resp.status_code == 200:
        return FetchResult.ok(response_body(resp), processor)

    logger.warning(
        "WMATA request failed",
        extra={"url": mask_url(url), "status": resp.status_code, "stop_id": config.bus_stop_id},
    )
    return FetchResult.failed(resp.status_code)


def fetch_next_bus(config: HelperConfig) -> FetchResult:
    """Fetch next-bus predictions for the configured stop."""
    return _get(NEXT_BUS_PATH, config, Processor.BUS_PREDICTIONS)


def fetch_stop_schedule(config: HelperConfig) -> FetchResult:
    """Fetch today's schedule for the configured stop."""
    return _get(STOP_SCHEDULE_PATH, config, Processor.STOP_SCHEDULE)
