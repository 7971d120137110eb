"""Interfaces and helpers for transit data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from commute_helper.domain import FetchResult
from commute_helper.models import Destination, HelperConfig
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/base")


class TransitDataSource(Protocol):
    """Interface for anything that can answer the helper's three provider calls.

    Implementations are blocking; the dispatcher runs them off the event loop.
    Non-200 responses come back as failed FetchResults, transport errors raise.
    """

    def fetch_next_bus(self, config: HelperConfig) -> FetchResult:
        """Return next-bus predictions for the configured stop."""
        ...

    def fetch_stop_schedule(self, config: HelperConfig) -> FetchResult:
        """Return the schedule for the configured stop."""
        ...

    def fetch_commute_time(self, config: HelperConfig, destination: Destination) -> FetchResult:
        """Return transit directions from home to `destination`."""
        ...


@dataclass
class CallableTransitDataSource(TransitDataSource):
    """Wrap three callables so they can be swapped for different backends."""

    next_bus: Callable[[HelperConfig], FetchResult]
    stop_schedule: Callable[[HelperConfig], FetchResult]
    commute_time: Callable[[HelperConfig, Destination], FetchResult]

    def fetch_next_bus(self, config: HelperConfig) -> FetchResult:
        return self.next_bus(config)

    def fetch_stop_schedule(self, config: HelperConfig) -> FetchResult:
        return self.stop_schedule(config)

    def fetch_commute_time(self, config: HelperConfig, destination: Destination) -> FetchResult:
        return self.commute_time(config, destination)


def response_body(resp) -> Any:
    """Decoded JSON body, or the raw text when a provider answers 200 with something else."""
    try:
        return resp.json()
    except ValueError:
        logger.warning("Provider returned a non-JSON body; relaying raw text", extra={"url": mask_url(str(resp.url))})
        return resp.text
