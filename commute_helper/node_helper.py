"""Background fetcher that answers the dashboard module's notifications.

The dashboard asks for data with one of two notifications, each carrying the
module configuration:

- FETCH_STOP_SCHEDULE -> one stop-schedule call, answered with BUS_STOP_DATA.
- FETCH_COMMUTE -> next-bus predictions plus, on even minutes, one directions
  call per destination, run concurrently and answered with COMMUTE_DATA.

Outside the configured schedule both are answered with TEAR-DOWN-DOM and no
provider is called. A provider answering with a non-200 status is reported as a
failed result; an exception (network error, bad payload) is logged and nothing
is sent for that request. Unknown notifications are logged and ignored.

Each provider call runs on its own daemon thread, so a call that never returns
only stalls the invocation that made it.
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime
from typing import Any, Callable, List, Mapping

from .config import settings
from .data_sources import TransitDataSource, build_data_source
from .domain import FetchResult, Notification, RequestKind, Signal
from .models import HelperConfig
from .schedule import current_time, is_commute_minute, should_fetch
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="node_helper")

SendCallable = Callable[[str, Any], None]


def _settle(future: asyncio.Future, result: Any = None, error: BaseException | None = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


def run_in_own_thread(fn: Callable[..., Any], *args: Any) -> asyncio.Future:
    """Run a blocking call on a dedicated daemon thread and return a future for its result."""
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def target() -> None:
        try:
            result = fn(*args)
        except Exception as exc:
            outcome = {"error": exc}
        else:
            outcome = {"result": result}
        try:
            loop.call_soon_threadsafe(lambda: _settle(future, **outcome))
        except RuntimeError:
            # The loop closed while the call was in flight; nobody is waiting.
            logger.debug("Discarding provider result after event loop closed")

    threading.Thread(target=target, name=f"fetch-{getattr(fn, '__name__', 'call')}", daemon=True).start()
    return future


class CommuteNodeHelper:
    """Dispatch inbound notifications to the providers and relay the results through `send`."""

    def __init__(
        self,
        send: SendCallable,
        data_source: TransitDataSource | None = None,
        clock: Callable[[], datetime] | None = None,
        prefix: str | None = None,
    ):
        self.send = send
        self.data_source = data_source or build_data_source(settings)
        self.clock = clock or current_time
        self.prefix = prefix or settings.notification_prefix

    def _send(self, signal: Signal, payload: Any = None) -> None:
        self.send(signal.notification(self.prefix), payload)

    async def notification_received(
        self,
        notification: RequestKind | str,
        payload: HelperConfig | Mapping[str, Any],
    ) -> None:
        """Handle one inbound notification. Never raises; failures are logged."""
        if isinstance(notification, RequestKind):
            kind = notification
        else:
            try:
                kind = RequestKind.from_notification(notification, self.prefix)
            except ValueError:
                logger.warning("Ignoring unknown notification", extra={"notification": notification})
                return

        try:
            config = payload if isinstance(payload, HelperConfig) else HelperConfig.model_validate(payload)
        except ValueError:
            logger.exception("Invalid configuration payload for %s", kind.value)
            return

        now = self.clock()
        if not should_fetch(config, now):
            # Fetching is outside the scheduled window; hide what is displayed.
            self._send(Signal.TEAR_DOWN_DOM)
            return

        if kind is RequestKind.FETCH_STOP_SCHEDULE:
            await self._relay_stop_schedule(config)
        elif kind is RequestKind.FETCH_COMMUTE:
            await self._relay_commute(config, now)
        else:  # pragma: no cover - enum is closed
            raise ValueError(f"Unhandled request kind {kind!r}")

    async def _relay_stop_schedule(self, config: HelperConfig) -> None:
        try:
            result = await run_in_own_thread(self.data_source.fetch_stop_schedule, config)
        except Exception:
            logger.exception("Error firing requests to WMATA API")
            return
        self._send(Signal.BUS_STOP_DATA, result.to_payload())

    async def _relay_commute(self, config: HelperConfig, now: datetime) -> None:
        logger.info("Fetching bus predictions/commute data", extra={"stop_id": config.bus_stop_id})
        pending = [run_in_own_thread(self.data_source.fetch_next_bus, config)]

        if is_commute_minute(now):
            for destination in config.destinations:
                pending.append(run_in_own_thread(self.data_source.fetch_commute_time, config, destination))
        else:
            logger.info("Skipping commute times this minute")

        try:
            results: List[FetchResult] = await asyncio.gather(*pending)
        except Exception:
            logger.exception("Error firing requests to Google/WMATA APIs")
            return
        self._send(Signal.COMMUTE_DATA, [r.to_payload() for r in results])

    async def handle(
        self,
        notification: RequestKind | str,
        payload: HelperConfig | Mapping[str, Any],
    ) -> List[Notification]:
        """Run one notification and return what it emitted instead of forwarding it."""
        emitted: List[Notification] = []
        collector = CommuteNodeHelper(
            send=lambda name, body=None: emitted.append(Notification(notification=name, payload=body)),
            data_source=self.data_source,
            clock=self.clock,
            prefix=self.prefix,
        )
        await collector.notification_received(notification, payload)
        return emitted
