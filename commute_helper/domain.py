"""Domain vocabulary shared with the dashboard display layer.

Notification names, processor tags and the Fetch Result record are the stable
contract between this helper and the front-end module that renders them. No
fetching logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .config import DEFAULT_NOTIFICATION_PREFIX


class Processor(str, Enum):
    """Name of the display-layer transform that understands a payload."""
    BUS_PREDICTIONS = "processBusPredictorData"
    STOP_SCHEDULE = "processStopData"
    COMMUTE = "processCommuteData"


def _strip_prefix(name: str, prefix: str) -> str:
    marker = f"{prefix}-"
    if name.startswith(marker):
        return name[len(marker):]
    return name


class RequestKind(str, Enum):
    """Inbound notifications the helper reacts to."""
    FETCH_STOP_SCHEDULE = "FETCH_STOP_SCHEDULE"
    FETCH_COMMUTE = "FETCH_COMMUTE"

    @classmethod
    def from_notification(cls, name: str, prefix: str = DEFAULT_NOTIFICATION_PREFIX) -> "RequestKind":
        """Parse a prefixed (or bare) notification name; raise ValueError for anything else."""
        bare = _strip_prefix(name, prefix)
        try:
            return cls(bare)
        except ValueError:
            raise ValueError(f"Unknown notification '{name}'") from None


class Signal(str, Enum):
    """Outbound notifications sent back to the dashboard."""
    BUS_STOP_DATA = "BUS_STOP_DATA"
    COMMUTE_DATA = "COMMUTE_DATA"
    TEAR_DOWN_DOM = "TEAR-DOWN-DOM"

    def notification(self, prefix: str = DEFAULT_NOTIFICATION_PREFIX) -> str:
        return f"{prefix}-{self.value}"


class FetchResult(BaseModel):
    """Outcome of one provider call: either a payload or the HTTP status that failed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    success: bool
    data: Any = None
    processor: Optional[Processor] = None
    name: Optional[str] = None
    status: Optional[int] = None

    @model_validator(mode="after")
    def check_success_xor_failure(self) -> "FetchResult":
        if self.success:
            if self.processor is None:
                raise ValueError("successful results need a processor tag")
            if self.status is not None:
                raise ValueError("successful results carry no status")
        else:
            if self.status is None:
                raise ValueError("failed results need the observed status")
            if self.data is not None or self.processor is not None or self.name is not None:
                raise ValueError("failed results carry no payload")
        return self

    @classmethod
    def ok(cls, data: Any, processor: Processor, name: str | None = None) -> "FetchResult":
        return cls(success=True, data=data, processor=processor, name=name)

    @classmethod
    def failed(cls, status: int) -> "FetchResult":
        return cls(success=False, status=status)

    def to_payload(self) -> Dict[str, Any]:
        """Dashboard wire shape, e.g. {"data": ..., "processor": "processStopData", "success": true}."""
        if not self.success:
            return {"status": self.status, "success": False}
        payload: Dict[str, Any] = {"data": self.data, "processor": self.processor.value, "success": True}
        if self.name is not None:
            payload["name"] = self.name
        return payload


class Notification(BaseModel):
    """An outbound notification as handed to the transport."""
    notification: str
    payload: Any = None
