"""HTTP API exposing the commute helper's notification interface."""

import hmac
from typing import Any, List

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from .config import settings
from .domain import Notification, RequestKind
from .models import HelperConfig
from .node_helper import CommuteNodeHelper
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="commute_helper/api")

# Optional Redis client for API key checks; fallback to a static key
try:
    import redis  # type: ignore
except ImportError:  # pragma: no cover - exercised implicitly
    redis = None

_redis_client = None
if settings.api_key_redis_url and redis:
    try:
        _redis_client = redis.Redis.from_url(settings.api_key_redis_url)
        logger.info("API key checks will use Redis backend",
                    extra={"redis_url": mask_url(settings.api_key_redis_url)})
    except Exception as exc:  # pragma: no cover - safety net
        logger.warning("Failed to connect to Redis for API key checks; falling back to static key",
                       extra={"error": str(exc)})


def require_api_key(x_api_key: str | None = Header(default=None)):
    """
    Validate X-API-Key header against Redis (if configured) or the static api_key setting.
    """
    # No key configured anywhere: open access.
    if not settings.api_key and not _redis_client:
        logger.debug("No API key or Redis client configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if _redis_client:
        logger.debug("Checking API key against Redis")
        try:
            if _redis_client.sismember(settings.api_key_redis_set, x_api_key):
                return
        except Exception as e:  # pragma: no cover - defensive
            logger.warning("Redis API key lookup error; falling back to static key",
                           extra={"error": str(e)})

    if settings.api_key and hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
NODE_HELPER = CommuteNodeHelper(send=lambda name, payload=None: None)


class NotificationRequest(BaseModel):
    """Inbound notification as the dashboard runtime would deliver it."""
    notification: str
    payload: HelperConfig


class NotificationResponse(BaseModel):
    """Every notification the helper emitted while handling the request."""
    notifications: List[Notification]


@router.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@router.post("/notifications", response_model=NotificationResponse)
async def post_notification(req: NotificationRequest) -> NotificationResponse:
    """Run one FETCH_* notification and return the resulting notifications."""
    try:
        kind = RequestKind.from_notification(req.notification, NODE_HELPER.prefix)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    emitted = await NODE_HELPER.handle(kind, req.payload)
    if not emitted:
        logger.info("No notification emitted", extra={"notification": kind.value})
    return NotificationResponse(notifications=emitted)
