"""Helper configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

DEFAULT_NOTIFICATION_PREFIX = "MMM-WmataBusSchedule"


class Settings(BaseSettings):
    """Environment-driven configuration for the commute helper service.

    Per-request options (stop id, credentials, schedule, places) arrive with
    each notification; only process-wide knobs live here.
    """
    model_config = SettingsConfigDict(env_prefix="COMMUTE_HELPER_", extra="ignore")

    data_source: str = "live"  # options: live
    wmata_base_url: str = "https://api.wmata.com"
    google_directions_url: str = "https://maps.googleapis.com/maps/api/directions/json"
    request_timeout_seconds: float | None = None  # None waits indefinitely
    timezone: str | None = None  # None uses the host's local time
    notification_prefix: str = DEFAULT_NOTIFICATION_PREFIX
    api_key: str | None = None
    api_key_redis_url: str | None = None
    api_key_redis_set: str = "api_keys"
    log_level: str = "INFO"

    @field_validator("wmata_base_url", "google_directions_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("request_timeout_seconds", mode="after")
    @classmethod
    def non_positive_timeout_means_none(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            return None
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'api_key'})}")
