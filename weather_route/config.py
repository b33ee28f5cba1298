import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .sampler import DEFAULT_INTERVAL_M

logger = logging.getLogger(__name__)

ENV_FILE = Path(__file__).resolve().parent / ".env"


@dataclass(frozen=True)
class Settings:
    maps_api_key: str = ""
    weather_api_key: str = ""
    maps_base_url: str = "https://maps.googleapis.com"
    weather_base_url: str = "https://api.openweathermap.org"
    sample_interval_m: float = DEFAULT_INTERVAL_M
    http_timeout_s: float = 10.0
    app_host: str = "127.0.0.1"
    app_port: int = 5000
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the process environment (after loading ``.env`` from
    the package folder, if there is one).

    Both API keys missing is fatal; one missing only disables its endpoints.
    """
    if environ is None:
        # It's okay if an environment file is not provided...
        if not load_dotenv(ENV_FILE):
            logger.info("No environment file provided")
        environ = os.environ

    maps_key = environ.get("MAPS_BACKEND", "").strip()
    weather_key = environ.get("WEATHER", "").strip()
    # ...but the keys must exist one way or another
    if not maps_key and not weather_key:
        raise ConfigurationError("Maps or weather API key is not present (MAPS_BACKEND / WEATHER)")
    if not maps_key:
        logger.warning("MAPS_BACKEND is not set; /directions and /autoCompleteSuggestions will fail")
    if not weather_key:
        logger.warning("WEATHER is not set; /weather will fail")

    try:
        return Settings(
            maps_api_key=maps_key,
            weather_api_key=weather_key,
            maps_base_url=environ.get("MAPS_BASE_URL", Settings.maps_base_url),
            weather_base_url=environ.get("WEATHER_BASE_URL", Settings.weather_base_url),
            sample_interval_m=float(environ.get("SAMPLE_INTERVAL_M", DEFAULT_INTERVAL_M)),
            http_timeout_s=float(environ.get("HTTP_TIMEOUT_S", Settings.http_timeout_s)),
            app_host=environ.get("APP_HOST", Settings.app_host),
            app_port=int(environ.get("PORT") or Settings.app_port),
            log_level=environ.get("LOG_LEVEL", Settings.log_level),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc
