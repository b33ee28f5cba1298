"""
Weather along the route.

Every sampled point gets one forecast lookup; all lookups run concurrently and
the hourly entry matching the point's arrival hour is kept. One failed lookup
fails the whole request: callers never see a partial set.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, List, Optional, Protocol, Sequence

import httpx

from .errors import WeatherFetchError
from .models import HourlyForecast, TimedPoint, Weather, WeatherSample

logger = logging.getLogger(__name__)


class WeatherLookup(Protocol):
    def __call__(self, lat: float, lng: float) -> Awaitable[List[HourlyForecast]]:
        ...


class OpenWeatherClient:
    """Hourly forecasts from the OpenWeather One Call API (imperial units)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def hourly_forecast(self, lat: float, lng: float) -> List[HourlyForecast]:
        if not self.api_key:
            raise WeatherFetchError("WEATHER API key not configured")

        url = f"{self.base_url}/data/2.5/onecall"
        params = {
            "units": "imperial",
            "lat": lat,
            "lon": lng,
            "exclude": "current,minutely,daily,alerts",
            "appid": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.error("[WEATHER] Unable to retrieve weather for (%s, %s): %s", lat, lng, exc)
            raise WeatherFetchError(f"Weather request failed: {exc}") from exc

        if resp.status_code != 200:
            logger.error(
                "[WEATHER] Unable to retrieve weather for (%s, %s): API error with code %d",
                lat,
                lng,
                resp.status_code,
            )
            raise WeatherFetchError(f"Weather API error: {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
            return [
                HourlyForecast(
                    time=datetime.fromtimestamp(entry["dt"], tz=timezone.utc),
                    temperature=entry["temp"],
                    precipitation=entry.get("pop", 0.0),
                    icon=entry["weather"][0]["icon"],
                )
                for entry in data["hourly"]
            ]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("[WEATHER] Unable to parse weather for (%s, %s): %r", lat, lng, exc)
            raise WeatherFetchError(f"Malformed weather response: {exc!r}") from exc


def _truncate_to_hour(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)


def match_forecast(point: TimedPoint, forecast: Sequence[HourlyForecast]) -> Optional[WeatherSample]:
    """Pair ``point`` with the forecast entry for its UTC hour, or None if the series lacks it."""
    hour = _truncate_to_hour(point.time)
    for entry in forecast:
        if _truncate_to_hour(entry.time) == hour:
            return WeatherSample(
                coordinate=point.coord,
                weather_data=Weather(
                    temperature=entry.temperature,
                    precipitation=entry.precipitation,
                    icon=entry.icon,
                ),
                time=point.time,
            )
    return None


async def fetch_weather(samples: Sequence[TimedPoint], weather_lookup: WeatherLookup) -> List[WeatherSample]:
    """
    Look up the weather for every sample concurrently.

    The result follows the order of ``samples``; samples whose arrival hour is
    not covered by the forecast are dropped. Raises WeatherFetchError as soon
    as any lookup fails. Lookups already in flight are left to finish and their
    results are discarded.
    """
    if not samples:
        return []

    async def _lookup(point: TimedPoint) -> Optional[WeatherSample]:
        forecast = await weather_lookup(point.coord.lat, point.coord.lng)
        return match_forecast(point, forecast)

    try:
        results = await asyncio.gather(*(_lookup(p) for p in samples))
    except WeatherFetchError:
        logger.error("[WEATHER] Fan-out over %d samples aborted", len(samples))
        raise

    weather_samples = [r for r in results if r is not None]
    logger.info("[WEATHER] %d/%d samples matched a forecast hour", len(weather_samples), len(samples))
    return weather_samples
