"""
Google Maps REST client: driving directions and address autocomplete.

The directions payload is passed through untouched; the front-end renders it
and posts it back to ``/weather``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import MapsError

logger = logging.getLogger(__name__)


class GoogleMapsClient:
    DIRECTIONS_PATH = "/maps/api/directions/json"
    AUTOCOMPLETE_PATH = "/maps/api/place/autocomplete/json"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise MapsError("MAPS_BACKEND API key not configured")

        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params={**params, "key": self.api_key})
        except httpx.HTTPError as exc:
            raise MapsError(f"Google Maps request failed: {exc}") from exc

        if resp.status_code != 200:
            raise MapsError(f"Google Maps request failed with code {resp.status_code}: {resp.text}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise MapsError("Google Maps returned a non-JSON body") from exc

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            detail = data.get("error_message") or status
            raise MapsError(f"Google Maps API error: {detail}")
        return data

    async def directions(self, origin: str, destination: str) -> List[Dict[str, Any]]:
        """Driving routes between two free-form places, in Directions API JSON."""
        logger.info("[ROUTING] %s -> %s", origin, destination)
        data = await self._get(
            self.DIRECTIONS_PATH,
            {"origin": origin, "destination": destination, "mode": "driving"},
        )
        return data.get("routes") or []

    async def autocomplete(self, text: str) -> List[str]:
        """US street-address suggestions for a partial place string."""
        data = await self._get(
            self.AUTOCOMPLETE_PATH,
            {"input": text, "types": "address", "components": "country:us"},
        )
        return [p["description"] for p in data.get("predictions") or [] if "description" in p]
