import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weather_route.config import Settings, load_settings
from weather_route.errors import ConfigurationError, DecodeError, InputError, MapsError, WeatherFetchError
from weather_route.logging_config import setup_logging
from weather_route.maps import GoogleMapsClient
from weather_route.models import (
    DirectionsResponse,
    PlaceAutocompleteInput,
    RoutePoints,
    ServerTimeResponse,
    WeatherRequest,
    WeatherSample,
)
from weather_route.route import build_trace
from weather_route.sampler import sample_every_n_meters
from weather_route.weather import OpenWeatherClient, WeatherLookup, fetch_weather

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    maps_client: Optional[GoogleMapsClient] = None,
    weather_lookup: Optional[WeatherLookup] = None,
) -> FastAPI:
    """
    Build the service around an explicit configuration.

    ``maps_client`` and ``weather_lookup`` default to the Google Maps and
    OpenWeather clients built from ``settings``; tests pass their own.
    """
    if maps_client is None:
        maps_client = GoogleMapsClient(
            settings.maps_api_key,
            base_url=settings.maps_base_url,
            timeout=settings.http_timeout_s,
        )
    if weather_lookup is None:
        weather_lookup = OpenWeatherClient(
            settings.weather_api_key,
            base_url=settings.weather_base_url,
            timeout=settings.http_timeout_s,
        ).hourly_forecast

    app = FastAPI(title="Weather Route", version="0.1.0")

    # The front-end may be served from anywhere
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError) -> JSONResponse:
        logger.warning("[API_REQUEST] Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.post("/weather", response_model=List[WeatherSample])
    async def get_weather(payload: WeatherRequest) -> List[WeatherSample]:
        """
        Weather at regular intervals along the first route, for the hour the
        traveller is expected at each point when leaving at ``departureTime``.
        """
        if not payload.routes:
            raise InputError("Unable to decode routes: no routes given")

        try:
            trace, arrival = build_trace(payload.routes, payload.departure_time)
        except DecodeError as exc:
            logger.error("[API_REQUEST] Unable to retrieve coordinates for the given route: %s", exc)
            raise HTTPException(status_code=500, detail="Unable to retrieve coordinates for the given route")

        if not trace:
            return []

        samples = sample_every_n_meters(trace, settings.sample_interval_m)
        logger.info(
            "[API_REQUEST] %d trace points -> %d samples, departure %s, arrival %s",
            len(trace),
            len(samples),
            payload.departure_time.isoformat(),
            arrival.isoformat(),
        )

        try:
            return await fetch_weather(samples, weather_lookup)
        except WeatherFetchError as exc:
            logger.error("[API_REQUEST] Unable to retrieve weather data: %s", exc)
            raise HTTPException(status_code=500, detail="Unable to retrieve weather data for the route")

    @app.post("/directions", response_model=DirectionsResponse)
    async def get_directions(payload: RoutePoints) -> DirectionsResponse:
        try:
            routes = await maps_client.directions(payload.origin, payload.destination)
        except MapsError as exc:
            logger.error("[ROUTING] Unable to get directions: %s", exc)
            raise HTTPException(status_code=500, detail="Unable to get directions")
        return DirectionsResponse(routes=routes, travel_mode="DRIVING")

    @app.post("/autoCompleteSuggestions", response_model=List[str])
    async def get_autocomplete_suggestions(payload: PlaceAutocompleteInput):
        try:
            suggestions = await maps_client.autocomplete(payload.place_to_auto_complete)
        except MapsError as exc:
            logger.error("[AUTOCOMPLETE] Unable to use autocomplete client: %s", exc)
            raise HTTPException(status_code=500, detail="Unable to use autocomplete client")
        if not suggestions:
            return Response(status_code=204)
        return suggestions

    @app.get("/serverTime", response_model=ServerTimeResponse)
    async def get_server_time() -> ServerTimeResponse:
        now = datetime.now(timezone.utc).replace(microsecond=0)
        return ServerTimeResponse(server_time=now.strftime("%Y-%m-%dT%H:%M:%SZ"))

    return app


def run() -> None:
    import uvicorn

    setup_logging()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.critical("%s", exc)
        raise SystemExit(1)
    setup_logging(settings.log_level)
    logger.info("Starting server on %s:%d", settings.app_host, settings.app_port)
    uvicorn.run(create_app(settings), host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
