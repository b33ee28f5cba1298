"""
Exception taxonomy for the weather-along-a-route pipeline.

The core (trace building, sampling) raises these; the FastAPI layer in
``main.py`` translates them into HTTP status codes.
"""


class WeatherRouteError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(WeatherRouteError):
    """Required credentials are missing from the environment."""


class InputError(WeatherRouteError):
    """A request body decoded fine but cannot be processed (e.g. no routes)."""


class DecodeError(WeatherRouteError):
    """An encoded polyline is malformed."""

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message if step is None else f"{step}: {message}")
        self.step = step


class GeometryDegenerate(WeatherRouteError):
    """No origin exists for the requested offset on the sphere."""


class WeatherFetchError(WeatherRouteError):
    """A per-point weather lookup failed; the whole fan-out is discarded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MapsError(WeatherRouteError):
    """The Google Maps collaborator returned an error or could not be reached."""
