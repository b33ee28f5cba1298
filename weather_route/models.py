from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LatLng(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class TimedPoint(BaseModel):
    """A coordinate stamped with the moment the traveller is expected there (UTC)."""

    model_config = ConfigDict(frozen=True)

    coord: LatLng
    time: datetime


# --- Google Directions route shape (as posted back by the front-end) ---


class Polyline(BaseModel):
    points: str = ""


class Duration(BaseModel):
    value: float = Field(default=0.0, description="Duration in seconds")
    text: Optional[str] = None


class Step(BaseModel):
    polyline: Polyline = Field(default_factory=Polyline)
    duration: Duration = Field(default_factory=Duration)
    steps: Optional[List["Step"]] = Field(
        default=None,
        description="Sub-steps. When present they replace this step's own polyline and duration.",
    )


Step.model_rebuild()


class Leg(BaseModel):
    steps: List[Step] = Field(default_factory=list)


class Route(BaseModel):
    legs: List[Leg] = Field(default_factory=list)


# --- Requests ---


class WeatherRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    routes: List[Route]
    departure_time: datetime = Field(
        alias="departureTime",
        description="ISO-8601 departure time. Naive values are read as UTC.",
    )


class RoutePoints(BaseModel):
    origin: str
    destination: str


class PlaceAutocompleteInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place_to_auto_complete: str = Field(alias="placeToAutoComplete")


# --- Responses ---


class HourlyForecast(BaseModel):
    time: datetime
    temperature: float
    precipitation: float
    icon: str


class Weather(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temperature: float
    precipitation: float = Field(alias="precipChance")
    icon: str = Field(alias="weatherIcon")


class WeatherSample(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coordinate: LatLng
    weather_data: Weather = Field(alias="weatherData")
    time: datetime


class DirectionsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    routes: List[Dict[str, Any]]
    travel_mode: str = Field(default="DRIVING", alias="travelMode")


class ServerTimeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    server_time: str = Field(alias="serverTime")
