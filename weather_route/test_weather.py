import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from weather_route.errors import WeatherFetchError
from weather_route.models import HourlyForecast, LatLng, TimedPoint
from weather_route.weather import OpenWeatherClient, fetch_weather, match_forecast

T0 = datetime(2024, 5, 1, 14, 0, tzinfo=timezone.utc)


def _pt(lat: float, lng: float, time: datetime = T0) -> TimedPoint:
    return TimedPoint(coord=LatLng(lat=lat, lng=lng), time=time)


def _hourly(start: datetime, hours: int, temp: float = 70.0):
    return [
        HourlyForecast(time=start + timedelta(hours=h), temperature=temp + h, precipitation=0.1 * h, icon=f"0{h}d")
        for h in range(hours)
    ]


def _onecall_body(start: datetime, hours: int) -> dict:
    return {
        "lat": 40.0,
        "lon": -105.0,
        "hourly": [
            {
                "dt": int((start + timedelta(hours=h)).timestamp()),
                "temp": 60.0 + h,
                "pop": 0.25,
                "weather": [{"id": 500, "main": "Rain", "icon": "10d"}],
            }
            for h in range(hours)
        ],
    }


def test_match_forecast_uses_the_arrival_hour():
    forecast = _hourly(T0, 3)
    sample = match_forecast(_pt(1, 2, T0 + timedelta(hours=1, minutes=59)), forecast)

    assert sample is not None
    assert sample.weather_data.temperature == 71.0
    assert sample.weather_data.icon == "01d"
    assert sample.time == T0 + timedelta(hours=1, minutes=59)
    assert sample.coordinate == LatLng(lat=1, lng=2)


def test_match_forecast_compares_full_hour_not_hour_of_day():
    # same clock hour, next day
    forecast = _hourly(T0 + timedelta(days=1), 1)
    assert match_forecast(_pt(1, 2), forecast) is None


def test_match_forecast_naive_time_is_utc():
    forecast = _hourly(T0, 1)
    assert match_forecast(_pt(1, 2, datetime(2024, 5, 1, 14, 20)), forecast) is not None


def test_fetch_weather_preserves_sample_order():
    samples = [_pt(float(i), 0.0, T0 + timedelta(hours=i)) for i in range(4)]

    async def lookup(lat, lng):
        # later samples answer first
        await asyncio.sleep(0.01 * (4 - lat))
        return _hourly(T0, 6)

    result = asyncio.run(fetch_weather(samples, lookup))

    assert [s.coordinate.lat for s in result] == [0.0, 1.0, 2.0, 3.0]
    assert [s.weather_data.temperature for s in result] == [70.0, 71.0, 72.0, 73.0]


def test_fetch_weather_drops_samples_outside_the_forecast():
    samples = [_pt(0, 0, T0), _pt(1, 0, T0 + timedelta(hours=10)), _pt(2, 0, T0 + timedelta(hours=1))]

    async def lookup(lat, lng):
        return _hourly(T0, 2)

    result = asyncio.run(fetch_weather(samples, lookup))
    assert [s.coordinate.lat for s in result] == [0.0, 2.0]


def test_fetch_weather_without_samples_makes_no_calls():
    calls = []

    async def lookup(lat, lng):
        calls.append((lat, lng))
        return []

    assert asyncio.run(fetch_weather([], lookup)) == []
    assert calls == []


def test_one_failed_lookup_fails_the_whole_fan_out():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["lat"] == "2.0":
            return httpx.Response(503, json={"cod": 503, "message": "unavailable"})
        return httpx.Response(200, json=_onecall_body(T0, 4))

    client = OpenWeatherClient("key", transport=httpx.MockTransport(handler))
    samples = [_pt(1.0, 0.0), _pt(2.0, 0.0), _pt(3.0, 0.0)]

    with pytest.raises(WeatherFetchError) as excinfo:
        asyncio.run(fetch_weather(samples, client.hourly_forecast))
    assert excinfo.value.status_code == 503


def test_openweather_client_parses_hourly_series():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=_onecall_body(T0, 3))

    client = OpenWeatherClient("secret", base_url="https://weather.test/", transport=httpx.MockTransport(handler))
    forecast = asyncio.run(client.hourly_forecast(40.0, -105.0))

    assert seen["path"] == "/data/2.5/onecall"
    assert seen["params"]["units"] == "imperial"
    assert seen["params"]["appid"] == "secret"
    assert seen["params"]["exclude"] == "current,minutely,daily,alerts"
    assert seen["params"]["lon"] == "-105.0"

    assert len(forecast) == 3
    assert forecast[0].time == T0
    assert forecast[2].temperature == 62.0
    assert forecast[1].precipitation == 0.25
    assert forecast[1].icon == "10d"


def test_openweather_client_rejects_malformed_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"hourly": [{"dt": 1714572000, "temp": 61.0}]})

    client = OpenWeatherClient("key", transport=httpx.MockTransport(handler))
    with pytest.raises(WeatherFetchError):
        asyncio.run(client.hourly_forecast(40.0, -105.0))


def test_openweather_client_rejects_non_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    client = OpenWeatherClient("key", transport=httpx.MockTransport(handler))
    with pytest.raises(WeatherFetchError):
        asyncio.run(client.hourly_forecast(40.0, -105.0))


def test_openweather_client_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = OpenWeatherClient("key", transport=httpx.MockTransport(handler))
    with pytest.raises(WeatherFetchError):
        asyncio.run(client.hourly_forecast(40.0, -105.0))


def test_openweather_client_requires_a_key():
    client = OpenWeatherClient("")
    with pytest.raises(WeatherFetchError):
        asyncio.run(client.hourly_forecast(40.0, -105.0))
