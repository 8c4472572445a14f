# ABOUTME: Service layer for OpenWeatherMap API calls and response parsing.
# ABOUTME: Fetches current conditions and the 5-day/3-hour forecast, returning models or FetchFailure values.

import logging

import httpx

from weather_app.deps import WeatherDeps
from weather_app.models import (
    CurrentWeather,
    FailureReason,
    FetchFailure,
    ForecastSample,
    LocationSelector,
    WeatherCondition,
)

logger = logging.getLogger(__name__)

CURRENT_PATH = "/weather"
FORECAST_PATH = "/forecast"

LOCATION_NOT_FOUND_MESSAGE = "Location not found. Please try another search term."
POSITION_WEATHER_MESSAGE = "Could not fetch weather for your location."
FORECAST_UNAVAILABLE_MESSAGE = "Could not fetch forecast data."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


def location_params(selector: LocationSelector) -> dict:
    """Provider query parameters selecting a location by text or by coordinates."""
    if selector.coordinates is not None:
        return {"lat": selector.coordinates.latitude, "lon": selector.coordinates.longitude}
    return {"q": selector.query}


def _request_params(deps: WeatherDeps, selector: LocationSelector) -> dict:
    return {**location_params(selector), "units": deps.units, "appid": deps.api_key}


async def get_current_weather(deps: WeatherDeps, selector: LocationSelector) -> CurrentWeather | FetchFailure:
    """Fetch current conditions for a location from the /weather endpoint."""
    resp = await _get(deps, CURRENT_PATH, selector)
    if isinstance(resp, FetchFailure):
        return resp

    if not resp.is_success:
        logger.warning("Current weather request for %s returned %d", _describe(selector), resp.status_code)
        message = POSITION_WEATHER_MESSAGE if selector.coordinates is not None else LOCATION_NOT_FOUND_MESSAGE
        return FetchFailure(
            reason=FailureReason.LOCATION_NOT_FOUND,
            message=message,
            status_code=resp.status_code,
        )

    try:
        return parse_current_weather(resp.json())
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.exception("Malformed current weather payload for %s", _describe(selector))
        return _unknown_failure(e)


async def get_forecast(deps: WeatherDeps, selector: LocationSelector) -> list[ForecastSample] | FetchFailure:
    """Fetch the 5-day/3-hour forecast for a location from the /forecast endpoint."""
    resp = await _get(deps, FORECAST_PATH, selector)
    if isinstance(resp, FetchFailure):
        return resp

    if not resp.is_success:
        logger.warning("Forecast request for %s returned %d", _describe(selector), resp.status_code)
        return FetchFailure(
            reason=FailureReason.FORECAST_UNAVAILABLE,
            message=FORECAST_UNAVAILABLE_MESSAGE,
            status_code=resp.status_code,
        )

    try:
        return parse_forecast(resp.json())
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.exception("Malformed forecast payload for %s", _describe(selector))
        return _unknown_failure(e)


def parse_current_weather(raw: dict) -> CurrentWeather:
    """Parse the nested /weather payload into a flat CurrentWeather snapshot."""
    main = raw["main"]
    return CurrentWeather(
        name=raw["name"],
        country=raw.get("sys", {}).get("country", ""),
        temp=main["temp"],
        feels_like=main["feels_like"],
        humidity=main["humidity"],
        pressure=main["pressure"],
        wind_speed=raw.get("wind", {}).get("speed", 0.0),
        condition=_parse_condition(raw["weather"]),
    )


def parse_forecast(raw: dict) -> list[ForecastSample]:
    """Parse the /forecast ``list`` array into ForecastSample rows, keeping provider order."""
    items = raw.get("list", [])
    if not items:
        return []

    result = []
    for item in items:
        main = item["main"]
        result.append(
            ForecastSample(
                dt=item["dt"],
                dt_txt=item["dt_txt"],
                temp=main["temp"],
                feels_like=main["feels_like"],
                humidity=main["humidity"],
                condition=_parse_condition(item["weather"]),
            )
        )
    return result


def _parse_condition(weather: list) -> WeatherCondition:
    """Use the primary (first) condition of the provider's weather array."""
    w = weather[0]
    return WeatherCondition(id=w["id"], main=w["main"], description=w["description"], icon=w["icon"])


async def _get(deps: WeatherDeps, path: str, selector: LocationSelector) -> httpx.Response | FetchFailure:
    try:
        return await deps.http_client.get(f"{deps.base_url}{path}", params=_request_params(deps, selector))
    except httpx.HTTPError as e:
        logger.warning("Request to %s for %s failed: %s", path, _describe(selector), e)
        return _unknown_failure(e)


def _unknown_failure(error: Exception) -> FetchFailure:
    return FetchFailure(reason=FailureReason.UNKNOWN, message=str(error) or UNKNOWN_ERROR_MESSAGE)


def _describe(selector: LocationSelector) -> str:
    if selector.coordinates is not None:
        return f"({selector.coordinates.latitude}, {selector.coordinates.longitude})"
    return repr(selector.query)
