# ABOUTME: Orchestrates user actions (search by text, use my location) into fetches and state updates.
# ABOUTME: Current conditions are fetched first; the forecast request is issued only after it succeeds.

import logging

from weather_app.deps import WeatherDeps
from weather_app.models import (
    Coordinates,
    FailureReason,
    FetchFailure,
    GeolocationError,
    LocationSelector,
)
from weather_app.state import (
    FetchFailed,
    FetchFinished,
    FetchStarted,
    ForecastLoaded,
    LocationTextChanged,
    ViewState,
    WeatherLoaded,
    WeatherStore,
)
from weather_app.weather_service import UNKNOWN_ERROR_MESSAGE, get_current_weather, get_forecast

logger = logging.getLogger(__name__)

GEOLOCATION_DENIED_MESSAGE = (
    "Unable to retrieve your location. Please allow location access or enter a location manually."
)
GEOLOCATION_UNSUPPORTED_MESSAGE = "Geolocation is not supported by your browser."


async def search(store: WeatherStore, deps: WeatherDeps, text: str) -> ViewState:
    """Handle a search submission. Blank text is ignored."""
    store.dispatch(LocationTextChanged(text=text))
    if not text.strip():
        return store.state
    return await _run_attempt(store, deps, LocationSelector.from_query(text))


async def use_location(store: WeatherStore, deps: WeatherDeps, position: Coordinates | GeolocationError) -> ViewState:
    """Handle the outcome of a geolocation request.

    A denied or unsupported geolocation still counts as an attempt: it starts
    loading, sets the error and clears loading again.
    """
    if isinstance(position, GeolocationError):
        attempt_id = store.next_attempt_id()
        store.dispatch(FetchStarted(attempt_id=attempt_id))
        store.dispatch(FetchFailed(attempt_id=attempt_id, failure=geolocation_failure(position)))
        return store.dispatch(FetchFinished(attempt_id=attempt_id))

    selector = LocationSelector.from_coordinates(position.latitude, position.longitude)
    return await _run_attempt(store, deps, selector)


def geolocation_failure(error: GeolocationError) -> FetchFailure:
    if error.reason == FailureReason.GEOLOCATION_UNSUPPORTED:
        return FetchFailure(reason=error.reason, message=GEOLOCATION_UNSUPPORTED_MESSAGE)
    return FetchFailure(reason=FailureReason.GEOLOCATION_DENIED, message=GEOLOCATION_DENIED_MESSAGE)


async def _run_attempt(store: WeatherStore, deps: WeatherDeps, selector: LocationSelector) -> ViewState:
    attempt_id = store.next_attempt_id()
    store.dispatch(FetchStarted(attempt_id=attempt_id))
    try:
        await _fetch_all(store, deps, selector, attempt_id)
    except Exception as e:
        logger.exception("Weather fetch attempt %d failed", attempt_id)
        failure = FetchFailure(reason=FailureReason.UNKNOWN, message=str(e) or UNKNOWN_ERROR_MESSAGE)
        store.dispatch(FetchFailed(attempt_id=attempt_id, failure=failure))
    finally:
        store.dispatch(FetchFinished(attempt_id=attempt_id))
    return store.state


async def _fetch_all(store: WeatherStore, deps: WeatherDeps, selector: LocationSelector, attempt_id: int) -> None:
    weather = await get_current_weather(deps, selector)
    if isinstance(weather, FetchFailure):
        store.dispatch(FetchFailed(attempt_id=attempt_id, failure=weather))
        return

    # Coordinate lookups adopt the resolved place name as the location text
    location_text = weather.name if selector.coordinates is not None else None
    store.dispatch(WeatherLoaded(attempt_id=attempt_id, weather=weather, location_text=location_text))

    samples = await get_forecast(deps, selector)
    if isinstance(samples, FetchFailure):
        store.dispatch(FetchFailed(attempt_id=attempt_id, failure=samples))
        return

    store.dispatch(ForecastLoaded(attempt_id=attempt_id, samples=samples))
