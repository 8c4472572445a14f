# ABOUTME: View state, actions and the pure reducer driving the UI (action -> reduce -> new state).
# ABOUTME: Every fetch attempt carries an id so results from a superseded attempt are discarded.

import logging
from collections import OrderedDict
from itertools import count

from pydantic import BaseModel, ConfigDict

from weather_app.forecast import daily_forecast
from weather_app.models import CurrentWeather, DailyForecastEntry, FetchFailure, ForecastSample

logger = logging.getLogger(__name__)


class ViewState(BaseModel):
    """Everything the views need; replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    location_text: str = ""
    current_weather: CurrentWeather | None = None
    forecast_samples: list[ForecastSample] | None = None
    is_loading: bool = False
    error_message: str | None = None
    attempt_id: int = 0

    @property
    def daily_forecast(self) -> list[DailyForecastEntry]:
        if not self.forecast_samples:
            return []
        return daily_forecast(self.forecast_samples)


class LocationTextChanged(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class FetchStarted(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt_id: int


class WeatherLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt_id: int
    weather: CurrentWeather
    # Set for coordinate lookups, where the place name is only known after the fetch
    location_text: str | None = None


class ForecastLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt_id: int
    samples: list[ForecastSample]


class FetchFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt_id: int
    failure: FetchFailure


class FetchFinished(BaseModel):
    model_config = ConfigDict(frozen=True)

    attempt_id: int


Action = LocationTextChanged | FetchStarted | WeatherLoaded | ForecastLoaded | FetchFailed | FetchFinished

_ATTEMPT_RESULTS = (WeatherLoaded, ForecastLoaded, FetchFailed, FetchFinished)


def reduce(state: ViewState, action: Action) -> ViewState:
    """Return the state that results from applying ``action`` to ``state``.

    Attempt-tagged actions that do not belong to the current attempt are ignored,
    so a late response from an earlier submission cannot overwrite a newer one.
    Failures only set the error message; weather and forecast from earlier
    attempts stay in place.
    """
    if isinstance(action, LocationTextChanged):
        return state.model_copy(update={"location_text": action.text})

    if isinstance(action, FetchStarted):
        return state.model_copy(update={"attempt_id": action.attempt_id, "is_loading": True, "error_message": None})

    if isinstance(action, _ATTEMPT_RESULTS) and action.attempt_id != state.attempt_id:
        logger.debug(
            "Discarding %s from superseded attempt %d (current %d)",
            type(action).__name__,
            action.attempt_id,
            state.attempt_id,
        )
        return state

    if isinstance(action, WeatherLoaded):
        update: dict = {"current_weather": action.weather}
        if action.location_text is not None:
            update["location_text"] = action.location_text
        return state.model_copy(update=update)

    if isinstance(action, ForecastLoaded):
        return state.model_copy(update={"forecast_samples": list(action.samples)})

    if isinstance(action, FetchFailed):
        return state.model_copy(update={"error_message": action.failure.message})

    if isinstance(action, FetchFinished):
        return state.model_copy(update={"is_loading": False})

    raise TypeError(f"Unknown action: {action!r}")


class WeatherStore:
    """Holds the current ViewState and applies dispatched actions to it."""

    def __init__(self, state: ViewState | None = None):
        self._state = state or ViewState()
        self._attempts = count(self._state.attempt_id + 1)

    @property
    def state(self) -> ViewState:
        return self._state

    def next_attempt_id(self) -> int:
        """Hand out a new, strictly increasing attempt id."""
        return next(self._attempts)

    def dispatch(self, action: Action) -> ViewState:
        logger.debug("Dispatching %s", type(action).__name__)
        self._state = reduce(self._state, action)
        return self._state


class StoreRegistry:
    """One WeatherStore per client id, evicting the least recently used past ``max_clients``."""

    def __init__(self, max_clients: int = 1000):
        self.max_clients = max_clients
        self._stores: OrderedDict[str, WeatherStore] = OrderedDict()

    def get(self, client_id: str) -> WeatherStore:
        store = self._stores.get(client_id)
        if store is None:
            store = WeatherStore()
            self._stores[client_id] = store
        self._stores.move_to_end(client_id)
        while len(self._stores) > self.max_clients:
            evicted, _ = self._stores.popitem(last=False)
            logger.debug("Evicted view state for client %s", evicted)
        return store

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._stores
