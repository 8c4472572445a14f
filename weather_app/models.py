# ABOUTME: Pydantic BaseModels for OpenWeatherMap responses, location selectors and fetch results.
# ABOUTME: Defines the immutable snapshot types passed between the service, reducer, state and views.

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WeatherCondition(BaseModel):
    """Condition descriptor from the provider's ``weather[0]`` entry."""

    model_config = ConfigDict(frozen=True)

    id: int
    main: str
    description: str
    icon: str


class CurrentWeather(BaseModel):
    """Current conditions snapshot for a location."""

    model_config = ConfigDict(frozen=True)

    name: str
    country: str
    temp: float
    feels_like: float
    humidity: int
    pressure: int
    wind_speed: float
    condition: WeatherCondition


class ForecastSample(BaseModel):
    """One 3-hour forecast slot from the provider's ``list`` array."""

    model_config = ConfigDict(frozen=True)

    dt: int
    dt_txt: str
    temp: float
    feels_like: float
    humidity: int
    condition: WeatherCondition

    @field_validator("dt_txt")
    @classmethod
    def check_day_stamp(cls, value: str) -> str:
        """Reject day-stamps whose date part is not an ISO date, so bad slots fail at parse time."""
        _day_stamp_date(value)
        return value

    @property
    def day_key(self) -> date:
        """Calendar date of the slot, taken from the day-stamp text."""
        return _day_stamp_date(self.dt_txt)


def _day_stamp_date(day_stamp: str) -> date:
    return date.fromisoformat(day_stamp.split(" ")[0])


class DailyForecastEntry(BaseModel):
    """First forecast sample seen for a calendar day."""

    model_config = ConfigDict(frozen=True)

    day: date
    sample: ForecastSample


class Coordinates(BaseModel):
    """Latitude/longitude pair, e.g. from browser geolocation."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationSelector(BaseModel):
    """Either a free-text query or a coordinate pair, never both."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None
    coordinates: Coordinates | None = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "LocationSelector":
        if (self.query is None) == (self.coordinates is None):
            raise ValueError("exactly one of query or coordinates is required")
        return self

    @classmethod
    def from_query(cls, query: str) -> "LocationSelector":
        return cls(query=query)

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float) -> "LocationSelector":
        return cls(coordinates=Coordinates(latitude=latitude, longitude=longitude))


class FailureReason(StrEnum):
    LOCATION_NOT_FOUND = "location_not_found"
    FORECAST_UNAVAILABLE = "forecast_unavailable"
    GEOLOCATION_DENIED = "geolocation_denied"
    GEOLOCATION_UNSUPPORTED = "geolocation_unsupported"
    UNKNOWN = "unknown"


class FetchFailure(BaseModel):
    """Failed fetch step, carried as a value instead of an exception."""

    model_config = ConfigDict(frozen=True)

    reason: FailureReason
    message: str
    status_code: int | None = None


class GeolocationError(BaseModel):
    """Geolocation was denied by the user or is unavailable on the client."""

    model_config = ConfigDict(frozen=True)

    reason: FailureReason = FailureReason.GEOLOCATION_DENIED
