# ABOUTME: Collapses the 3-hour forecast list into one entry per calendar day.
# ABOUTME: First sample of each day wins; the result is truncated to the first five days.

from collections.abc import Iterable
from datetime import date

from weather_app.models import DailyForecastEntry, ForecastSample

FORECAST_DAYS = 5


def daily_forecast(samples: Iterable[ForecastSample], days: int = FORECAST_DAYS) -> list[DailyForecastEntry]:
    """Pick the first sample for each distinct day, in order of first appearance.

    The chosen slot is whichever 3-hour sample the provider lists first for that
    day, not a midday or aggregate value.
    """
    first_by_day: dict[date, ForecastSample] = {}
    for sample in samples:
        first_by_day.setdefault(sample.day_key, sample)

    entries = [DailyForecastEntry(day=day, sample=sample) for day, sample in first_by_day.items()]
    return entries[:days]
