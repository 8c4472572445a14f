# ABOUTME: Shared test fixtures for the weather app test suite.
# ABOUTME: Provides OpenWeatherMap payloads and WeatherDeps backed by a mock HTTP client.

from unittest.mock import AsyncMock

import httpx
import pytest
from owm_payloads import forecast_item

from weather_app.deps import WeatherDeps


@pytest.fixture
def current_payload() -> dict:
    """A /weather response for London."""
    return {
        "name": "London",
        "sys": {"country": "GB"},
        "main": {"temp": 14.6, "feels_like": 13.9, "humidity": 82, "pressure": 1012},
        "wind": {"speed": 10.0},
        "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    }


@pytest.fixture
def forecast_payload() -> dict:
    """A /forecast response spanning three days, two slots each."""
    return {
        "list": [
            forecast_item("2025-01-15 12:00:00", temp=5.0),
            forecast_item("2025-01-15 15:00:00", temp=7.0),
            forecast_item("2025-01-16 00:00:00", temp=2.0, icon="01n"),
            forecast_item("2025-01-16 03:00:00", temp=1.0),
            forecast_item("2025-01-17 00:00:00", temp=-1.0, icon="13n"),
            forecast_item("2025-01-17 03:00:00", temp=-2.0),
        ]
    }


@pytest.fixture
def mock_client() -> AsyncMock:
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def deps(mock_client: AsyncMock) -> WeatherDeps:
    return WeatherDeps(
        http_client=mock_client,
        api_key="test-key",
        base_url="https://api.test/data/2.5",
    )
