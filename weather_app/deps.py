# ABOUTME: Dependency container for the weather client using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient and provider settings used by the service layer.

import httpx
from pydantic import BaseModel, ConfigDict

from weather_app.config import Settings, load_settings


class WeatherDeps(BaseModel):
    """Dependencies injected into the service functions and controllers."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient
    api_key: str
    base_url: str
    units: str = "metric"


def create_http_client() -> httpx.AsyncClient:
    """Create an httpx client for the provider.

    No retry transport and no timeout: each request either returns a response or
    fails at the transport level.
    """
    return httpx.AsyncClient(timeout=None)


def create_deps(settings: Settings | None = None, http_client: httpx.AsyncClient | None = None) -> WeatherDeps:
    """Build WeatherDeps from settings, reading the environment when none are given."""
    settings = settings or load_settings()
    return WeatherDeps(
        http_client=http_client or create_http_client(),
        api_key=settings.api_key,
        base_url=settings.base_url,
        units=settings.units,
    )
