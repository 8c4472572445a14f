# ABOUTME: Process-wide settings resolved from the environment at startup.
# ABOUTME: Loads .env via python-dotenv and exposes the OpenWeatherMap credential, base URL, units and session secret.

import os
import secrets

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_UNITS = "metric"
DEFAULT_MAX_CLIENTS = 1000


class Settings(BaseModel):
    """Provider and web settings. An empty api_key is passed through and rejected by the provider."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    units: str = DEFAULT_UNITS
    # Without a configured secret, sessions only last for the life of the process
    session_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    max_clients: int = Field(default=DEFAULT_MAX_CLIENTS, ge=1)


def load_settings() -> Settings:
    load_dotenv()
    settings = Settings(
        api_key=os.environ.get("OPENWEATHERMAP_API_KEY", ""),
        base_url=os.environ.get("OPENWEATHERMAP_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        units=os.environ.get("WEATHER_UNITS", DEFAULT_UNITS),
        max_clients=int(os.environ.get("WEATHER_APP_MAX_CLIENTS", DEFAULT_MAX_CLIENTS)),
    )
    secret = os.environ.get("WEATHER_APP_SESSION_SECRET")
    if secret:
        settings = settings.model_copy(update={"session_secret": secret})
    return settings
