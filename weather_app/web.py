# ABOUTME: ASGI web entry point serving the weather page, search form and geolocation callback.
# ABOUTME: Creates a Starlette app keeping one WeatherStore per session; run with `uvicorn weather_app.web:app`.

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from weather_app.config import Settings, load_settings
from weather_app.controller import search, use_location
from weather_app.deps import WeatherDeps, create_deps
from weather_app.models import Coordinates, FailureReason, GeolocationError
from weather_app.presentation import ICON_BASE, render_page
from weather_app.state import StoreRegistry, WeatherStore

logger = logging.getLogger(__name__)

ICON_DIR = Path(__file__).parent / "static" / "weather-icons"
SESSION_COOKIE = "weather_session"
CLIENT_ID_KEY = "client_id"


def parse_position(form) -> Coordinates | GeolocationError:
    """Turn the geolocation form posted by the page script into coordinates or an error.

    Missing or out-of-range coordinates are treated as a denied geolocation.
    """
    error = (form.get("error") or "").strip()
    if error == "unsupported":
        return GeolocationError(reason=FailureReason.GEOLOCATION_UNSUPPORTED)
    if error:
        return GeolocationError(reason=FailureReason.GEOLOCATION_DENIED)
    try:
        return Coordinates(latitude=float(form.get("latitude")), longitude=float(form.get("longitude")))
    except (TypeError, ValueError, ValidationError):
        logger.warning("Invalid geolocation form: %r", dict(form))
        return GeolocationError(reason=FailureReason.GEOLOCATION_DENIED)


def client_store(request: Request) -> WeatherStore:
    """The requesting client's store, assigning a client id to new sessions."""
    client_id = request.session.get(CLIENT_ID_KEY)
    if client_id is None:
        client_id = uuid4().hex
        request.session[CLIENT_ID_KEY] = client_id
    return request.app.state.stores.get(client_id)


async def index(request: Request) -> HTMLResponse:
    return HTMLResponse(render_page(client_store(request).state))


async def submit_search(request: Request) -> RedirectResponse:
    form = await request.form()
    await search(client_store(request), request.app.state.deps, form.get("location") or "")
    return RedirectResponse("/", status_code=303)


async def submit_location(request: Request) -> RedirectResponse:
    form = await request.form()
    await use_location(client_store(request), request.app.state.deps, parse_position(form))
    return RedirectResponse("/", status_code=303)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy"})


def create_app(
    deps: WeatherDeps | None = None,
    settings: Settings | None = None,
    stores: StoreRegistry | None = None,
) -> Starlette:
    """Build the web app. Settings and dependencies default to ones read from the environment.

    The HTTP client is closed on shutdown only when the app created it.
    """
    settings = settings or load_settings()
    owns_client = deps is None
    deps = deps or create_deps(settings)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        if owns_client:
            await deps.http_client.aclose()

    app = Starlette(
        routes=[
            Route("/", index, methods=["GET"]),
            Route("/search", submit_search, methods=["POST"]),
            Route("/locate", submit_location, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
            Mount(ICON_BASE, app=StaticFiles(directory=ICON_DIR), name="weather-icons"),
        ],
        middleware=[
            Middleware(SessionMiddleware, secret_key=settings.session_secret, session_cookie=SESSION_COOKIE),
        ],
        lifespan=lifespan,
    )
    app.state.deps = deps
    app.state.stores = stores if stores is not None else StoreRegistry(max_clients=settings.max_clients)
    return app


app = create_app()
