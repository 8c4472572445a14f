# ABOUTME: Command-line entry point: look up weather by text or coordinates, or serve the web app.
# ABOUTME: Prints the same view as the web page in plain text, or the view state as JSON.

import argparse
import asyncio
import logging

from weather_app.controller import search, use_location
from weather_app.deps import create_deps
from weather_app.models import Coordinates
from weather_app.presentation import render_text
from weather_app.state import ViewState, WeatherStore

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weather-app",
        description="Current weather and 5-day forecast from OpenWeatherMap",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    # search
    search_p = sub.add_parser("search", help="Look up a city, zip code, landmark, etc.")
    search_p.add_argument("location", help="Free-text location")
    search_p.add_argument("--json", action="store_true", help="Print the view state as JSON")

    # locate
    locate_p = sub.add_parser("locate", help="Look up a latitude/longitude pair")
    locate_p.add_argument("--lat", type=float, required=True, help="Latitude")
    locate_p.add_argument("--lon", type=float, required=True, help="Longitude")
    locate_p.add_argument("--json", action="store_true", help="Print the view state as JSON")

    # serve
    serve_p = sub.add_parser("serve", help="Run the web app")
    serve_p.add_argument("--host", default=DEFAULT_HOST)
    serve_p.add_argument("--port", type=int, default=DEFAULT_PORT)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "search":
        return _print_view(asyncio.run(_cmd_search(args.location)), args.json)
    elif args.command == "locate":
        try:
            position = Coordinates(latitude=args.lat, longitude=args.lon)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        return _print_view(asyncio.run(_cmd_locate(position)), args.json)
    elif args.command == "serve":
        return _cmd_serve(args)
    else:
        parser.print_help()
        return 1


async def _cmd_search(location: str) -> ViewState:
    deps = create_deps()
    async with deps.http_client:
        return await search(WeatherStore(), deps, location)


async def _cmd_locate(position: Coordinates) -> ViewState:
    deps = create_deps()
    async with deps.http_client:
        return await use_location(WeatherStore(), deps, position)


def _print_view(state: ViewState, as_json: bool) -> int:
    if as_json:
        print(state.model_dump_json(indent=2))
    else:
        print(render_text(state))
    return 1 if state.error_message else 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("weather_app.web:app", host=args.host, port=args.port)
    return 0
