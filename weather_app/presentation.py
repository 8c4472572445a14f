# ABOUTME: Pure rendering of ViewState into CLI text and the HTML page.
# ABOUTME: Holds the icon lookup table and the display formatting for temperature, wind and dates.

import math
from datetime import date, datetime, tzinfo
from html import escape

from weather_app.models import CurrentWeather, DailyForecastEntry
from weather_app.state import ViewState

ICON_BASE = "/weather-icons"

WEATHER_ICONS: dict[str, str] = {
    "01d": f"{ICON_BASE}/clear-day.svg",
    "01n": f"{ICON_BASE}/clear-night.svg",
    "02d": f"{ICON_BASE}/partly-cloudy-day.svg",
    "02n": f"{ICON_BASE}/partly-cloudy-night.svg",
    "03d": f"{ICON_BASE}/cloudy.svg",
    "03n": f"{ICON_BASE}/cloudy.svg",
    "04d": f"{ICON_BASE}/cloudy.svg",
    "04n": f"{ICON_BASE}/cloudy.svg",
    "09d": f"{ICON_BASE}/rain.svg",
    "09n": f"{ICON_BASE}/rain.svg",
    "10d": f"{ICON_BASE}/rain.svg",
    "10n": f"{ICON_BASE}/rain.svg",
    "11d": f"{ICON_BASE}/thunderstorm.svg",
    "11n": f"{ICON_BASE}/thunderstorm.svg",
    "13d": f"{ICON_BASE}/snow.svg",
    "13n": f"{ICON_BASE}/snow.svg",
    "50d": f"{ICON_BASE}/fog.svg",
    "50n": f"{ICON_BASE}/fog.svg",
}

UNKNOWN_ICON = f"{ICON_BASE}/unknown.svg"

MS_TO_KMH = 3.6


def icon_path(code: str) -> str:
    return WEATHER_ICONS.get(code, UNKNOWN_ICON)


def display_round(value: float) -> int:
    """Round half up, so 2.5 -> 3 and -2.5 -> -2."""
    whole = math.floor(value)
    # Comparing the fraction avoids the float error in value + 0.5
    return whole + 1 if value - whole >= 0.5 else whole


def format_temperature(temp: float) -> str:
    return f"{display_round(temp)}°C"


def wind_kmh(speed_ms: float) -> int:
    """Convert m/s to whole km/h."""
    return display_round(speed_ms * MS_TO_KMH)


def format_day(timestamp: int, tz: tzinfo | None = None) -> str:
    """Short card date, e.g. ``Mon, Jan 15``. Uses local time unless ``tz`` is given."""
    d = datetime.fromtimestamp(timestamp, tz)
    return f"{d:%a}, {d:%b} {d.day}"


def format_long_date(d: date) -> str:
    """Header date, e.g. ``Monday, January 15, 2025``."""
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


# ── Text ────────────────────────────────────────────────────────


def render_text(state: ViewState, today: date | None = None, tz: tzinfo | None = None) -> str:
    """Plain text view for the terminal."""
    today = today or date.today()
    lines: list[str] = []

    if state.is_loading:
        lines.append("Loading...")
    if state.error_message:
        lines.append(f"Error: {state.error_message}")

    if state.current_weather is not None:
        if lines:
            lines.append("")
        lines.extend(_current_text(state.current_weather, today))

    if state.forecast_samples is not None:
        lines.append("")
        lines.append("5-Day Forecast")
        for entry in state.daily_forecast:
            lines.append(_day_text(entry, tz))

    return "\n".join(lines)


def _current_text(w: CurrentWeather, today: date) -> list[str]:
    return [
        f"{w.name}, {w.country}",
        format_long_date(today),
        f"{format_temperature(w.temp)}  {w.condition.description}",
        f"Feels like: {format_temperature(w.feels_like)}",
        f"Humidity: {w.humidity}%",
        f"Pressure: {w.pressure} hPa",
        f"Wind: {wind_kmh(w.wind_speed)} km/h",
    ]


def _day_text(entry: DailyForecastEntry, tz: tzinfo | None) -> str:
    s = entry.sample
    return (
        f"  {format_day(s.dt, tz)}: {format_temperature(s.temp)}, "
        f"{s.condition.description}, humidity {s.humidity}%"
    )


# ── HTML ────────────────────────────────────────────────────────

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Weather Forecast</title>
<style>
body {{ font-family: sans-serif; background: linear-gradient(#60a5fa, #2563eb); margin: 0; padding: 2rem; }}
main {{ max-width: 56rem; margin: 0 auto; background: rgba(255,255,255,.9); border-radius: .75rem; padding: 2rem; }}
h1 {{ text-align: center; color: #1e40af; }}
form.search {{ display: flex; gap: .5rem; flex-wrap: wrap; }}
form.search input {{ flex-grow: 1; padding: .5rem 1rem; }}
.error {{ background: #fee2e2; border: 1px solid #f87171; color: #b91c1c; padding: .75rem 1rem; margin: 1.5rem 0; }}
.current, .day {{ background: #eff6ff; border-radius: .5rem; padding: 1rem; }}
.temp {{ font-size: 3rem; font-weight: bold; color: #1e40af; margin: .5rem 0; }}
.days {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(8rem, 1fr)); gap: 1rem; }}
.day {{ text-align: center; }}
.description {{ text-transform: capitalize; }}
footer {{ text-align: center; color: white; font-size: .875rem; margin-top: 2rem; }}
</style>
</head>
<body>
<main>
<h1>Weather Forecast</h1>
<form class="search" method="post" action="/search">
<input type="text" name="location" value="{location}" placeholder="Enter city, zip code, landmark, etc.">
<button type="submit"{disabled}>{submit_label}</button>
<button type="button" id="use-location"{disabled}>Use My Location</button>
</form>
<form id="locate" method="post" action="/locate" hidden>
<input type="hidden" name="latitude"><input type="hidden" name="longitude"><input type="hidden" name="error">
</form>
{error}{current}{forecast}
</main>
<footer>
<p>Weather data provided by OpenWeatherMap</p>
<p>&copy; {year} Weather App</p>
</footer>
<script>
document.getElementById("use-location").addEventListener("click", function () {{
  var form = document.getElementById("locate");
  if (!navigator.geolocation) {{
    form.error.value = "unsupported";
    form.submit();
    return;
  }}
  navigator.geolocation.getCurrentPosition(function (position) {{
    form.latitude.value = position.coords.latitude;
    form.longitude.value = position.coords.longitude;
    form.submit();
  }}, function () {{
    form.error.value = "denied";
    form.submit();
  }});
}});
</script>
</body>
</html>
"""


def render_page(state: ViewState, today: date | None = None, tz: tzinfo | None = None) -> str:
    """Full HTML page for the web app. All dynamic text is escaped."""
    today = today or date.today()
    disabled = " disabled" if state.is_loading else ""
    return _PAGE.format(
        location=escape(state.location_text),
        disabled=disabled,
        submit_label="Loading..." if state.is_loading else "Search",
        error=f'<div class="error">{escape(state.error_message)}</div>\n' if state.error_message else "",
        current=_current_html(state.current_weather, today) if state.current_weather is not None else "",
        forecast=_forecast_html(state.daily_forecast, tz) if state.forecast_samples is not None else "",
        year=today.year,
    )


def _current_html(w: CurrentWeather, today: date) -> str:
    description = escape(w.condition.description)
    return (
        '<section class="current">\n'
        f"<h2>{escape(w.name)}, {escape(w.country)}</h2>\n"
        f"<p>{format_long_date(today)}</p>\n"
        f'<p class="temp">{format_temperature(w.temp)}</p>\n'
        f'<p class="description">{description}</p>\n'
        f'<img src="{icon_path(w.condition.icon)}" alt="{description}" width="100" height="100">\n'
        "<ul>\n"
        f"<li>Feels like: {format_temperature(w.feels_like)}</li>\n"
        f"<li>Humidity: {w.humidity}%</li>\n"
        f"<li>Pressure: {w.pressure} hPa</li>\n"
        f"<li>Wind: {wind_kmh(w.wind_speed)} km/h</li>\n"
        "</ul>\n"
        "</section>\n"
    )


def _forecast_html(entries: list[DailyForecastEntry], tz: tzinfo | None) -> str:
    cards = []
    for entry in entries:
        s = entry.sample
        description = escape(s.condition.description)
        cards.append(
            '<div class="day">\n'
            f"<p><strong>{format_day(s.dt, tz)}</strong></p>\n"
            f'<img src="{icon_path(s.condition.icon)}" alt="{description}" width="50" height="50">\n'
            f'<p>{format_temperature(s.temp)}</p>\n'
            f'<p class="description">{description}</p>\n'
            f"<p>Humidity: {s.humidity}%</p>\n"
            "</div>\n"
        )
    return '<section>\n<h3>5-Day Forecast</h3>\n<div class="days">\n' + "".join(cards) + "</div>\n</section>\n"
