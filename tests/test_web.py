# ABOUTME: Tests for the Starlette web app routes.
# ABOUTME: Drives the search form and geolocation callback through TestClient with a mocked HTTP client.

from unittest.mock import patch

import pytest
from owm_payloads import response
from starlette.datastructures import FormData
from starlette.testclient import TestClient

from weather_app.config import Settings
from weather_app.models import Coordinates, FailureReason, GeolocationError
from weather_app.state import StoreRegistry
from weather_app.web import create_app, parse_position

SETTINGS = Settings(session_secret="test-secret")


@pytest.fixture
def app(deps):
    return create_app(deps=deps, settings=SETTINGS, stores=StoreRegistry())


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestParsePosition:
    def test_coordinates(self):
        assert parse_position(FormData({"latitude": "51.5", "longitude": "-0.12"})) == Coordinates(
            latitude=51.5, longitude=-0.12
        )

    def test_unsupported(self):
        assert parse_position(FormData({"error": "unsupported"})) == GeolocationError(
            reason=FailureReason.GEOLOCATION_UNSUPPORTED
        )

    def test_denied(self):
        assert parse_position(FormData({"error": "denied"})).reason == FailureReason.GEOLOCATION_DENIED

    def test_garbage_is_denied(self):
        """Unparseable or out-of-range coordinates are treated as a denied geolocation.

        Implementation: Posts non-numeric and out-of-range values.
        Passing implies: Bad client input never reaches the provider.
        """
        assert isinstance(parse_position(FormData({"latitude": "north", "longitude": "1"})), GeolocationError)
        assert isinstance(parse_position(FormData({"latitude": "100", "longitude": "1"})), GeolocationError)
        assert isinstance(parse_position(FormData({})), GeolocationError)


class TestRoutes:
    def test_index_renders_empty_page(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Weather Forecast" in resp.text
        assert "Use My Location" in resp.text

    def test_search_redirects_to_rendered_result(self, client, mock_client, current_payload, forecast_payload):
        """Submitting the search form fetches weather and shows it after the redirect.

        Implementation: Posts the form and follows the 303 back to the page.
        Passing implies: The form, controller, store and page are wired together.
        """
        mock_client.get.side_effect = [response(current_payload), response(forecast_payload)]

        resp = client.post("/search", data={"location": "London"})

        assert resp.status_code == 200
        assert resp.history[0].status_code == 303
        assert "London, GB" in resp.text
        assert "5-Day Forecast" in resp.text
        assert 'value="London"' in resp.text

    def test_search_not_found_shows_error(self, client, mock_client):
        mock_client.get.return_value = response({"cod": "404"}, status_code=404)

        resp = client.post("/search", data={"location": "Xyzzyville"})

        assert "Location not found. Please try another search term." in resp.text
        assert "Loading..." not in resp.text

    def test_malformed_forecast_shows_error(self, client, mock_client, current_payload, forecast_payload):
        """A forecast slot with an unparseable day-stamp is shown as an error, not a server error.

        Implementation: Returns good current conditions and a forecast whose first slot says "tomorrow".
        Passing implies: Bad provider data cannot break rendering of the page.
        """
        forecast_payload["list"][0]["dt_txt"] = "tomorrow"
        mock_client.get.side_effect = [response(current_payload), response(forecast_payload)]

        resp = client.post("/search", data={"location": "London"})

        assert resp.status_code == 200
        assert "London, GB" in resp.text
        assert 'class="error"' in resp.text
        assert "5-Day Forecast" not in resp.text
        assert "Loading..." not in resp.text

    def test_locate_with_coordinates(self, client, mock_client, current_payload, forecast_payload):
        mock_client.get.side_effect = [response(current_payload), response(forecast_payload)]

        resp = client.post("/locate", data={"latitude": "51.5", "longitude": "-0.12"})

        assert resp.status_code == 200
        assert 'value="London"' in resp.text
        assert mock_client.get.call_args_list[0].kwargs["params"]["lat"] == 51.5

    def test_locate_denied(self, client, mock_client):
        resp = client.post("/locate", data={"error": "denied"})

        mock_client.get.assert_not_called()
        assert "Unable to retrieve your location." in resp.text

    def test_icons_are_served(self, client):
        resp = client.get("/weather-icons/clear-day.svg")
        assert resp.status_code == 200
        assert "svg" in resp.headers["content-type"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestClientIsolation:
    def test_search_is_not_visible_to_other_clients(self, app, mock_client, current_payload, forecast_payload):
        """Each browser session has its own view state.

        Implementation: Two TestClients with separate cookie jars share one app; only alice searches.
        Passing implies: One visitor's location and results never appear on another visitor's page.
        """
        mock_client.get.side_effect = [response(current_payload), response(forecast_payload)]
        alice = TestClient(app)
        bob = TestClient(app)

        alice_page = alice.post("/search", data={"location": "London"})
        bob_page = bob.get("/")

        assert "London, GB" in alice_page.text
        assert "London, GB" not in bob_page.text
        assert 'value="London"' not in bob_page.text

    def test_session_keeps_state_between_requests(self, app, mock_client, current_payload, forecast_payload):
        mock_client.get.side_effect = [response(current_payload), response(forecast_payload)]
        alice = TestClient(app)

        alice.post("/search", data={"location": "London"})

        assert "London, GB" in alice.get("/").text


class TestLifespan:
    def test_injected_client_is_left_open(self, app, mock_client):
        """The app does not close an HTTP client it was handed.

        Implementation: Runs startup and shutdown with injected deps.
        Passing implies: Callers sharing their client can keep using it after the app stops.
        """
        with TestClient(app):
            pass

        mock_client.aclose.assert_not_awaited()

    def test_own_client_is_closed(self, deps, mock_client):
        with patch("weather_app.web.create_deps", return_value=deps):
            app = create_app(settings=SETTINGS)

        with TestClient(app):
            pass

        mock_client.aclose.assert_awaited_once()
