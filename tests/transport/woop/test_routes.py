"""
Woop Route Tests

End-to-end through FastAPI: query string + body → status code, empty body.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from main import app

SUFFIX = "abc123.viam.cloud"


@pytest.fixture
def client(dispatcher):
    with patch("webhook.routes.get_dispatcher", return_value=dispatcher):
        yield TestClient(app)


class TestRelayRoute:
    """Test the single relay route."""

    def test_query_variant_get(self, client, backend):
        response = client.get("/?woop=3&secret=xyz&strobe=off&buzzer=on")

        assert response.status_code == 200
        assert response.content == b""
        assert backend.connect_attempts == [f"woopwoop3-main.{SUFFIX}"]
        assert backend.pin_state["12"].high is False
        assert backend.pin_state["14"].high is True

    def test_wrong_secret_401(self, client, backend):
        response = client.get("/?woop=3&secret=nope&strobe=on")

        assert response.status_code == 401
        assert response.content == b""
        assert backend.connect_attempts == []

    def test_lighting_post(self, client, backend):
        response = client.post(
            "/?v=3&secret=xyz",
            json={"red": {"freq": 500, "duty": 0.5}},
        )

        assert response.status_code == 200
        assert backend.pin_state["19"].pwm_frequency == 500
        assert backend.pin_state["19"].pwm_duty == 0.5
        assert backend.written_pins() == {"19"}

    def test_alert_post(self, client, backend):
        response = client.post(
            "/",
            json={"incident": {"summary": "x", "state": "OPEN"}},
        )

        assert response.status_code == 200
        assert backend.pin_state["12"].high is True

    def test_alert_bad_json(self, client):
        response = client.post("/", content=b"not json")

        assert response.status_code == 400

    @pytest.mark.parametrize("method", ["put", "patch", "delete"])
    def test_method_agnostic(self, client, backend, method):
        response = client.request(method.upper(), "/?woop=1&secret=xyz&buzzer=on")

        assert response.status_code == 200
        assert backend.pin_state["14"].high is True

    @pytest.mark.parametrize("method", ["HEAD", "OPTIONS"])
    def test_head_and_options_relay(self, client, backend, method):
        response = client.request(method, "/?woop=1&secret=xyz&strobe=on")

        assert response.status_code == 200
        assert backend.pin_state["12"].high is True

    def test_infinite_freq_422(self, client, backend):
        response = client.post(
            "/?v=3&secret=xyz",
            content=b'{"red": {"freq": Infinity, "duty": 0.5}}',
        )

        assert response.status_code == 422
        assert response.content == b""
        assert backend.connect_attempts == []

    def test_unreachable_machine_404(self, client, backend):
        backend.fail_connects = 100

        response = client.get("/?woop=9&secret=xyz")

        assert response.status_code == 404


class TestHealth:

    def test_live(self):
        client = TestClient(app)

        assert client.get("/health/live").json() == {"status": "alive"}

    def test_ready(self, dispatcher):
        with patch("main.get_dispatcher", return_value=dispatcher):
            response = TestClient(app).get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_lists_missing(self, backend):
        from config import WebhookConfig
        from webhook.dispatcher import RequestDispatcher

        unconfigured = RequestDispatcher(WebhookConfig(device_backend="stub"), backend)
        with patch("main.get_dispatcher", return_value=unconfigured):
            response = TestClient(app).get("/health/ready")

        assert response.status_code == 503
        assert response.json()["missing"] == ["api_key", "api_key_id", "uri_suffix", "secret"]

    def test_config_info_hides_secrets(self, dispatcher):
        with patch("main.get_dispatcher", return_value=dispatcher):
            body = TestClient(app).get("/config/info").json()

        assert body["uri_suffix"] == SUFFIX
        assert "secret" not in body
        assert "api_key" not in body
