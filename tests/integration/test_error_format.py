"""Integration tests for standardized error responses."""

import pytest

pytestmark = pytest.mark.integration

BOARD_URL = "/api/v1/registro-contabilidad/compra/"


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get(BOARD_URL)
        assert response.status_code == 401
        data = response.json()
        assert data["type"] == "client_error"
        assert isinstance(data["errors"], list)
        assert data["errors"]
        assert data["errors"][0]["code"] == "not_authenticated"
        assert "detail" in data["errors"][0]
        assert data["errors"][0]["attr"] is None

    def test_filter_validation_error_names_the_field(self, auth_client, use_fake_repositories):
        response = auth_client.get(BOARD_URL, {"fecha": "15/03/2024"})
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert data["errors"][0]["attr"] == "fecha"
        assert data["errors"][0]["code"] == "invalid"

    def test_malformed_json_body(self, auth_client, use_fake_repositories):
        response = auth_client.post(
            f"{BOARD_URL}1/aprobar/", data="{", content_type="application/json"
        )
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "client_error"
        assert data["errors"][0]["code"] == "parse_error"

    def test_forbidden_action_has_standard_format(self, auth_client, use_fake_repositories):
        response = auth_client.post(f"{BOARD_URL}1/transferir/", {"confirmado": True}, format="json")
        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "permission_denied"

    def test_invalid_push_event_is_validation_error(self, api_client, settings):
        settings.PUSH_WEBHOOK_TOKEN = "push-secret"
        response = api_client.post(
            "/api/v1/push/", {"event": "x"}, format="json", HTTP_X_PUSH_TOKEN="push-secret"
        )
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"
