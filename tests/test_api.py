"""REST API tests using FastAPI's TestClient with a fake remote client."""

import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

import api
from config import APP_PASSWORD, APP_USERNAME

from tests.conftest import FakeServiceClient

AUTH = (APP_USERNAME, APP_PASSWORD)


@pytest.fixture
def fake_remote(dormant_checks, compliance_checks):
    return FakeServiceClient(dormant_checks, compliance_checks)


@pytest.fixture
def client(fake_remote):
    api.app.dependency_overrides[api.get_service_client] = lambda: fake_remote
    with TestClient(api.app) as test_client:
        yield test_client
    api.app.dependency_overrides.clear()
    api.SESSIONS.clear()
    api.SESSION_EXPIRY.clear()


@pytest.fixture
def session_id(client):
    response = client.post("/sessions", params={"load_options": True}, auth=AUTH)
    assert response.status_code == 200
    return response.json()["session_id"]


class TestRoot:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "/sessions" in response.json()["endpoints"]

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["active_sessions"] == 0


class TestSessions:

    def test_bad_credentials(self, client):
        response = client.post("/sessions", auth=("intruder", "guess"))
        assert response.status_code == 401

    def test_create_without_loading(self, client):
        response = client.post("/sessions", auth=AUTH)
        data = response.json()

        assert data["config"]["llm"]["provider"] == ""
        assert data["expires_in"] == "4.0 hours"

    def test_create_with_options(self, client, session_id):
        config = client.get(f"/sessions/{session_id}/config", auth=AUTH).json()

        assert config["llm"]["model_name"] == "gpt-4"
        assert sorted(config["analysis"]["selected_dormant_check_ids"]) == ["a", "all", "b"]

    def test_unknown_session(self, client):
        response = client.get("/sessions/missing/config", auth=AUTH)
        assert response.status_code == 404

    def test_delete_session(self, client, session_id):
        assert client.delete(f"/sessions/{session_id}", auth=AUTH).json()["status"] == "deleted"
        assert client.get(f"/sessions/{session_id}/config", auth=AUTH).status_code == 404

    def test_expired_session_is_dropped(self, client, session_id):
        api.SESSION_EXPIRY[session_id] = 0
        assert client.get(f"/sessions/{session_id}/config", auth=AUTH).status_code == 404


class TestConfigEndpoints:

    def test_patch_cascades_provider(self, client, session_id):
        response = client.patch(f"/sessions/{session_id}/config/llm", json={"provider": "anthropic"}, auth=AUTH)

        assert response.status_code == 200
        assert response.json()["model_name"] == "claude-3"

    def test_patch_model_outside_provider_options(self, client, session_id):
        response = client.patch(f"/sessions/{session_id}/config/llm", json={"model_name": "claude-3"}, auth=AUTH)

        assert response.status_code == 200
        assert response.json()["provider"] == "openai"
        assert response.json()["model_name"] == "gpt-4"

    def test_patch_unknown_field(self, client, session_id):
        response = client.patch(f"/sessions/{session_id}/config/llm", json={"colour": "blue"}, auth=AUTH)
        assert response.status_code == 422

    def test_patch_wrong_type(self, client, session_id):
        response = client.patch(f"/sessions/{session_id}/config/database", json={"save_connection": "maybe"}, auth=AUTH)
        assert response.status_code == 422

    def test_unknown_group(self, client, session_id):
        assert client.get(f"/sessions/{session_id}/config/payroll", auth=AUTH).status_code == 422

    def test_reset_group(self, client, session_id):
        client.patch(f"/sessions/{session_id}/config/llm", json={"prompt": "hello"}, auth=AUTH)

        data = client.post(f"/sessions/{session_id}/config/llm/reset", auth=AUTH).json()

        assert data["prompt"] == "what is compliance"
        assert data["model_name"] == "gpt-4"

    def test_options(self, client, session_id):
        data = client.get(f"/sessions/{session_id}/options", auth=AUTH).json()

        assert data["database_engines"] == ["azure_sql", "postgresql"]
        assert data["llm_providers"] == ["openai", "anthropic"]
        assert data["llm_model_options"] == ["gpt-4", "gpt-3.5"]
        assert [check["id"] for check in data["dormant_checks"]] == ["a", "b", "all"]
        assert data["errors"]["databases"] is None

    def test_toggle_check(self, client, session_id):
        response = client.post(
            f"/sessions/{session_id}/checks/toggle",
            json={"check_id": "a", "checked": False, "kind": "dormant"},
            auth=AUTH,
        )
        assert response.json() == {"kind": "dormant", "selected": ["b"]}


class TestSubmitEndpoints:

    def test_validation_failure(self, client, session_id):
        response = client.post(f"/sessions/{session_id}/submit/save_connection", auth=AUTH)

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "connection_name"

    def test_success(self, client, session_id, fake_remote):
        client.patch(f"/sessions/{session_id}/config/llm", json={"provider": "anthropic"}, auth=AUTH)

        response = client.post(f"/sessions/{session_id}/submit/enable_llm", auth=AUTH)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert fake_remote.submitted[-1].body["model_type"] == "anthropic"

    def test_remote_failure(self, client, session_id, fake_remote):
        from common.errors import SubmissionError

        fake_remote.submit_error = SubmissionError("apply_selections", "Error saving analysis modes: down")

        response = client.post(f"/sessions/{session_id}/submit/apply_selections", auth=AUTH)

        assert response.status_code == 502
        assert response.json()["detail"] == "Error saving analysis modes: down"

    def test_unknown_operation(self, client, session_id):
        assert client.post(f"/sessions/{session_id}/submit/drop_tables", auth=AUTH).status_code == 422

    def test_knowledge_upload(self, client, session_id, fake_remote):
        response = client.post(
            f"/sessions/{session_id}/knowledge/upload",
            files={"file": ("policy.txt", b"retention policy", "text/plain")},
            auth=AUTH,
        )

        assert response.status_code == 200
        request = fake_remote.submitted[-1]
        assert request.operation == "upload_knowledge"
        assert request.files["file"] == ("policy.txt", b"retention policy")
