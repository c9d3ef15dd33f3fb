"""
Tests for the signal-ingest function
"""
import pytest

from folio.core.errors import UnauthorizedError
from folio.models import AgentTask
from folio.services.module_service import ModuleService
from folio.services.signal_ingest import extract_bearer_token

URL = "/functions/v1/signal-ingest"


@pytest.fixture
def token(db):
    ModuleService(db).upsert("api_tokens", {"signal_ingest_token": "sig-123"})
    return "sig-123"


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    with pytest.raises(UnauthorizedError, match="Missing token"):
        extract_bearer_token(None)
    with pytest.raises(UnauthorizedError, match="Missing token"):
        extract_bearer_token("Basic abc")
    with pytest.raises(UnauthorizedError, match="Empty token"):
        extract_bearer_token("Bearer    ")


def test_non_post_is_405(client):
    response = client.get(URL)
    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_missing_token_is_401(client, token):
    response = client.post(URL, json={"url": "https://example.com"})
    assert response.status_code == 401
    assert response.json()["error"] == "Missing token"


def test_wrong_token_is_401(client, db, token):
    response = client.post(URL, json={"url": "https://example.com"}, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid token"
    assert db.query(AgentTask).count() == 0


def test_unconfigured_token_is_401(client):
    response = client.post(URL, json={"url": "https://example.com"}, headers={"Authorization": "Bearer x"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_bad_token_checked_before_body(client, token):
    response = client.post(URL, content="not json", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_valid_signal_creates_pending_task(client, db, token):
    response = client.post(
        URL,
        json={"url": "https://example.com/post", "title": "  A post  ", "note": "read later"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True

    task = db.query(AgentTask).one()
    assert str(task.id) == body["id"]
    assert task.task_type == "signal"
    assert task.status == "pending"
    assert task.input_data["title"] == "A post"
    assert task.input_data["source_type"] == "web"


def test_fields_are_truncated(client, db, token):
    client.post(
        URL,
        json={"content": "x" * 20000, "title": "t" * 900},
        headers={"Authorization": f"Bearer {token}"},
    )
    task = db.query(AgentTask).one()
    assert len(task.input_data["content"]) == 10000
    assert len(task.input_data["title"]) == 500


def test_url_or_content_required(client, token):
    response = client.post(URL, json={"title": "nothing"}, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 400
    assert response.json()["error"] == "Either url or content is required"


def test_token_config_read_once_per_call(client, db, token, monkeypatch):
    calls = []
    original = ModuleService.get_config

    def counting_get_config(self, module_type):
        calls.append(module_type)
        return original(self, module_type)

    monkeypatch.setattr(ModuleService, "get_config", counting_get_config)
    response = client.post(URL, json={"url": "https://example.com"}, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert calls == ["api_tokens"]
