"""
API tests for blog posts, modules, agent tasks and the chat widget
"""
import json

import httpx

from folio.api.routes.chat import get_chat_transport
from folio.models import AgentTask


def test_blog_publish_flow(client):
    created = client.post("/api/blog", json={"title": "Hello, World!", "content": "# Hi"}).json()
    assert created["slug"] == "hello-world"
    assert created["status"] == "draft"
    assert created["published_at"] is None

    assert client.get("/api/blog/hello-world").status_code == 404
    assert client.get("/api/blog").json() == []
    assert len(client.get("/api/blog?include_drafts=true").json()) == 1

    published = client.patch(f"/api/blog/{created['id']}", json={"status": "published"}).json()
    assert published["published_at"] is not None
    assert client.get("/api/blog/hello-world").json()["content"] == "# Hi"


def test_blog_invalid_status(client):
    response = client.post("/api/blog", json={"title": "x", "status": "archived"})
    assert response.status_code == 400


def test_module_save_and_merge(client):
    saved = client.put("/api/modules/ai", json={"module_config": {"active_integration": "n8n"}}).json()
    assert saved["module_config"] == {"active_integration": "n8n"}

    merged = client.put("/api/modules/ai", json={
        "module_config": {"system_prompt": "Be brief"}, "merge": True, "enabled": False,
    }).json()
    assert merged["module_config"] == {"active_integration": "n8n", "system_prompt": "Be brief"}
    assert merged["enabled"] is False

    assert client.get("/api/modules/missing").status_code == 404


def test_agent_task_review(client, db):
    db.add_all([
        AgentTask(task_type="signal", status="pending", input_data={"url": "https://a.com"}),
        AgentTask(task_type="blog_draft", status="needs_review"),
    ])
    db.commit()

    pending = client.get("/api/agent-tasks?status=needs_review").json()
    assert [t["task_type"] for t in pending] == ["blog_draft"]

    task_id = pending[0]["id"]
    assert client.patch(f"/api/agent-tasks/{task_id}", json={"status": "completed"}).json()["status"] == "completed"
    assert client.patch(f"/api/agent-tasks/{task_id}", json={"status": "done"}).status_code == 400


def test_chat_settings_defaults_then_upsert(client):
    assert client.get("/api/chat-settings").json()["show_quick_actions"] is True
    client.put("/api/chat-settings", json={"webhook_url": "https://hooks.example/chat"})
    client.put("/api/chat-settings", json={"initial_placeholder": "Ask me anything"})
    settings = client.get("/api/chat-settings").json()
    assert settings["webhook_url"] == "https://hooks.example/chat"
    assert settings["initial_placeholder"] == "Ask me anything"


def test_chat_config_lists_quick_actions(client):
    client.post("/api/quick-actions", json={"label": "Projects", "message": "Show me your projects"})
    config = client.get("/api/chat/config").json()
    assert [a["label"] for a in config["quick_actions"]] == ["Projects"]

    client.put("/api/chat-settings", json={"show_quick_actions": False})
    assert client.get("/api/chat/config").json()["quick_actions"] == []


def test_chat_message_through_webhook(client):
    from folio.main import app

    client.put("/api/modules/ai", json={"module_config": {"active_integration": "n8n"}})
    client.put("/api/chat-settings", json={"webhook_url": "https://hooks.example/chat"})
    client.post("/api/pages", json={"slug": "home", "title": "Home"})
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"output": "Hi from n8n"}])

    app.dependency_overrides[get_chat_transport] = lambda: httpx.MockTransport(handler)
    response = client.post("/api/chat", json={"message": "Hello", "sessionId": "session_1_abc"})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert body["sessionId"] == "session_1_abc"
    assert [m["text"] for m in body["messages"]] == ["Hello", "Hi from n8n"]
    assert seen["url"] == "https://hooks.example/chat"
    assert seen["body"]["siteContext"]["pages"][0]["slug"] == "home"


def test_chat_error_returned_in_body(client):
    client.put("/api/modules/ai", json={"module_config": {"active_integration": "n8n"}})
    response = client.post("/api/chat", json={"message": "Hello"})
    body = response.json()
    assert response.status_code == 200
    assert body["error"] == "Webhook URL is not configured"
    assert body["messages"][-1]["isUser"] is False
    assert body["sessionId"].startswith("session_")


def test_chat_without_ai_module_uses_webhook(client):
    from folio.main import app

    client.put("/api/chat-settings", json={"webhook_url": "https://hooks.example/chat"})
    seen = {}

    def handler(request: httpx.Request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"output": "Webhook reply"})

    app.dependency_overrides[get_chat_transport] = lambda: httpx.MockTransport(handler)
    body = client.post("/api/chat", json={"message": "Hello", "sessionId": "session_2_xyz"}).json()

    assert body["error"] is None
    assert body["messages"][-1]["text"] == "Webhook reply"
    assert seen["body"]["message"] == "Hello"
    assert seen["body"]["sessionId"] == "session_2_xyz"
