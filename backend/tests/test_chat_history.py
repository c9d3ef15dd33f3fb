"""
Tests for stored chat transcripts
"""
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from folio.api.routes.chat import get_chat_transport
from folio.core.errors import ValidationError
from folio.models import ChatHistoryMessage
from folio.services.chat_history import ChatHistoryService


def _message(db, session_id, role, content, minutes_ago):
    db.add(ChatHistoryMessage(
        session_id=session_id,
        role=role,
        content=content,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    ))


def test_sessions_sorted_by_last_activity(db):
    _message(db, "s1", "user", "x" * 150, 30)
    _message(db, "s1", "assistant", "Hi", 29)
    _message(db, "s2", "assistant", "Welcome", 10)
    _message(db, "s3", "user", "Second question", 5)
    _message(db, "s3", "user", "Third question", 4)
    db.commit()

    result = ChatHistoryService(db).list_sessions()

    assert result["total"] == 3
    sessions = result["sessions"]
    assert [s["session_id"] for s in sessions] == ["s3", "s2", "s1"]
    assert sessions[0]["first_message"] == "Second question"
    assert sessions[0]["message_count"] == 2
    assert sessions[1]["first_message"] == "No message"
    assert sessions[2]["first_message"] == "x" * 100


def test_sessions_paginate(db):
    for index in range(3):
        _message(db, f"s{index}", "user", "Hello", 10 - index)
    db.commit()

    page = ChatHistoryService(db).list_sessions(limit=2, offset=1)
    assert page["total"] == 3
    assert [s["session_id"] for s in page["sessions"]] == ["s1", "s0"]


def test_session_messages_oldest_first(db):
    _message(db, "s1", "assistant", "Reply", 1)
    _message(db, "s1", "user", "Question", 2)
    _message(db, "other", "user", "Elsewhere", 3)
    db.commit()

    messages = ChatHistoryService(db).session_messages("s1")
    assert [m.content for m in messages] == ["Question", "Reply"]


def test_delete_older_than(db):
    _message(db, "old", "user", "Ancient", 60 * 24 * 100)
    _message(db, "new", "user", "Recent", 5)
    db.commit()

    service = ChatHistoryService(db)
    assert service.delete_older_than(90) == 1
    assert [m.content for m in db.query(ChatHistoryMessage).all()] == ["Recent"]
    with pytest.raises(ValidationError):
        service.delete_older_than(0)


def test_save_failure_is_not_raised(db, monkeypatch):
    service = ChatHistoryService(db)
    with pytest.raises(ValidationError):
        service.save_message("s1", "system", "nope")

    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", broken_commit)
    assert service.save_message("s1", "user", "Hello") is None


def test_chat_route_stores_transcript(client):
    from folio.main import app

    client.put("/api/chat-settings", json={"webhook_url": "https://hooks.example/chat"})

    def handler(request: httpx.Request):
        assert json.loads(request.content)["message"] == "Hello"
        return httpx.Response(200, json={"output": "Hi there"})

    app.dependency_overrides[get_chat_transport] = lambda: httpx.MockTransport(handler)
    client.post("/api/chat", json={"message": "Hello", "sessionId": "session_1_abc"})

    sessions = client.get("/api/chat/sessions").json()
    assert sessions["total"] == 1
    assert sessions["sessions"][0]["first_message"] == "Hello"

    stored = client.get("/api/chat/sessions/session_1_abc/messages").json()
    assert [(m["role"], m["content"]) for m in stored] == [("user", "Hello"), ("assistant", "Hi there")]


def test_failed_chat_stores_only_the_question(client):
    client.post("/api/chat", json={"message": "Anyone?", "sessionId": "session_9_zzz"})

    stored = client.get("/api/chat/sessions/session_9_zzz/messages").json()
    assert [m["role"] for m in stored] == ["user"]
    assert client.delete("/api/chat/history?days=1").json() == {"deleted": 0}
