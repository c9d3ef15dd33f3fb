"""
Tests for visitor analytics
"""
from folio.services.analytics_service import AnalyticsService, slug_to_title


def test_slug_to_title():
    assert slug_to_title("my-cool-project") == "My Cool Project"


def test_summary_splits_pages_and_projects(db):
    service = AnalyticsService(db)
    service.track_page_view("home", visitor_id="v1")
    service.track_page_view("home", visitor_id="v2")
    service.track_page_view("blog", visitor_id="v1")
    service.track_page_view("project/folio-cms", visitor_id="v1")

    chat = service.start_chat_session("v1")
    service.update_chat_session(chat.id, 4)
    service.start_chat_session("v2")

    summary = service.summary(30)
    assert summary["totalPageViews"] == 4
    assert summary["uniqueVisitors"] == 2
    assert summary["totalProjectViews"] == 1
    assert summary["topPages"][0] == {"page_slug": "home", "count": 2}
    assert summary["topProjects"] == [{"project_id": "folio-cms", "title": "Folio Cms", "count": 1}]
    assert summary["totalChatSessions"] == 2
    assert summary["totalChatMessages"] == 4
    assert sum(day["views"] for day in summary["viewsByDay"]) == 4


def test_tracking_routes(client):
    response = client.post(
        "/api/analytics/page-views",
        json={"page_slug": "home", "visitor_id": "v1"},
        headers={"User-Agent": "pytest-agent"},
    )
    assert response.status_code == 201

    session = client.post("/api/analytics/chat-sessions", json={"visitor_id": "v1"}).json()
    updated = client.patch(f"/api/analytics/chat-sessions/{session['id']}", json={"message_count": 3}).json()
    assert updated["message_count"] == 3
    assert updated["session_end"] is not None

    summary = client.get("/api/analytics/summary?days=7").json()
    assert summary["totalPageViews"] == 1


def test_unknown_chat_session_is_404(client):
    response = client.patch(
        "/api/analytics/chat-sessions/00000000-0000-0000-0000-000000000000",
        json={"message_count": 1},
    )
    assert response.status_code == 404
