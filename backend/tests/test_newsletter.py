"""
Tests for newsletter subscribers, campaigns and delivery
"""
import json

import httpx
import pytest

from folio.core.errors import FunctionError, ValidationError
from folio.models import NewsletterCampaign, NewsletterSubscriber
from folio.services.newsletter_service import (NewsletterSender,
                                               NewsletterService)


def _campaign(db, status="draft"):
    campaign = NewsletterCampaign(subject="Hello", content="<p>Hi</p>", status=status)
    db.add(campaign)
    db.commit()
    return campaign


def _subscribers(db, *emails, status="active"):
    for email in emails:
        db.add(NewsletterSubscriber(email=email, status=status))
    db.commit()


def test_subscribe_normalizes_email(db):
    subscriber = NewsletterService(db).create_subscriber("  Ada@Example.COM ", "Ada")
    assert subscriber.email == "ada@example.com"
    assert subscriber.status == "active"


def test_subscribe_rejects_invalid_email(db):
    with pytest.raises(ValidationError):
        NewsletterService(db).create_subscriber("not-an-email")


def test_unsubscribe_stamps_time(db):
    service = NewsletterService(db)
    subscriber = service.create_subscriber("a@example.com")
    updated = service.update_subscriber_status(subscriber.id, "unsubscribed")
    assert updated.unsubscribed_at is not None
    with pytest.raises(ValidationError):
        service.update_subscriber_status(subscriber.id, "paused")


@pytest.mark.asyncio
async def test_send_counts_partial_failures(db, test_settings):
    _subscribers(db, "a@example.com", "b@example.com", "fail@example.com")
    _subscribers(db, "gone@example.com", status="unsubscribed")
    campaign = _campaign(db)
    recipients = []

    def handler(request: httpx.Request):
        body = json.loads(request.content)
        recipients.append(body["to"][0])
        assert request.headers["Authorization"] == "Bearer re_test_key"
        if body["to"] == ["fail@example.com"]:
            return httpx.Response(422, json={"message": "invalid"})
        return httpx.Response(200, json={"id": "email_1"})

    sender = NewsletterSender(db, settings=test_settings, transport=httpx.MockTransport(handler))
    result = await sender.send(str(campaign.id))

    assert result == {"success": True, "sent": 2, "total": 3}
    assert "gone@example.com" not in recipients
    db.refresh(campaign)
    assert campaign.status == "sent"
    assert campaign.recipient_count == 2
    assert campaign.sent_at is not None


@pytest.mark.asyncio
async def test_send_without_subscribers_fails_campaign(db, test_settings):
    campaign = _campaign(db)
    sender = NewsletterSender(db, settings=test_settings)
    with pytest.raises(FunctionError, match="No active subscribers found"):
        await sender.send(str(campaign.id))
    db.refresh(campaign)
    assert campaign.status == "failed"


@pytest.mark.asyncio
async def test_send_rejects_sent_campaign(db, test_settings):
    campaign = _campaign(db, status="sent")
    with pytest.raises(FunctionError, match="already been sent"):
        await NewsletterSender(db, settings=test_settings).send(str(campaign.id))


@pytest.mark.asyncio
async def test_send_requires_key_and_campaign(db, test_settings):
    with pytest.raises(FunctionError, match="RESEND_API_KEY"):
        await NewsletterSender(db, settings=test_settings.model_copy(update={"resend_api_key": None})).send("x")
    with pytest.raises(FunctionError, match="Campaign ID is required"):
        await NewsletterSender(db, settings=test_settings).send(None)
    with pytest.raises(FunctionError, match="Campaign not found"):
        await NewsletterSender(db, settings=test_settings).send("00000000-0000-0000-0000-000000000000")


def test_send_function_error_body(client):
    response = client.post("/functions/v1/send-newsletter", json={"campaignId": "abc"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "RESEND_API_KEY is not configured"}


def test_public_subscribe_and_admin_listing(client):
    response = client.post("/api/newsletter/subscribers", json={"email": "reader@example.com"})
    assert response.status_code == 201
    listing = client.get("/api/newsletter/subscribers").json()
    assert [s["email"] for s in listing] == ["reader@example.com"]


def test_campaign_crud(client):
    created = client.post("/api/newsletter/campaigns", json={"subject": "Issue 1"}).json()
    assert created["status"] == "draft"
    updated = client.patch(f"/api/newsletter/campaigns/{created['id']}", json={"content": "Body"}).json()
    assert updated["content"] == "Body"
    assert client.delete(f"/api/newsletter/campaigns/{created['id']}").status_code == 204
    assert client.get(f"/api/newsletter/campaigns/{created['id']}").status_code == 404


def test_duplicate_subscriber_is_a_client_error(client, db):
    assert client.post("/api/newsletter/subscribers", json={"email": "reader@example.com"}).status_code == 201
    response = client.post("/api/newsletter/subscribers", json={"email": " Reader@Example.com"})
    assert response.status_code == 400
    assert response.json() == {"detail": "This email is already subscribed"}
    assert db.query(NewsletterSubscriber).count() == 1
