"""
Tests for blog categories and category filtering
"""
import uuid

import pytest

from folio.core.errors import ValidationError
from folio.services.blog_service import BlogService


def _category(client, name, **extra):
    response = client.post("/api/blog-categories", json={"name": name, **extra})
    assert response.status_code == 201
    return response.json()


def test_category_slug_and_order(client):
    news = _category(client, "Product News")
    guides = _category(client, "Guides", slug="how-to")
    assert news["slug"] == "product-news"
    assert guides["slug"] == "how-to"
    assert (news["order_index"], guides["order_index"]) == (0, 1)

    duplicate = client.post("/api/blog-categories", json={"name": "Product news"})
    assert duplicate.status_code == 400
    assert client.post("/api/blog-categories", json={"name": "!!!"}).status_code == 422


def test_posts_filtered_by_category(client):
    news = _category(client, "News")
    guides = _category(client, "Guides")
    tagged = client.post("/api/blog", json={
        "title": "Release", "status": "published", "category_ids": [guides["id"], news["id"]],
    }).json()
    client.post("/api/blog", json={"title": "Untagged", "status": "published"})

    assert [c["slug"] for c in tagged["categories"]] == ["news", "guides"]
    assert [p["title"] for p in client.get("/api/blog?category=news").json()] == ["Release"]
    assert client.get("/api/blog?category=missing").json() == []
    assert len(client.get("/api/blog").json()) == 2

    updated = client.patch(f"/api/blog/{tagged['id']}", json={"category_ids": [news["id"]]}).json()
    assert [c["slug"] for c in updated["categories"]] == ["news"]
    assert client.get("/api/blog?category=guides").json() == []


def test_unknown_category_rejected(db):
    with pytest.raises(ValidationError):
        BlogService(db).create({"title": "Post", "category_ids": [uuid.uuid4()]})
