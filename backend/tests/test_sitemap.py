"""
Tests for the dynamic XML sitemap
"""
import xml.etree.ElementTree as ET
from datetime import date, datetime, timezone

from sqlalchemy.exc import OperationalError

from folio.models import BlogPost, Page
from folio.services import sitemap

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def _urls(xml: str):
    root = ET.fromstring(xml)
    return [
        {child.tag.split("}")[1]: child.text for child in url}
        for url in root.findall("sm:url", NS)
    ]


def _seed(db):
    db.add_all([
        Page(slug="home", title="Home", is_main_landing=True,
             updated_at=datetime(2026, 3, 1, tzinfo=timezone.utc)),
        Page(slug="about", title="About", updated_at=datetime(2026, 2, 1, tzinfo=timezone.utc)),
        Page(slug="hidden", title="Hidden", enabled=False),
        BlogPost(title="Old", slug="old", status="published",
                 published_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
                 updated_at=datetime(2026, 1, 6, tzinfo=timezone.utc)),
        BlogPost(title="New", slug="new", status="published",
                 published_at=datetime(2026, 4, 2, tzinfo=timezone.utc),
                 updated_at=datetime(2026, 4, 3, tzinfo=timezone.utc)),
        BlogPost(title="Draft", slug="draft", status="draft"),
    ])
    db.commit()


def test_sitemap_lists_pages_and_published_posts(db, test_settings):
    _seed(db)
    urls = _urls(sitemap.render_sitemap(db, test_settings))

    assert [u["loc"] for u in urls] == [
        "https://folio.example/",
        "https://folio.example/about",
        "https://folio.example/blog",
        "https://folio.example/blog/new",
        "https://folio.example/blog/old",
    ]
    assert urls[0] == {
        "loc": "https://folio.example/", "lastmod": "2026-03-01", "changefreq": "weekly", "priority": "1.0",
    }
    assert (urls[1]["changefreq"], urls[1]["priority"]) == ("monthly", "0.8")
    assert urls[2]["lastmod"] == "2026-04-02"
    assert (urls[3]["lastmod"], urls[3]["priority"]) == ("2026-04-03", "0.6")


def test_empty_site_still_has_homepage_and_blog(db, test_settings):
    urls = _urls(sitemap.render_sitemap(db, test_settings))
    assert [u["loc"] for u in urls] == ["https://folio.example/", "https://folio.example/blog"]
    assert urls[0]["lastmod"] == date.today().isoformat()
    assert "lastmod" not in urls[1]


def test_database_failure_returns_homepage_only(db, test_settings, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("no such table"))

    monkeypatch.setattr(db, "query", broken_query)
    urls = _urls(sitemap.render_sitemap(db, test_settings))
    assert [u["loc"] for u in urls] == ["https://folio.example/"]


def test_sitemap_function_headers(client, db):
    _seed(db)
    response = client.get("/functions/v1/sitemap-dynamic")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert "<loc>" in response.text
