"""
Tests for the Airtable project import and media storage
"""
import httpx
import pytest

from folio.core.errors import FunctionError, ValidationError
from folio.models import Project
from folio.services.airtable_migration import AirtableMigration, pick_field
from folio.services.media_storage import MediaStorage

RECORDS = {
    "records": [
        {
            "id": "rec1",
            "fields": {
                "Title": "Folio",
                "description": "Portfolio CMS",
                "demoLink": "https://folio.example",
                "problem": "Hard to update",
                "image": [{"url": "https://cdn.example/a.png"}, {"url": "https://cdn.example/missing.png"}],
            },
        },
        {"id": "rec2", "fields": {"title": "No description"}},
    ]
}


def _transport():
    def handler(request: httpx.Request):
        if request.url.host == "api.airtable.com":
            assert request.headers["Authorization"] == "Bearer key123"
            return httpx.Response(200, json=RECORDS)
        if request.url.path.endswith("missing.png"):
            return httpx.Response(404)
        return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

    return httpx.MockTransport(handler)


def test_pick_field_variants():
    assert pick_field({"WhyItMatters": "because"}, "why_built") == "because"
    assert pick_field({"title": "", "Title": "T"}, "title") == "T"
    assert pick_field({}, "demo_link") is None


def test_media_storage_save(test_settings, tmp_path):
    storage = MediaStorage(test_settings, root=tmp_path)
    path, url = storage.save("project-images", "a.png", b"data")
    assert (tmp_path / "project-images" / "a.png").read_bytes() == b"data"
    assert (path, url) == ("a.png", "/media/project-images/a.png")

    with pytest.raises(ValidationError, match="already exists"):
        storage.save("project-images", "a.png", b"other")
    with pytest.raises(ValidationError, match="Invalid file name"):
        storage.save("project-images", "../escape.png", b"x")


@pytest.mark.asyncio
async def test_migration_imports_records(db, test_settings, tmp_path):
    db.add(Project(title="Existing", description="x", order_index=4))
    db.commit()
    storage = MediaStorage(test_settings, root=tmp_path)
    migration = AirtableMigration(db, storage=storage, settings=test_settings, transport=_transport())

    result = await migration.run("key123", "app1", "tbl1")

    assert result["success"] is True
    assert result["projectsCreated"] == 1
    assert result["imagesUploaded"] == 1
    assert result["projects"] == [{"title": "Folio", "imageCount": 1}]
    assert "Skipped project rec2: missing title or description" in result["errors"]
    assert 'Failed to download image for "Folio"' in result["errors"]

    project = db.query(Project).filter(Project.title == "Folio").one()
    assert project.order_index == 5
    assert project.demo_link == "https://folio.example"
    assert project.problem_statement == "Hard to update"
    assert len(project.images) == 1
    image = project.images[0]
    assert image.image_path.endswith(".png")
    assert image.image_url.startswith("/media/project-images/")
    assert (tmp_path / "project-images" / image.image_path).exists()


@pytest.mark.asyncio
async def test_migration_requires_parameters(db, test_settings):
    with pytest.raises(ValidationError, match="Missing required parameters"):
        await AirtableMigration(db, settings=test_settings).run("key", None, "tbl")


@pytest.mark.asyncio
async def test_migration_airtable_error(db, test_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(401))
    migration = AirtableMigration(db, settings=test_settings, transport=transport)
    with pytest.raises(FunctionError, match="Airtable API error: Unauthorized"):
        await migration.run("bad", "app1", "tbl1")
