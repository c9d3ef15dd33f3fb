"""
Tests for the Unsplash search proxy
"""
import httpx
import pytest

from folio.api.routes.functions import get_outbound_transport
from folio.core.errors import FunctionError, ValidationError
from folio.services.unsplash import UnsplashClient

PHOTO = {
    "id": "abc",
    "urls": {"regular": "https://img/regular.jpg", "small": "https://img/small.jpg"},
    "alt_description": None,
    "description": "Mountains",
    "user": {"name": "Ansel", "links": {"html": "https://unsplash.com/@ansel"}},
    "links": {"download_location": "https://api.unsplash.com/photos/abc/download"},
}


@pytest.mark.asyncio
async def test_search_maps_results(test_settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"results": [PHOTO], "total": 41})

    client = UnsplashClient(test_settings, transport=httpx.MockTransport(handler))
    result = await client.search("mountains", page=2)

    assert result["total"] == 41
    assert result["results"][0] == {
        "id": "abc",
        "url": "https://img/regular.jpg",
        "thumb": "https://img/small.jpg",
        "alt": "Mountains",
        "author": "Ansel",
        "authorUrl": "https://unsplash.com/@ansel",
        "downloadUrl": "https://api.unsplash.com/photos/abc/download",
    }
    assert seen["params"]["orientation"] == "landscape"
    assert seen["params"]["page"] == "2"
    assert seen["auth"] == "Client-ID unsplash-test-key"


@pytest.mark.asyncio
async def test_search_errors(test_settings):
    with pytest.raises(ValidationError):
        await UnsplashClient(test_settings).search("")

    no_key = test_settings.model_copy(update={"unsplash_access_key": None})
    with pytest.raises(FunctionError, match="UNSPLASH_ACCESS_KEY"):
        await UnsplashClient(no_key).search("x")

    transport = httpx.MockTransport(lambda request: httpx.Response(403, text="Rate Limit Exceeded"))
    with pytest.raises(FunctionError, match=r"Unsplash API error \[403\]"):
        await UnsplashClient(test_settings, transport=transport).search("x")


def test_unsplash_function_requires_query(client):
    from folio.main import app

    app.dependency_overrides[get_outbound_transport] = lambda: httpx.MockTransport(lambda r: httpx.Response(200))
    response = client.post("/functions/v1/unsplash-search", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}
