"""Shorten endpoint behavior tests."""

import re

import pytest
from conftest import FakeURLStore, make_store_error
from httpx import AsyncClient

from app.config import get_settings
from app.dependencies import get_url_service
from app.main import app
from app.url_service import URLShorteningService

settings = get_settings()
SHORT_URL_PATTERN = re.compile(rf"^{re.escape(settings.BASE_URL)}/[a-z0-9]{{8,}}$")


def override_store(store: FakeURLStore) -> None:
    app.dependency_overrides[get_url_service] = lambda: URLShorteningService(store, settings=settings)


@pytest.mark.asyncio
async def test_shorten_valid_url(client: AsyncClient, count_urls) -> None:
    response = await client.post("/api/url", json={"url": "https://www.example.com"})
    assert response.status_code == 201
    data = response.json()
    assert list(data) == ["shortUrl"]
    assert SHORT_URL_PATTERN.match(data["shortUrl"])
    assert await count_urls() == 1


@pytest.mark.asyncio
async def test_shorten_http_url_with_path_and_query(client: AsyncClient) -> None:
    response = await client.post("/api/url", json={"url": "http://example.org/a/b?c=d&e=f"})
    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        "https://www.example.com/watch?v=abc&autoplay",
        "https://example.com/search?flag",
        "http://localhost:3000/page",
        "http://intranet/page",
    ],
)
async def test_shorten_accepts_bare_query_flags_and_simple_hosts(client: AsyncClient, count_urls, url: str) -> None:
    response = await client.post("/api/url", json={"url": url})
    assert response.status_code == 201
    assert SHORT_URL_PATTERN.match(response.json()["shortUrl"])
    assert await count_urls() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"url": "not-a-valid-url"},
        {"url": "http://" + "a" * 2049},
        {},
        {"url": ""},
        {"url": None},
        {"url": 12345},
        {"url": ["https://www.example.com"]},
        {"url": "ftp://example.com/file.txt"},
        {"url": "javascript:alert(1)"},
        {"link": "https://www.example.com"},
    ],
)
async def test_shorten_rejects_invalid_input(client: AsyncClient, count_urls, payload) -> None:
    response = await client.post("/api/url", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Wrong url format"}
    assert await count_urls() == 0


@pytest.mark.asyncio
async def test_shorten_rejects_malformed_body(client: AsyncClient, count_urls) -> None:
    response = await client.post(
        "/api/url",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Wrong url format"}
    assert await count_urls() == 0


@pytest.mark.asyncio
async def test_shorten_accepts_max_length_url(client: AsyncClient) -> None:
    prefix = "https://www.example.com/"
    url = prefix + "a" * (2048 - len(prefix))
    assert len(url) == 2048

    response = await client.post("/api/url", json={"url": url})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_shorten_same_url_twice_creates_two_codes(client: AsyncClient, count_urls) -> None:
    first = await client.post("/api/url", json={"url": "https://www.example.com"})
    second = await client.post("/api/url", json={"url": "https://www.example.com"})

    assert first.status_code == second.status_code == 201
    assert first.json()["shortUrl"] != second.json()["shortUrl"]
    assert await count_urls() == 2


@pytest.mark.asyncio
async def test_shorten_multiple_urls_unique_codes(client: AsyncClient) -> None:
    codes = set()
    for i in range(25):
        response = await client.post("/api/url", json={"url": f"https://www.example.com/{i}"})
        assert response.status_code == 201
        codes.add(response.json()["shortUrl"].rsplit("/", 1)[1])
    assert len(codes) == 25


@pytest.mark.asyncio
async def test_shorten_exhaustion_returns_500(client: AsyncClient) -> None:
    store = FakeURLStore(always_collide=True)
    override_store(store)

    response = await client.post("/api/url", json={"url": "https://www.example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred, please try again"}
    assert len(store.insert_calls) == 10


@pytest.mark.asyncio
async def test_shorten_store_error_returns_500_without_retry(client: AsyncClient) -> None:
    store = FakeURLStore(insert_failures=[make_store_error()])
    override_store(store)

    response = await client.post("/api/url", json={"url": "https://www.example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred, please try again"}
    assert len(store.insert_calls) == 1


@pytest.mark.asyncio
async def test_shorten_invalid_url_never_reaches_allocator(client: AsyncClient) -> None:
    store = FakeURLStore()
    override_store(store)

    response = await client.post("/api/url", json={"url": "not-a-valid-url"})

    assert response.status_code == 400
    assert store.insert_calls == []
