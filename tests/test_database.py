import json
import pytest
import httpx

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.api.schemas import Registration, DATABASE_LISTING_FIELDS
from app.core.config import Settings
from app.core.errors import UpstreamError, UpstreamTimeout
from app.services.database import fetch_registrations, listing_select, store_registration


"""Tests for the REST database client, using httpx.MockTransport in place of the database."""


@pytest.fixture
def settings():
    return Settings(_env_file=None, db_address="https://db.example/rest/v1/preregistrations", db_key="secret")


@pytest.fixture
def registration():
    return Registration(name="Ada", email="a@b.com", country="France", zip="75001", lat="48.86", lon="2.34")


@pytest.mark.asyncio
async def test_store_posts_envelope_with_bearer_key(settings, registration):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        status = await store_registration(registration, client, settings)

    assert status == 201
    assert seen["method"] == "POST"
    assert seen["auth"] == "Bearer secret"
    assert list(seen["body"]) == ["registration_raw"]
    assert seen["body"]["registration_raw"]["lat"] == "48.86"
    assert seen["body"]["registration_raw"]["lon"] == "2.34"
    assert seen["body"]["registration_raw"]["email"] == "a@b.com"


@pytest.mark.asyncio
async def test_store_keeps_key_with_explicit_scheme(settings, registration):
    settings.db_key = "Token abc"

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Token abc"
        return httpx.Response(201)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await store_registration(registration, client, settings)


@pytest.mark.asyncio
async def test_store_rejection_raises_with_upstream_status(settings, registration):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "duplicate key"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamError) as info:
            await store_registration(registration, client, settings)

    assert info.value.status_code == 502
    assert info.value.upstream_status == 409


@pytest.mark.asyncio
async def test_store_timeout_maps_to_504(settings, registration):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamTimeout) as info:
            await store_registration(registration, client, settings)

    assert info.value.status_code == 504


@pytest.mark.asyncio
async def test_store_without_address_is_an_upstream_error(registration):
    settings = Settings(_env_file=None, db_address="")

    async with httpx.AsyncClient() as client:
        with pytest.raises(UpstreamError, match="DB_ADDRESS"):
            await store_registration(registration, client, settings)


def test_listing_select_covers_only_public_fields():
    select = listing_select()
    columns = select.split(",")
    assert columns == [f'registration_raw->>"{field}"' for field in DATABASE_LISTING_FIELDS]
    for private in ("name", "email", "country", "zip", "linkedin"):
        assert f'"{private}"' not in select


@pytest.mark.asyncio
async def test_fetch_returns_body_verbatim(settings):
    body = b'[{"profession":"dev","talent":"true","lat":"48.86","lon":"2.34"}]'
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["select"] = request.url.params["select"]
        return httpx.Response(200, content=body)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await fetch_registrations(client, settings) == body

    assert seen["select"] == listing_select()


@pytest.mark.asyncio
async def test_fetch_non_200_raises(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamError) as info:
            await fetch_registrations(client, settings)

    assert info.value.upstream_status == 401


@pytest.mark.asyncio
async def test_fetch_connection_error_maps_to_502(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamError) as info:
            await fetch_registrations(client, settings)

    assert info.value.status_code == 502
    assert not isinstance(info.value, UpstreamTimeout)
