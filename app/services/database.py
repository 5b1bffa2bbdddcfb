import logging
import httpx

from app.api.schemas import Registration, StoredRegistration, DATABASE_LISTING_FIELDS
from app.core.config import Settings
from app.core.errors import UpstreamError, UpstreamTimeout


"""REST database client: stores registrations and reads back the public columns.

The database is a PostgREST-style table endpoint; each row keeps the whole
registration as JSON under registration_raw.
- database
"""

logger = logging.getLogger(__name__)

SERVICE = "database"


def _auth_header(key: str) -> str:
    """Bearer-style Authorization value; keys that already carry a scheme are sent as-is. - helper"""
    key = key.strip()
    if " " in key:
        return key
    return f"Bearer {key}"


def _headers(settings: Settings) -> dict:
    headers = {"Content-Type": "application/json"}
    if settings.db_key:
        headers["Authorization"] = _auth_header(settings.db_key)
    return headers


def _require_address(settings: Settings) -> str:
    if not settings.db_address:
        raise UpstreamError(SERVICE, "DB_ADDRESS is not configured")
    return settings.db_address


def listing_select() -> str:
    """PostgREST select expression restricted to the public registration fields. - listing_select"""
    return ",".join(f'registration_raw->>"{field}"' for field in DATABASE_LISTING_FIELDS)


async def store_registration(registration: Registration, client: httpx.AsyncClient, settings: Settings) -> int:
    """Insert a registration wrapped in its row envelope.

    Returns the upstream status code on success. Raises UpstreamTimeout or
    UpstreamError when the database is unreachable or rejects the row.
    - store_registration
    """
    url = _require_address(settings)
    payload = StoredRegistration(registration_raw=registration).model_dump(exclude_none=True)
    try:
        resp = await client.post(url, json=payload, headers=_headers(settings))
    except httpx.TimeoutException as exc:
        raise UpstreamTimeout(SERVICE, f"insert timed out: {exc}") from exc
    except httpx.RequestError as exc:
        raise UpstreamError(SERVICE, f"insert failed: {exc}") from exc

    logger.info("Database insert answered %s", resp.status_code)
    if not resp.is_success:
        logger.warning("Database rejected registration: %s %s", resp.status_code, resp.text)
        raise UpstreamError(SERVICE, f"insert rejected with status {resp.status_code}", upstream_status=resp.status_code)
    return resp.status_code


async def fetch_registrations(client: httpx.AsyncClient, settings: Settings) -> bytes:
    """Read the public columns of every stored registration; returns the raw JSON body. - fetch_registrations"""
    url = _require_address(settings)
    try:
        resp = await client.get(url, params={"select": listing_select()}, headers=_headers(settings))
    except httpx.TimeoutException as exc:
        raise UpstreamTimeout(SERVICE, f"listing timed out: {exc}") from exc
    except httpx.RequestError as exc:
        raise UpstreamError(SERVICE, f"listing failed: {exc}") from exc

    if resp.status_code != httpx.codes.OK:
        logger.warning("Database listing answered %s", resp.status_code)
        raise UpstreamError(SERVICE, f"listing answered status {resp.status_code}", upstream_status=resp.status_code)
    return resp.content
