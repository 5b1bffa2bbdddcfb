import logging
from typing import List
import httpx
from pydantic import ValidationError

from app.api.schemas import MarketingContact, PublicRegistration, Registration
from app.core.config import Settings
from app.core.errors import UpstreamError, UpstreamTimeout


"""Email-marketing contact list client (Sendinblue / Brevo /v3/contacts). - marketing"""

logger = logging.getLogger(__name__)

SERVICE = "marketing"


def _headers(settings: Settings) -> dict:
    if not settings.sib_key:
        raise UpstreamError(SERVICE, "SIB_KEY is not configured")
    return {
        "accept": "application/json",
        "api-key": settings.sib_key,
        "content-type": "application/json",
    }


async def push_contact(registration: Registration, client: httpx.AsyncClient, settings: Settings) -> int:
    """Create the contact for a registration; the full registration rides along in RAW_JSON.

    Raises UpstreamTimeout/UpstreamError on failure. Callers mirroring a
    database insert use mirror_contact instead, which never raises.
    - push_contact
    """
    contact = MarketingContact.from_registration(registration)
    try:
        resp = await client.post(settings.sib_url, json=contact.model_dump(), headers=_headers(settings))
    except httpx.TimeoutException as exc:
        raise UpstreamTimeout(SERVICE, f"contact creation timed out: {exc}") from exc
    except httpx.RequestError as exc:
        raise UpstreamError(SERVICE, f"contact creation failed: {exc}") from exc

    logger.info("Marketing contact creation answered %s", resp.status_code)
    if not resp.is_success:
        logger.warning("Marketing API rejected contact: %s %s", resp.status_code, resp.text)
        raise UpstreamError(SERVICE, f"contact rejected with status {resp.status_code}", upstream_status=resp.status_code)
    return resp.status_code


async def mirror_contact(registration: Registration, client: httpx.AsyncClient, settings: Settings) -> bool:
    """Best-effort copy of a stored registration to the marketing list. - mirror_contact"""
    if not settings.sib_key:
        logger.info("SIB_KEY not set, skipping marketing mirror")
        return False
    try:
        await push_contact(registration, client, settings)
    except UpstreamError as exc:
        logger.warning("Marketing mirror failed: %s", exc)
        return False
    return True


async def list_contacts(client: httpx.AsyncClient, settings: Settings) -> List[dict]:
    """Fetch every contact, following limit/offset pages until the reported count is reached. - list_contacts"""
    headers = _headers(settings)
    limit = max(1, settings.marketing_page_size)
    contacts: List[dict] = []
    offset = 0
    while True:
        try:
            resp = await client.get(settings.sib_url, params={"limit": limit, "offset": offset}, headers=headers)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout(SERVICE, f"contact listing timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise UpstreamError(SERVICE, f"contact listing failed: {exc}") from exc

        if not resp.is_success:
            raise UpstreamError(SERVICE, f"contact listing answered status {resp.status_code}", upstream_status=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamError(SERVICE, f"contact listing is not JSON: {exc}") from exc

        if not isinstance(body, dict):
            raise UpstreamError(SERVICE, "contact listing is not an object")
        page = body.get("contacts") or []
        contacts.extend(page)
        offset += len(page)
        if not page or offset >= body.get("count", 0):
            return contacts


def sanitize_contacts(contacts: List[dict]) -> List[PublicRegistration]:
    """Decode each contact's embedded registration and strip identifying fields.

    Contacts without an embedded registration, or with one that does not
    decode, are skipped.
    - sanitize_contacts
    """
    public: List[PublicRegistration] = []
    for raw in contacts:
        try:
            contact = MarketingContact.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping contact with undecodable attributes: %s", exc)
            continue
        if contact.attributes.RAW_JSON is None:
            logger.debug("Skipping contact without RAW_JSON")
            continue
        public.append(PublicRegistration.from_registration(contact.attributes.RAW_JSON))
    return public


async def fetch_public_registrations(client: httpx.AsyncClient, settings: Settings) -> List[PublicRegistration]:
    """Listing for the marketing-backed deployment. - fetch_public_registrations"""
    return sanitize_contacts(await list_contacts(client, settings))
