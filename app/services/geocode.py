import logging
from typing import List
import httpx
from pydantic import TypeAdapter, ValidationError

from app.api.schemas import GeocodeCandidate
from app.core.config import Settings


"""Geocoding lookup against a Nominatim-compatible endpoint.

Failures of any kind (network, HTTP status, malformed payload) are reported
as an empty candidate list: callers treat that as "no coordinates available".
- geocode
"""

logger = logging.getLogger(__name__)

# Module-level public endpoint constant (tests import this)
PUBLIC_NOMINATIM = "https://nominatim.openstreetmap.org"

_candidates = TypeAdapter(List[GeocodeCandidate])


async def _query_nominatim(address: str, client: httpx.AsyncClient, url: str, user_agent: str):
    """Internal helper to query a Nominatim /search endpoint. - helper"""
    params = {"format": "json", "q": address}
    headers = {"User-Agent": user_agent}
    resp = await client.get(url.rstrip("/") + "/search", params=params, headers=headers)
    resp.raise_for_status()
    return resp.json()


async def lookup_candidates(address: str, client: httpx.AsyncClient, settings: Settings) -> List[GeocodeCandidate]:
    """Return the geocoder's candidate matches for a free-text address, best match first.

    Returns an empty list when the address is blank, the service is
    unreachable, answers with an error status or sends something that is not
    a list of matches.
    - lookup_candidates
    """
    if not address.strip():
        return []

    url = settings.nominatim_url or PUBLIC_NOMINATIM
    try:
        data = await _query_nominatim(address, client, url, settings.user_agent)
    except httpx.HTTPError as exc:
        logger.warning("Geocoding request failed for %r: %s", address, exc)
        return []
    except ValueError as exc:
        # resp.json() on a non-JSON body
        logger.warning("Geocoding response for %r is not JSON: %s", address, exc)
        return []

    try:
        return _candidates.validate_python(data)
    except ValidationError as exc:
        logger.warning("Unexpected geocoding response format for %r: %s", address, exc)
        return []
