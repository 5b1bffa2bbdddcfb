import logging
from fastapi import APIRouter, HTTPException, Depends, Request, Response
from pydantic import ValidationError
import httpx

from app.api import schemas
from app.core.config import Settings, get_settings
from app.core.errors import UpstreamError
from app.services import database, geocode, marketing


"""API routes for submitting and listing pre-registrations. - api, routes"""

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE",
    "Access-Control-Allow-Headers": "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization",
}


def _upstream_failure(exc: UpstreamError) -> HTTPException:
    """Map an outbound failure to the relay's own 502/504 answer. - helper"""
    logger.error("Upstream failure: %s", exc)
    return HTTPException(status_code=exc.status_code, detail=str(exc))


async def _decode_registration(request: Request) -> schemas.Registration:
    """Decode the request body; client-supplied coordinates are discarded. - helper"""
    body = await request.body()
    try:
        registration = schemas.Registration.model_validate_json(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    registration.lat = ""
    registration.lon = ""
    return registration


@router.options("/mapping")
async def mapping_preflight():
    """CORS preflight; the headers are added by the mapping middleware. - preflight"""
    return Response(status_code=200)


@router.get("/mapping")
async def list_registrations(settings: Settings = Depends(get_settings)):
    """Return stored registrations without identifying fields. - list_registrations"""
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        try:
            if settings.store_variant == "marketing":
                public = await marketing.fetch_public_registrations(client, settings)
            else:
                body = await database.fetch_registrations(client, settings)
                return Response(content=body, media_type="application/json")
        except UpstreamError as exc:
            raise _upstream_failure(exc) from exc
    return [item.model_dump() for item in public]


@router.post("/mapping")
async def submit_registration(request: Request, settings: Settings = Depends(get_settings)):
    """Geocode a submission, store it and, for the database store, mirror it to the marketing list.

    Always answers with an empty JSON array on success. A submission whose
    address yields no geocoding match is dropped (not stored) unless
    persist_without_coordinates is enabled.
    - submit_registration
    """
    registration = await _decode_registration(request)

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        candidates = await geocode.lookup_candidates(registration.address(), client, settings)
        if candidates:
            registration.lat = candidates[0].lat
            registration.lon = candidates[0].lon
        elif not settings.persist_without_coordinates:
            logger.info("No geocoding match for %r, registration not stored", registration.address())
            return []

        try:
            if settings.store_variant == "marketing":
                await marketing.push_contact(registration, client, settings)
            else:
                await database.store_registration(registration, client, settings)
        except UpstreamError as exc:
            raise _upstream_failure(exc) from exc

        if settings.store_variant == "database" and settings.mirror_to_marketing:
            await marketing.mirror_contact(registration, client, settings)

    return []
