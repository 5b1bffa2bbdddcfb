import html
import json
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
import uvicorn

from app.api.routes import router, CORS_HEADERS
from app.core.config import get_settings
from app.core.observability import setup_logging


"""FastAPI application entrypoint.
Provides the ASGI app instance, the /mapping routes and the root greeting.
"""

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup. - lifespan"""
    setup_logging(get_settings().log_level)
    logger.info("Mapping relay started")
    yield


app = FastAPI(title="Mapping Relay", lifespan=lifespan)


@app.middleware("http")
async def mapping_cors_headers(request: Request, call_next):
    """Attach the permissive CORS headers to every /mapping response, errors included. - cors"""
    response = await call_next(request)
    if request.url.path.rstrip("/") == "/mapping":
        response.headers.update(CORS_HEADERS)
    return response


app.include_router(router)


# Liveness greeting; answers any path not claimed by another route
@app.get("/{path:path}", tags=["root"], response_class=PlainTextResponse)
async def root(request: Request):
    """Root health endpoint echoing the request path. - health"""
    return f"Hello, {json.dumps(html.escape(request.url.path))}"


def run() -> None:
    """Serve the app with uvicorn on the configured host/port. - run"""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
