"""Provador — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The application is a stateless request handler:

- **Configuration** comes from :data:`~provador.core.config.config`
  (``PROVADOR_*`` environment variables).
- **Try-on calls** are delegated to :class:`~provador.core.tryon.TryOnService`,
  built once at startup and stored on ``app.state``.
- **Result records** live in Supabase when configured, otherwise in memory.
- **Errors** are turned into JSON envelopes here and nowhere else; the core
  returns outcomes rather than HTTP exceptions.

Endpoints
---------
========  ==========================  ====================================
Method    Path                        Purpose
========  ==========================  ====================================
GET       ``/api/health``             Version, tier models, store backend
POST      ``/api/try-on/results``     Create a pending result record
POST      ``/api/try-on``             Run a virtual try-on
========  ==========================  ====================================

Usage
-----
CLI (installed entry point)::

    provador

Direct invocation::

    python -m provador.api.main
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from provador import __version__
from provador.api.models import (
    CreateResultRequest,
    CreateResultResponse,
    TryOnErrorResponse,
    TryOnRequest,
    TryOnSuccessResponse,
)
from provador.core.config import ProvadorConfig, config
from provador.core.errors import GENERIC_MESSAGE
from provador.core.escalation import EscalationController
from provador.core.providers import build_gateway_providers
from provador.core.result_store import ResultStatus, create_result_store
from provador.core.tryon import TryOnService

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "Requisição inválida."


def build_service(cfg: ProvadorConfig, client: httpx.AsyncClient) -> TryOnService:
    """Wire providers, controller and result store into a service."""
    controller = EscalationController(
        build_gateway_providers(cfg, client),
        fallback_delay=cfg.fallback_delay_seconds,
    )
    return TryOnService(
        client,
        controller,
        create_result_store(cfg),
        min_image_bytes=cfg.min_image_bytes,
        default_category=cfg.default_category,
    )


# ---------------------------------------------------------------------------
# Application lifecycle — shared HTTP client and service setup/teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Opens one ``httpx.AsyncClient`` (shared by image validation and every
        provider) and stores the :class:`TryOnService` on ``app.state``.

    On shutdown:
        Closes the HTTP client.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    client = httpx.AsyncClient(timeout=config.validation_timeout_seconds)
    app.state.tryon_service = build_service(config, client)
    logger.info("Try-on service initialised (store=%s).", app.state.tryon_service.store.backend)

    yield

    await client.aclose()
    logger.info("HTTP client closed on shutdown.")


app = FastAPI(
    title="Provador",
    description="Virtual try-on API with tiered multi-model fallback.",
    version=__version__,
    lifespan=lifespan,
)

# Browser clients call the function directly.  Restrict ``allow_origins`` to
# the deployment domain in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_tryon_service(request: Request) -> TryOnService:
    """Return the service created by :func:`lifespan`."""
    service = getattr(request.app.state, "tryon_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Try-on service not initialised")
    return service


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors with the same failure envelope as the try-on route."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies with the standard failure envelope."""
    logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": INVALID_REQUEST_MESSAGE},
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/health")
async def health(service: TryOnService = Depends(get_tryon_service)) -> dict:
    """Return service metadata.

    Returns:
        Dictionary with ``version``, ``tiers`` (tier → provider bound to it
        in the running service) and ``store`` (result store backend name).
    """
    return {
        "version": __version__,
        "tiers": service.controller.tier_models,
        "store": service.store.backend,
    }


@app.post("/api/try-on/results", response_model=CreateResultResponse)
async def create_result(
    req: CreateResultRequest,
    service: TryOnService = Depends(get_tryon_service),
) -> CreateResultResponse:
    """Create a ``pending`` try-on result record.

    Clients call this before ``POST /api/try-on`` and pass the returned id as
    ``resultId``.

    Raises:
        HTTPException: 500 if the store rejects the insert.
    """
    try:
        result_id = await asyncio.to_thread(service.store.create_pending, req.to_fields())
    except Exception as e:
        logger.exception("Failed to create pending try-on result")
        raise HTTPException(status_code=500, detail="Failed to create try-on result") from e
    return CreateResultResponse(resultId=result_id, status=ResultStatus.PENDING.value)


@app.post(
    "/api/try-on",
    response_model=TryOnSuccessResponse,
    responses={
        400: {"model": TryOnErrorResponse},
        429: {"model": TryOnErrorResponse},
        500: {"model": TryOnErrorResponse},
    },
)
async def virtual_try_on(
    req: TryOnRequest,
    service: TryOnService = Depends(get_tryon_service),
) -> JSONResponse:
    """Run a virtual try-on and return the outcome synchronously.

    Status codes:

    - 200 with ``resultImageUrl``, ``processingTimeMs``, ``model`` and
      ``retryCount`` on success
    - 429 when any provider in the chain was rate limited
    - 400 for every other failure (missing or invalid images, exhaustion)
    - 500 for unexpected server errors

    Failure bodies are always ``{"success": false, "error": <message>}`` with a
    user-safe message.
    """
    try:
        outcome = await service.run(req.to_job())
    except Exception:
        logger.exception("Virtual try-on error")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": GENERIC_MESSAGE},
        )
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_payload())


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Configure logging and launch the uvicorn ASGI server.

    Host, port and log level come from :data:`~provador.core.config.config`
    (``PROVADOR_SERVER_HOST``, ``PROVADOR_SERVER_PORT``, ``PROVADOR_LOG_LEVEL``).

    This function is registered as the ``provador`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "provador.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
