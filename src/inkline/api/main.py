"""Inkline — FastAPI Application.

This module defines the application factory, the route handlers, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** is an :class:`~inkline.core.config.InklineConfig`
  instance, read once and stored on ``app.state``.
- **The generation client** is created in the lifespan handler from the
  configured API key (or injected by the caller) and shared by every request.
- **The pipeline** (:class:`~inkline.core.pipeline.OutlinePipeline`) does the
  work; route handlers only apply the request timeout and encode the result.
- **Errors** are :class:`~inkline.core.errors.PipelineError` subclasses,
  translated into ``{"error": ...}`` bodies by an exception handler.

Endpoints
---------
========  ==================  ============================================
Method    Path                Purpose
========  ==================  ============================================
POST      ``/api/generate``   Upload a photo, receive a colouring outline
GET       ``/api/styles``     Available style keys
GET       ``/health``         Liveness check
========  ==================  ============================================

``/api/generate`` is registered for every method so that a non-POST request
gets the same JSON error body (405) as every other failure.

Usage
-----
CLI (installed entry point)::

    inkline

Direct invocation::

    python -m inkline.api.main
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inkline import __version__
from inkline.api.models import ErrorResponse, GenerateResponse, StylesResponse
from inkline.core.config import InklineConfig, config
from inkline.core.errors import PipelineError, RequestTimeout
from inkline.core.generation import GenerationClient, ImageGenerator
from inkline.core.models import GenerationResult
from inkline.core.pipeline import OutlinePipeline
from inkline.core.styles import DEFAULT_STYLE, available_styles

logger = logging.getLogger(__name__)

GENERATE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

router = APIRouter()


# ---------------------------------------------------------------------------
# Response encoding.
# ---------------------------------------------------------------------------


def encode_result(result: GenerationResult) -> JSONResponse:
    """Serialise a pipeline result into exactly one JSON response."""
    if result.ok:
        body = GenerateResponse(image_base64=result.image_base64)
        return JSONResponse(body.model_dump(by_alias=True), status_code=200)
    return encode_error(result.error_message or "Failed to process image", result.http_status)


def encode_error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Translate a :class:`PipelineError` into its status and JSON body."""
    result = GenerationResult.failure(exc.message, exc.status_code)
    return encode_result(result)


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared generation client and pipeline.

    On startup:
        Creates a :class:`GenerationClient` unless one was injected, which
        requires ``OPENAI_API_KEY``.  Builds the pipeline.

    On shutdown:
        Closes the client if this handler created it.
    """
    settings: InklineConfig = app.state.settings
    generator: ImageGenerator | None = app.state.generator
    owned_client: GenerationClient | None = None

    if generator is None:
        owned_client = GenerationClient(
            settings.require_api_key(),
            settings.generation_model,
        )
        generator = owned_client

    app.state.pipeline = OutlinePipeline(settings, generator)
    logger.info(
        "Pipeline ready (model=%s, policy=%s, max upload=%d bytes).",
        settings.generation_model,
        settings.compression_policy,
        settings.max_upload_bytes,
    )

    yield

    if owned_client is not None:
        await owned_client.aclose()
        logger.info("Generation client closed on shutdown.")


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/api/styles", response_model=StylesResponse)
async def list_styles() -> StylesResponse:
    """Return the available style keys and the fallback style."""
    return StylesResponse(styles=available_styles(), default=DEFAULT_STYLE)


@router.api_route(
    "/api/generate",
    methods=GENERATE_METHODS,
    responses={
        200: {"model": GenerateResponse},
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def generate_outline(request: Request) -> JSONResponse:
    """Turn an uploaded photo into a colouring-book outline.

    Expects ``multipart/form-data`` with an ``image`` file and an optional
    ``style`` field (``original``, ``anime`` or ``ghibli``).

    The whole pipeline runs under the configured request timeout.  On
    timeout the pipeline task is cancelled, which still removes its
    temporary files.

    Raises:
        PipelineError: Any classified failure, rendered by
            :func:`pipeline_error_handler`.
    """
    pipeline: OutlinePipeline = request.app.state.pipeline
    timeout = request.app.state.settings.request_timeout_seconds

    try:
        result = await asyncio.wait_for(pipeline.run(request), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("Request exceeded %.0fs timeout", timeout)
        raise RequestTimeout(timeout) from exc

    return encode_result(result)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: InklineConfig | None = None,
    generation_client: ImageGenerator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to use.  Defaults to the global ``config``.
        generation_client: Pre-built generator.  When omitted the lifespan
            handler creates a :class:`GenerationClient`.

    Returns:
        The configured application.
    """
    settings = settings or config

    app = FastAPI(
        title="Inkline",
        description="Turns photos into colouring-book outlines.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.generator = generation_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.include_router(router)
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~inkline.core.config.config`.
    This function is registered as the ``inkline`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "inkline.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
