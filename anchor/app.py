"""FastAPI application for the Anchor guidance service.

Provides a single /v1/guidance endpoint that accepts what the user shared,
asks the completion provider for a verse, explanation and prayer, and returns
either the guidance or one error envelope. The distinct failure kinds are
reported in the envelope's ``type`` for diagnostics only; the user-facing
message is the same for every failure except a missing configuration.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from anchor.client import GuidanceClient
from anchor.config import AnchorConfig, load_config
from anchor.errors import ConfigurationError, GuidanceError
from anchor.models import ErrorDetail, ErrorResponse, GuidanceRequest
from anchor.telemetry import setup_logging

CONFIG_PATH = os.getenv("ANCHOR_CONFIG", "config/example.config.json")

CONFIGURATION_MESSAGE = "API key is missing. Please check your configuration."
GENERIC_MESSAGE = "Something went wrong. Please try again."

_config: Optional[AnchorConfig] = None
_client: Optional[GuidanceClient] = None


def get_config() -> AnchorConfig:
    """Return the loaded service configuration (lazy-init)."""
    global _config
    if _config is None:
        _config = load_config(CONFIG_PATH)
    return _config


def get_client() -> GuidanceClient:
    """Return the guidance client (lazy-init from config)."""
    global _client
    if _client is None:
        _client = GuidanceClient(get_config())
    return _client


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Initialize config, logging, and the guidance client on startup."""
    cfg = get_config()
    setup_logging(cfg.log_file)
    get_client()
    yield


app = FastAPI(title="Anchor", version="0.1.0", lifespan=lifespan)


def _error_response(status: int, error_type: str, message: str) -> JSONResponse:
    """Build a consistent JSON error response."""
    body = ErrorResponse(error=ErrorDetail(type=error_type, message=message))
    return JSONResponse(status_code=status, content=body.model_dump())


def _status_for(exc: GuidanceError) -> int:
    if isinstance(exc, ConfigurationError):
        return 503
    return 502


@app.post("/v1/guidance", response_model=None)
async def guidance(request: GuidanceRequest) -> JSONResponse:
    """Return guidance for what the user shared."""
    client = get_client()

    try:
        result = await client.request_guidance(request.input)
    except GuidanceError as exc:
        message = (
            CONFIGURATION_MESSAGE
            if isinstance(exc, ConfigurationError)
            else GENERIC_MESSAGE
        )
        return _error_response(_status_for(exc), exc.kind, message)

    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@app.get("/healthz")
async def healthz() -> Dict[str, Union[str, bool]]:
    """Report liveness and whether an API key was found."""
    return {"status": "ok", "configured": get_client().has_api_key}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI's validation errors into our error envelope format."""
    return _error_response(
        422,
        "validation_error",
        "Request validation failed: {}".format(exc),
    )
