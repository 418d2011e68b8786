"""HTTP application for the chat relay.

Routes:
- ``POST /api/chat/completions``: authenticated relay to the LLM API.
- ``GET /health``: liveness probe.

Every failure is answered with a JSON body ``{"error": ...}``; business
errors keep their own status code, anything else becomes a 500.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_relay.api.schemas import ChatCompletionBody
from chat_relay.api.service import ChatRelayService
from chat_relay.config.settings import settings
from chat_relay.domain.exceptions import ApiError, BusinessError
from chat_relay.infrastructure.logging.logger import logger


GENERIC_ERROR_MESSAGE = "Internal server error"


def _error_response(exc: BusinessError) -> JSONResponse:
    if isinstance(exc, ApiError) and exc.body is not None:
        # upstream error body relayed as-is
        return JSONResponse(exc.body, status_code=exc.http_status)
    return JSONResponse({"error": exc.message}, status_code=exc.http_status)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_app(cfg=settings, service: Optional[ChatRelayService] = None) -> FastAPI:
    """Create and configure the FastAPI application instance."""

    service = service or ChatRelayService(cfg)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(
            f"Backend server running on http://localhost:{cfg.port}",
            extra={"extra": {"openai_api_key_configured": bool(cfg.openai_api_key)}},
        )
        yield
        logger.info("Backend server shutting down")

    app = FastAPI(title="chat-relay", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > cfg.max_body_bytes:
            return JSONResponse({"error": "Request body too large"}, status_code=413)
        return await call_next(request)

    # added last so it wraps every other middleware, 413 replies included
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BusinessError)
    async def business_error_handler(_request: Request, exc: BusinessError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    @app.post("/api/chat/completions")
    async def chat_completions(payload: ChatCompletionBody, request: Request):
        try:
            return await service.handle(payload, request.headers.get("authorization"))
        except BusinessError:
            raise
        except Exception as exc:
            logger.error("Error calling OpenAI API", exc_info=True)
            message = str(exc) if cfg.expose_error_details else GENERIC_ERROR_MESSAGE
            return JSONResponse({"error": message}, status_code=500)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "timestamp": _iso_now()}

    return app


app = create_app()
