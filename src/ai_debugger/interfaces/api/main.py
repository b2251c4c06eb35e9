import traceback
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ai_debugger.config import ProviderConfig, ServerConfig
from ai_debugger.debugging.exceptions import ProviderError, RequestValidationError
from ai_debugger.debugging.gateway import ProviderGateway
from ai_debugger.debugging.models import DebugRequest
from ai_debugger.interfaces.api.models import (
    DebugPayload,
    ErrorResponse,
    HealthResponse,
    ProviderErrorResponse,
)
from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)

MAX_BODY_BYTES = 200 * 1024

_JSON_TYPES = (dict, list, str, int, float, bool, type(None))


def _declared_length(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", "0"))
    except ValueError:
        return 0


def _body_too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"error": "request body too large"})


def create_app(
    config: Optional[ProviderConfig] = None,
    gateway: Optional[ProviderGateway] = None,
) -> FastAPI:
    """
    Build the API application.

    The provider configuration is resolved here, once, and the gateway built
    from it is shared read-only by every request.

    Args:
        config: Provider configuration, read from the environment if omitted
        gateway: Prebuilt gateway, built from ``config`` if omitted

    Returns:
        The FastAPI application
    """
    if gateway is None:
        config = config or ProviderConfig.from_env()
        gateway = ProviderGateway.from_config(config)
        logger.info(f"Starting backend (provider={config.provider}, using: {gateway.provider})")

    app = FastAPI(
        title="AI Debugger API",
        description="Forwards code and error output to an LLM and returns suggested fixes",
        version="1.0.0",
    )
    app.state.gateway = gateway

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        logger.info(f"Incoming request {request.method} {request.url}")

        if _declared_length(request) > MAX_BODY_BYTES:
            return _body_too_large()

        body = b""
        async for chunk in request.stream():
            body += chunk
            if len(body) > MAX_BODY_BYTES:
                return _body_too_large()

        # Reconstruct the request stream so that downstream handlers can read it
        request._body = body

        async def receive():
            return {"type": "http.request", "body": body}
        request._receive = receive

        return await call_next(request)

    # Outermost layer: early 413 replies still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", response_model=HealthResponse)
    async def health(request: Request):
        """Report liveness and the provider in use."""
        return HealthResponse(
            ok=True,
            time=datetime.now(timezone.utc).isoformat(),
            provider=request.app.state.gateway.provider,
        )

    @app.post(
        "/api/debug",
        responses={
            400: {"model": ErrorResponse},
            413: {"model": ErrorResponse},
            500: {"model": ProviderErrorResponse},
        },
    )
    async def debug(request: Request, payload: Optional[DebugPayload] = None):
        """Analyze code with the provider and return its structured suggestions."""
        payload = payload or DebugPayload()
        gateway: ProviderGateway = request.app.state.gateway

        response = await gateway.debug(
            DebugRequest(
                code=payload.code or "",
                language=payload.language or "",
                error_output=payload.error_output,
            )
        )
        return response.to_payload()

    @app.exception_handler(BodyValidationError)
    async def body_validation_handler(request: Request, exc: BodyValidationError):
        return JSONResponse(status_code=400, content={"error": "invalid request body"})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        logger.error(f"{exc.error} ({exc.provider}, status={exc.status}): {exc.message}")
        body = exc.body if isinstance(exc.body, _JSON_TYPES) else str(exc.body)
        return JSONResponse(
            status_code=500,
            content={
                "error": exc.error,
                "provider": exc.provider,
                "status": exc.status,
                "body": body,
                "message": exc.message,
            },
        )

    # Safety net for everything else
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception at {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc) or "server error",
                "provider": request.app.state.gateway.provider,
                "message": str(exc) or exc.__class__.__name__,
                "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            },
        )

    return app


def run(server: Optional[ServerConfig] = None) -> None:
    """Serve the API with uvicorn."""
    server = server or ServerConfig.from_env()
    logger.info(f"Backend listening on http://{server.host}:{server.port}")
    uvicorn.run(
        "ai_debugger.interfaces.api.main:create_app",
        factory=True,
        host=server.host,
        port=server.port,
        reload=server.reload,
        log_level="debug" if server.reload else "info",
    )


if __name__ == "__main__":
    load_dotenv()
    run()
