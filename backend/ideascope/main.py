"""
IdeaScope Backend — FastAPI Application Factory

App creation, middleware (CORS, rate limiting, request ID logging), router registration.
Run with: uvicorn ideascope.main:app --reload
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ideascope.api import analyze, summary
from ideascope.api.deps import limiter
from ideascope.config import Settings, generate_error_code, log, settings
from ideascope.orchestrator import Orchestrator

VERSION = "0.1.0"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Log the X-Request-Id header so REST errors can be correlated with backend logs."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id", "none")
        log(
            "INFO",
            "request received",
            method=request.method,
            path=request.url.path,
            request_id=request_id,
        )
        return await call_next(request)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else "Invalid request body"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same { error, error_code } shape as every other failure."""
    code = generate_error_code()
    message = _validation_message(exc)
    log("WARN", "request validation failed", path=request.url.path, error=message, error_code=code)
    return JSONResponse(status_code=422, content={"error": message, "error_code": code})


def create_app(config: Settings = settings) -> FastAPI:
    """
    Create the FastAPI application with CORS, request logging, rate limiting and routers.

    The orchestrator is built here, so with STRICT_CONFIG=true a missing
    credential raises ConfigurationError at startup.
    """
    app = FastAPI(
        title="IdeaScope API",
        version=VERSION,
        description="Startup idea validation: competitor discovery, market gaps and positioning.",
    )

    origins = [origin.strip() for origin in config.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestIdMiddleware)

    # Rate limiting (applied per-endpoint via decorator, not globally)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.state.orchestrator = Orchestrator(config)

    app.include_router(analyze.router)
    app.include_router(summary.router)

    return app


app = create_app()


@app.get("/api/health")
async def health_check():
    """
    GET /api/health

    Returns: { "status": "ok", "version": "0.1.0" }
    """
    return {"status": "ok", "version": VERSION}
