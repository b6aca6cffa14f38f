"""
HTTP middleware — per-IP rate limiting, CORS and error responses.

The limiter uses slowapi (built on top of limits) keyed by client IP with
in-memory storage, so it is process-local like the cooldown tracker.
Only routes decorated with limiter.limit(...) are throttled.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from sepolia_faucet.config.env import get_ip_rate_limit
from sepolia_faucet.faucet_logging import get_logger

logger = get_logger(__name__)

IP_RATE_LIMIT = get_ip_rate_limit()
IP_RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after an hour."

limiter = Limiter(key_func=get_remote_address, headers_enabled=False)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info(
        "ip_rate_limited",
        client=get_remote_address(request),
        path=request.url.path,
        limit=str(exc.detail),
    )
    return JSONResponse(status_code=429, content={"error": IP_RATE_LIMIT_MESSAGE})


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly typed fields."""
    logger.info("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Consistent {"error": ...} body for HTTPException (404, 405, ...)."""
    if exc.status_code == 404 and request.url.path.startswith("/api/"):
        detail = "API endpoint not found"
    else:
        detail = exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": detail})


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log and return a generic 500 without internals."""
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def install_middleware(app: FastAPI, cors_origins: list[str] | tuple[str, ...] = ("*",)) -> None:
    """Attach limiter, CORS and exception handlers to app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
