"""
Point d'entree FastAPI / FastAPI entry point.
86 Garage - suivi des motos, couts de restauration et stock.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import OperationalError
from starlette.middleware.base import BaseHTTPMiddleware

from garage.api import api_router
from garage.config import settings
from garage.database import init_db
from garage.errors import GarageError, StoreUnavailableError
from garage.logging_config import configure_logging
from garage.rate_limit import limiter

configure_logging(settings.DEBUG)
logger = logging.getLogger("garage")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialisation et fermeture / Startup and shutdown."""
    if not settings.DEBUG and settings.SECRET_KEY == "change-me-in-production":
        raise RuntimeError("CRITICAL: SECRET_KEY must be changed in production!")
    if not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("Media host not configured, uploads will be rejected")

    await init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Suivi restauration et revente de motos / Motor restoration and resale ledger",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _error_response(request: Request, error: GarageError) -> JSONResponse:
    if error.status_code >= 500:
        logger.warning(
            "%s on %s %s: %s", type(error).__name__, request.method, request.url.path, error.detail,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


# Erreurs metier -> HTTP / Domain errors -> HTTP
@app.exception_handler(GarageError)
async def garage_error_handler(request: Request, exc: GarageError):
    return _error_response(request, exc)


# Base injoignable hors get_db (lecture dans un middleware, script) / Store down outside get_db
@app.exception_handler(OperationalError)
async def store_unavailable_handler(request: Request, exc: OperationalError):
    return _error_response(request, StoreUnavailableError("Record store unavailable"))


class RequestContextMiddleware(BaseHTTPMiddleware):
    """X-Request-ID, headers de securite et journal d'acces / Request id, security headers, access log."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method, request.url.path, response.status_code,
            (time.perf_counter() - started) * 1000,
            extra={"request_id": request_id},
        )
        return response


app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(api_router)


@app.get("/api/")
async def api_health():
    """Health check."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "media_host": bool(settings.CLOUDINARY_CLOUD_NAME),
    }
