import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.v1 import api_router
from app.core.config import settings
from app.core.exceptions import request_validation_exception_handler
from app.core.lifespan import lifespan_manager
from app.core.logging_config import (
    SERVICE_NAME,
    RequestLoggingMiddleware,
    generate_request_id,
    setup_logging,
)
from app.db.session import check_db_connection

APP_VERSION = "1.0.0"

setup_logging()
logger = logging.getLogger("personnel")


class ErrorResponse(BaseModel):
    """Body of every 500 response."""
    error: str
    detail: Optional[str] = None
    reference_id: str
    timestamp: str
    path: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    checks: Dict[str, bool]


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Employee records, compensation and reporting structure",
    version=APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable docs in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan_manager,
)

# Malformed bodies come back as field-keyed 400s, like the compensation checks
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled error and answer 500.

    The reference id is the request id from the access log, so a client report
    can be matched to the server-side traceback. Production responses carry
    only that id.
    """
    reference_id = getattr(request.state, "request_id", None) or generate_request_id()

    logger.error(
        f"Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"request_id": reference_id},
    )

    if settings.is_production:
        error, detail = "Internal server error", f"An unexpected error occurred. Reference ID: {reference_id}"
    else:
        error, detail = exc.__class__.__name__, str(exc)

    content = ErrorResponse(
        error=error,
        detail=detail,
        reference_id=reference_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content.model_dump(),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
    expose_headers=["Location", "X-Request-ID"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Liveness plus a database round trip. 503 when the database is unreachable.
    """
    checks = {"database": await check_db_connection()}
    healthy = all(checks.values())

    response = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service=SERVICE_NAME,
        version=APP_VERSION,
        environment=settings.ENVIRONMENT,
        checks=checks,
    )

    if not healthy:
        logger.warning(f"Health check failed: {checks}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
