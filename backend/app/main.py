"""
Scamwatch Backend API
FastAPI application for scam and phishing message analysis.
"""

import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.db import supabase_admin
from app.routers import analyze, scam_logs, trusted_contacts

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Scamwatch API",
    description="AI-powered scam and phishing detection for emails, SMS and calls",
    version="0.1.0",
)

# CORS: any origin unless CORS_ORIGINS narrows it.
# Credentials are only allowed with an explicit origin list.
cors_origins = list(settings.cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# ---------------------------------------------------------------------------
# Error envelope: {"error": ..., "details": ...}
# ---------------------------------------------------------------------------

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = {"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)}
    details = getattr(exc, "details", None)
    if details:
        body["details"] = details
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        # Drop the "body"/"query" prefix FastAPI puts on every location
        loc = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": ", ".join(messages)},
    )


# Include routers
app.include_router(analyze.router, prefix="/api/analyze", tags=["analyze"])
app.include_router(scam_logs.router, prefix="/api/scam-logs", tags=["scam-logs"])
app.include_router(trusted_contacts.router, prefix="/api/trusted-contacts", tags=["trusted-contacts"])


@app.on_event("startup")
async def log_startup() -> None:
    """
    Log where the API is listening and which classifier is configured.

    The port shown is taken from the ``HOST_PORT`` environment variable so
    that Docker-mapped ports are reported correctly. Defaults to 8000.
    """
    host_port = os.getenv("HOST_PORT", "8000")
    logger.info(
        "Scamwatch API running at http://localhost:%s (classifier: %s / %s)",
        host_port,
        settings.classifier_provider,
        settings.classifier_model,
    )


@app.get("/")
async def root():
    return {"message": "Scamwatch API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/db")
async def health_db():
    """
    Test the Supabase database connection.

    Executes a lightweight query (SELECT 1 row from scam_logs) with the
    service client. Returns 503 on failure.
    """
    if supabase_admin is None:
        raise HTTPException(
            status_code=503,
            detail="Database client unavailable: SUPABASE_SERVICE_KEY is not configured",
        )

    try:
        supabase_admin.table("scam_logs").select("id").limit(1).execute()
        return {"status": "ok", "database": "reachable"}
    except Exception as exc:
        logger.error(f"Database health check failed: {exc}")
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(exc)}",
        )
