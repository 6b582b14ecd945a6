"""FastAPI application for the Pintu Kerja job marketplace.

Provides REST API endpoints wrapping the pintukerja package for:
- Registration, login and the signed-in account's moderation notice
- Admin account moderation (verify, reject, reopen, block, unblock)
- Employer verification requests and the admin activity log
- The job board, gated by each account's moderation state
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pintukerja import __version__
from pintukerja.config import get_cors_origins, get_log_level
from pintukerja.moderation.errors import ModerationError
from pintukerja.moderation.gate import AccountRestricted
from web.backend.app.routers import account, admin, auth, jobs

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pintu Kerja API",
    description=(
        "REST API for the Pintu Kerja job marketplace. "
        "Provides endpoints for accounts, admin moderation, "
        "verification requests and the job board."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


async def moderation_error_handler(request: Request, exc: ModerationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.message},
    )


async def account_restricted_handler(request: Request, exc: AccountRestricted) -> JSONResponse:
    return JSONResponse(status_code=403, content=exc.decision.to_dict())


app.add_exception_handler(ModerationError, moderation_error_handler)
app.add_exception_handler(AccountRestricted, account_restricted_handler)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(jobs.router)
app.include_router(account.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "Pintu Kerja API",
        "version": __version__,
        "description": "Pintu Kerja job marketplace REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
