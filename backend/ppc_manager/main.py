"""
PPC Campaign Manager — FastAPI Backend
CRUD for simulated Amazon PPC campaigns, ad groups and keywords.
All data persisted to PostgreSQL. Every response uses the
{status, data} / {status, message} envelope the frontend expects.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from ppc_manager.config import get_settings
from ppc_manager.database import init_db, check_db_connection
from ppc_manager.errors import AppError, ConflictError
from ppc_manager.models import User
from ppc_manager.routers import ad_groups, campaigns, keywords

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


async def _bootstrap_default_user():
    """Create the configured stand-in user if it does not exist yet."""
    from ppc_manager.database import session_scope
    user_id = uuid.UUID(settings.default_user_id)
    async with session_scope() as db:
        result = await db.execute(select(User).where(User.id == user_id))
        if result.scalar_one_or_none():
            return
        db.add(User(id=user_id, email=settings.default_user_email.lower(), name="Demo User"))
        logger.info(f"Bootstrap: created default user {settings.default_user_email}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting PPC Campaign Manager...")
    try:
        await init_db()
        await _bootstrap_default_user()
        logger.info("Database initialized — all tables ready.")
    except Exception as e:
        logger.error(f"Startup failed (DB/init): {e}", exc_info=True)
        # Still yield so app can serve /api/health (degraded) and logs are visible
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="PPC Campaign Manager",
    description="Campaign, ad group and keyword management for simulated Amazon PPC campaigns",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error envelope ────────────────────────────────────────────────────

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"{type(exc).__name__}: {exc.message} [{request.method} {request.url.path} -> {exc.status_code}]")
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg')}" if loc else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    logger.warning(f"Request validation failed: {message} [{request.method} {request.url.path}]")
    return _error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error(404, f"Route {request.method} {request.url.path} not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.error(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    conflict = ConflictError("Resource conflicts with an existing record")
    return _error(conflict.status_code, conflict.message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error(500, "Internal server error")


# ── Register Routers ──────────────────────────────────────────────────
app.include_router(campaigns.router, prefix="/api/campaigns", tags=["Campaigns"])
app.include_router(ad_groups.router, prefix="/api/campaigns", tags=["Ad Groups"])
app.include_router(keywords.router, prefix="/api/campaigns", tags=["Keywords"])


@app.get("/api/health")
async def health_check():
    db_ok = await check_db_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": "PPC Campaign Manager",
        "database": "connected" if db_ok else "disconnected",
    }
