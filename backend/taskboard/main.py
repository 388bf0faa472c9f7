import logging
from contextlib import asynccontextmanager
from typing import Any
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.core.config import Settings, settings
from taskboard.core.database import engine
from taskboard.core.gate import EdgeGateMiddleware
from taskboard.api.auth import router as auth_router

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"
DEVELOPMENT_ENVIRONMENTS = ("development", "test")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_production_secrets(config: Settings) -> None:
    """Refuse to run outside development with the default secret key."""
    if config.environment in DEVELOPMENT_ENVIRONMENTS:
        return
    if config.secret_key == DEFAULT_SECRET_KEY:
        raise RuntimeError(
            "SECRET_KEY must be set in production. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )


def warn_unsigned_cookies(config: Settings) -> None:
    if config.environment in DEVELOPMENT_ENVIRONMENTS or config.verify_cookie_signature:
        return
    logger.warning(
        "Session cookie signatures are not verified (VERIFY_COOKIE_SIGNATURE=false); "
        "the suffix after '.' is ignored and only the token is checked against the store"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.log_level)
    validate_production_secrets(settings)
    warn_unsigned_cookies(settings)
    yield
    # Shutdown - release pooled connections
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Project management API",
    version="0.1.0",
    lifespan=lifespan,
)

# Edge gate: cheap cookie presence check for protected areas
app.add_middleware(
    EdgeGateMiddleware,
    protected_prefixes=settings.protected_prefixes,
    cookie_name=settings.session_cookie_name,
    sign_in_path=settings.sign_in_path,
    callback_param=settings.callback_param,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/api")


@app.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "version": "0.1.0",
        "environment": settings.environment,
    }
