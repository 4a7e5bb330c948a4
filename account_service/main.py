"""FastAPI application wiring for the account service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import install_error_handlers
from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.contracts import AccountStore
from .domain.service import AccountService
from .repository import AccountRepository, ensure_schema
from .security.passwords import PasswordHasher
from .security.tokens import TokenService, load_signing_key

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_account_service(repository: AccountStore, settings: Settings) -> AccountService:
    """Assemble the use-case service; the signing key is loaded exactly once here."""
    tokens = TokenService(
        load_signing_key(settings),
        issuer=settings.jwt_issuer,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    return AccountService(repository, tokens, PasswordHasher.from_settings(settings))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        open=False,
    )
    pool.open()
    try:
        ensure_schema(pool)
        app.state.pool = pool
        app.state.account_service = build_account_service(AccountRepository(pool), settings)
        logger.info("%s %s started", settings.app_name, settings.version)
        yield
    finally:
        pool.close()
        logger.info("%s stopped", settings.app_name)


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
install_error_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


app.include_router(v1_router)


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
