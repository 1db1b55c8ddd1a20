"""FastAPI application wiring for the account service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool
from redis import Redis

from .api.routes import router as v1_router
from .config import get_settings
from .domain.service import AccountService
from .messaging import RedisNotifier, connect_redis
from .repository import AccountRepository
from .security.passwords import PasswordHasher
from .security.tokens import TokenCodec

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, Redis, services) for the app lifecycle."""
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET_KEY must be set")
    tokens = TokenCodec(settings.jwt_secret)
    hasher = PasswordHasher(settings.bcrypt_cost)

    pool = ConnectionPool(settings.database_url, open=False)
    redis_client: Redis | None = None
    service: AccountService | None = None
    try:
        pool.open()
        repository = AccountRepository(
            pool,
            timeout=settings.database_timeout_seconds,
            statement_timeout_ms=settings.database_statement_timeout_ms,
        )
        repository.ensure_schema()

        redis_client = connect_redis(settings.redis_url, settings.redis_timeout_seconds)
        service = AccountService(
            repository,
            RedisNotifier(redis_client, channel_prefix=settings.redis_channel_prefix),
            tokens,
            hasher,
            token_ttl=timedelta(seconds=settings.jwt_ttl_seconds),
            welcome_topic=settings.welcome_email_topic,
        )
        app.state.pool = pool
        app.state.account_service = service
        logger.info("%s %s ready", settings.app_name, settings.version)
        yield
    finally:
        if service is not None:
            service.close()
        if redis_client is not None:
            redis_client.close()
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
