"""FastAPI application wiring for the activity service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import register_exception_handlers
from .api.routes import router as activities_router
from .clients.user_directory import UserDirectoryClient
from .config import get_settings
from .domain.service import ActivityService
from .events import KafkaEventPublisher
from .repository import ActivityRepository

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the ingestion service from its store, validator and publisher handles."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    validator = UserDirectoryClient.from_url(
        settings.user_service_url, settings.user_service_timeout_seconds
    )
    publisher = KafkaEventPublisher(
        settings.kafka_bootstrap_servers,
        max_block_ms=settings.kafka_max_block_ms,
        api_version=settings.kafka_api_version,
        retry_backoff_seconds=settings.kafka_retry_backoff_seconds,
    )
    app.state.pool = pool
    app.state.activity_service = ActivityService(
        ActivityRepository(pool),
        validator,
        publisher,
        exchange=settings.activity_exchange,
        routing_key=settings.activity_routing_key,
    )
    try:
        yield
    finally:
        publisher.close()
        validator.close()
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

# CORS for local frontend dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)
register_exception_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(activities_router)


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
