# backend/beautycatalog/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI, Response

from . import __version__
from .core.config import settings
from .core.constants import BRAND_NAME
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.request_id import RequestIdMiddlewareASGI
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import base_services, categories, discovery, offerings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} catalog API starting up...")
    logger.info(f"Environment: {settings.environment}")
    init_db()
    yield
    logger.info(f"{BRAND_NAME} catalog API shutting down...")


app = FastAPI(
    title=settings.api_title,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

# Middleware runs bottom-up: request id is set before metrics are recorded
app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestIdMiddlewareASGI)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(categories.router)
api_v1.include_router(base_services.router)
api_v1.include_router(offerings.router)
api_v1.include_router(discovery.router)
app.include_router(api_v1)


@app.get("/health", include_in_schema=False)
def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": "beautycatalog", "version": __version__}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus exposition of HTTP, service and catalog sync metrics."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
