"""
Inventory Microservice
Product records with race-free stock adjustment and low-stock reporting
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import subprocess
import time

from sqlalchemy.exc import OperationalError

from inventory_api.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from inventory_api.core_settings import get_settings
from inventory_api.api.errors import register_error_handlers
from inventory_api.api.routes import router as products_router
from inventory_api.infrastructure.db import engine, init_models

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVICE_DESCRIPTION = "Inventory management microservice"

settings = get_settings()

setup_logging(
    service_name=settings.SERVICE_NAME,
    level=settings.LOG_LEVEL,
    environment=settings.ENVIRONMENT,
    version=settings.SERVICE_VERSION,
)

logger = get_logger(__name__)

def run_migrations() -> None:
    logger.info("Running database migrations")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            check=False
        )
    except OSError as e:
        logger.error(f"Migration error: {e}")
        return
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")

def wait_for_database() -> None:
    """Create missing tables, retrying while the database is not reachable yet."""
    attempts = max(settings.DB_CONNECT_RETRIES, 1)
    for attempt in range(1, attempts + 1):
        try:
            init_models()
            logger.info(f"Database models initialized after {attempt} attempt(s)")
            return
        except OperationalError as e:
            logger.warning(f"Database not ready (attempt {attempt}/{attempts}): {e}")
            if attempt == attempts:
                raise
            time.sleep(settings.DB_CONNECT_RETRY_DELAY)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.SERVICE_NAME} version {settings.SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        run_migrations()

    try:
        wait_for_database()
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    logger.info(f"{settings.SERVICE_NAME} started successfully")

    yield

    logger.info(f"Shutting down {settings.SERVICE_NAME}")
    engine.dispose()

app = FastAPI(
    title=settings.SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

health_service = ServiceHealth(
    settings.SERVICE_NAME,
    settings.SERVICE_VERSION,
    engine,
    redis_url=settings.REDIS_URL,
    required_config=settings.database_settings(),
)
app.include_router(health_service.create_health_router())

app.include_router(products_router)

@app.get("/")
async def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }

@app.get("/info")
async def info():
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "products": "/api/products",
            "health": "/health",
            "ready": "/health/ready",
            "live": "/health/live",
            "metrics": "/metrics",
            "docs": "/api/docs"
        }
    }
