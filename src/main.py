"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.build import router as build_router
from src.api.catalog import router as catalog_router
from src.api.health import router as health_router
from src.api.optimizer import router as optimizer_router
from src.api.tools import router as tools_router
from src.api.upgrade import router as upgrade_router
from src.config import settings
from src.core.cache import BoundedCache
from src.core.catalog.registry import GameDataRegistry
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import init_db
from src.services.build_service import BuildService
from src.services.catalog_service import CatalogService
from src.services.optimizer_service import ArmorOptimizerService
from src.services.upgrade_service import UpgradeService

setup_logging(settings.LOG_LEVEL, quiet_libraries=not settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    logger.info("Loading catalog from %s...", settings.DATA_DIR)
    event_bus = EventBus()
    registry = GameDataRegistry()
    catalog_service = CatalogService(registry, event_bus, settings.DATA_DIR)
    catalog_service.load()
    app.state.event_bus = event_bus
    app.state.registry = registry
    app.state.catalog_service = catalog_service

    app.state.optimizer_service = ArmorOptimizerService(
        registry, event_bus, BoundedCache(settings.CACHE_MAX_ENTRIES)
    )
    app.state.build_service = BuildService(registry)
    app.state.upgrade_service = UpgradeService(
        registry, event_bus, BoundedCache(settings.CACHE_MAX_ENTRIES)
    )
    logger.info("Services initialized.")

    yield

    logger.info("Shutting down...")
    event_bus.clear()


app = FastAPI(title="Dark Souls Build Planner", lifespan=lifespan)

app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(optimizer_router)
app.include_router(build_router)
app.include_router(upgrade_router)
app.include_router(tools_router)
