"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.build import router as build_router
from src.api.catalog import router as catalog_router
from src.api.health import router as health_router
from src.api.optimizer import router as optimizer_router
from src.api.tools import router as tools_router
from src.api.upgrade import router as upgrade_router
from src.core.cache import BoundedCache
from src.core.catalog.registry import GameDataRegistry
from src.core.event_bus import EventBus
from src.db.database import get_db
from src.db.models import Base
from src.services.build_service import BuildService
from src.services.catalog_service import CatalogService
from src.services.optimizer_service import ArmorOptimizerService
from src.services.upgrade_service import UpgradeService

DATA_DIR = Path(__file__).resolve().parent.parent / "src" / "data"


@pytest.fixture()
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture()
def registry() -> GameDataRegistry:
    """Registry loaded from the bundled JSON catalogs."""
    reg = GameDataRegistry()
    reg.load_from_dir(DATA_DIR)
    return reg


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(db_engine) -> Session:
    """Raw database session for direct DB assertions."""
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def app(db_engine, event_bus) -> FastAPI:
    """App with every router and service wired to the bundled catalog."""
    test_session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    def _override_get_db():
        db = test_session()
        try:
            yield db
        finally:
            db.close()

    registry = GameDataRegistry()
    catalog_service = CatalogService(registry, event_bus, DATA_DIR)
    catalog_service.load()

    application = FastAPI()
    for router in (
        health_router,
        catalog_router,
        optimizer_router,
        build_router,
        upgrade_router,
        tools_router,
    ):
        application.include_router(router)
    application.dependency_overrides[get_db] = _override_get_db

    application.state.event_bus = event_bus
    application.state.registry = registry
    application.state.catalog_service = catalog_service
    application.state.optimizer_service = ArmorOptimizerService(
        registry, event_bus, BoundedCache(10)
    )
    application.state.build_service = BuildService(registry)
    application.state.upgrade_service = UpgradeService(registry, event_bus, BoundedCache(10))
    return application


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return TestClient(app)
