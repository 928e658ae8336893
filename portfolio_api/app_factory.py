"""Application factory: wires the database, repository and services into FastAPI."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_api.core.config import Settings, get_settings
from portfolio_api.core.observability import setup_logging
from portfolio_api.db.session import Database
from portfolio_api.repositories.sql_repository import SQLRepository
from portfolio_api.routers import auth as auth_router
from portfolio_api.routers import config as config_router
from portfolio_api.routers import profile as profile_router
from portfolio_api.routers import records as records_router
from portfolio_api.routers import sections as sections_router
from portfolio_api.routers.errors import register_error_handlers
from portfolio_api.services.allocator import IdentifierAllocator
from portfolio_api.services.config_service import ConfigurationService
from portfolio_api.services.identity_service import IdentityService
from portfolio_api.services.profile_service import ProfileService
from portfolio_api.services.record_service import RecordService
from portfolio_api.services.section_service import ContentSectionService
from portfolio_api.services.session_service import SessionService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    database: Database
    repository: SQLRepository
    allocator: IdentifierAllocator
    configs: ConfigurationService
    identity: IdentityService
    sections: ContentSectionService
    records: RecordService
    profiles: ProfileService
    sessions: SessionService


def build_services(database: Database, settings: Settings | None = None) -> Services:
    """Construct every service over one explicit Database handle."""
    settings = settings or get_settings()
    repository = SQLRepository(database)
    allocator = IdentifierAllocator(max_attempts=settings.allocation_max_attempts)
    configs = ConfigurationService(repository)
    return Services(
        database=database,
        repository=repository,
        allocator=allocator,
        configs=configs,
        identity=IdentityService(repository, allocator, configs),
        sections=ContentSectionService(repository, allocator, settings.system_account_email),
        records=RecordService(repository),
        profiles=ProfileService(repository),
        sessions=SessionService(repository, settings),
    )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = settings or get_settings()
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        database.init()
        if settings.app_env != "prod":
            database.create_all()
        logger.info("Portfolio API started", extra={"path": settings.public_base_url})
        try:
            yield
        finally:
            database.shutdown()

    app = FastAPI(title="Portfolio API", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = build_services(database, settings)

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:5173", "http://127.0.0.1:5173"})
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    register_error_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(sections_router.router)
    app.include_router(config_router.router)
    app.include_router(records_router.router)
    app.include_router(profile_router.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "database": database.is_ready}

    return app
