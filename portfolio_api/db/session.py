"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from portfolio_api.domain.errors import ConfigurationMissingError

Base = declarative_base()

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and session factory for one process.

    ``init()`` is called at startup and ``shutdown()`` releases pooled
    connections; every repository receives the instance explicitly.
    """

    def __init__(self, url: str, **engine_options):
        self.url = (url or "").strip()
        self.engine_options = engine_options
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise ConfigurationMissingError("Database used before init()")
        return self._engine

    def init(self) -> "Database":
        if self._engine is not None:
            return self
        if not self.url:
            raise ConfigurationMissingError("DATABASE_URL must be configured to use the SQL backend.")
        self._engine = create_engine(self.url, future=True, pool_pre_ping=True, **self.engine_options)
        self._sessionmaker = sessionmaker(bind=self._engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
        logger.info("Database engine ready for %s", self._engine.url.render_as_string(hide_password=True))
        return self

    def create_all(self) -> None:
        from . import models  # noqa: F401  # ensure models are imported for metadata

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        from . import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def shutdown(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")

    @property
    def is_ready(self) -> bool:
        return self._sessionmaker is not None

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self._sessionmaker is None:
            raise ConfigurationMissingError("Database used before init()")
        session: Session = self._sessionmaker()
        try:
            yield session
        finally:
            session.close()
