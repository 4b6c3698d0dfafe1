"""Database connection and initialization"""

import logging
import os
from pathlib import Path

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from cardregistry.config import Config
from cardregistry.models.base import BaseModel

# import models so that their tables are registered on BaseModel.metadata
from cardregistry.models import account, card, issuer, person  # noqa: F401

logger = logging.getLogger(__name__)


class DatabaseConnection:
    engine: Engine
    session_local: sessionmaker[Session]

    def __init__(self, config: Config) -> None:
        url = make_url(config.database_url)
        if url.get_backend_name() == "sqlite":
            # Ensure the database folder exists.
            if url.database:
                os.makedirs(Path(url.database).parent, exist_ok=True)
            connect_args = {"check_same_thread": False}
        else:
            connect_args = {}
        self.engine = create_engine(config.database_url, connect_args=connect_args)
        # records outlive their session inside the in-process cache,
        # so loaded attributes must not be expired on commit
        self.session_local = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    def create_tables(self) -> None:
        """Create all database tables defined in models."""
        logger.info("Creating database tables...")
        BaseModel.metadata.create_all(bind=self.engine)
        logger.info("Database tables created.")

    def get_session(self) -> Session:
        """Return a new SQLAlchemy session."""
        return self.session_local()

    def dispose(self) -> None:
        self.engine.dispose()
