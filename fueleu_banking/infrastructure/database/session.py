"""Database handle with connection pooling and transactional units of work"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fueleu_banking.config import Settings
from fueleu_banking.domain.exceptions import PersistenceError
from fueleu_banking.infrastructure.database.models import Base
from fueleu_banking.infrastructure.database.repositories import BankEntryRepository, ComplianceRepository

logger = logging.getLogger(__name__)


@dataclass
class SqlUnitOfWork:
    """Repositories bound to one session/transaction"""

    session: Session
    ledger: BankEntryRepository
    compliance: ComplianceRepository


class Database:
    """
    Owns the engine and session factory; injected into BankingService.

    Nothing connects until open() is called, and close() disposes the pool.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine_options = engine_options
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build a handle with pool sizing from settings"""
        options: dict = {"pool_pre_ping": True}  # Verify connections before using
        if settings.database_url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
        else:
            # Recycle after an hour to avoid stale connections
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=settings.db_pool_recycle_seconds,
            )
        return cls(settings.database_url, **options)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise PersistenceError("Database is not open")
        return self._engine

    def open(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_engine(self.url, **self.engine_options)
        self._sessionmaker = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False)
        logger.info("Database opened", extra={"dialect": self._engine.dialect.name})

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database closed")

    def create_schema(self) -> None:
        """Create banking tables if they do not exist"""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Schema creation failed: {e}") from e

    @contextmanager
    def unit_of_work(self, lock_ship_id: Optional[str] = None) -> Iterator[SqlUnitOfWork]:
        """
        Run a block in one transaction.

        Commits on normal exit, rolls back on any exception. SQLAlchemy errors
        are re-raised as PersistenceError.
        """
        if self._sessionmaker is None:
            raise PersistenceError("Database is not open")

        session = self._sessionmaker()
        try:
            uow = SqlUnitOfWork(
                session=session,
                ledger=BankEntryRepository(session),
                compliance=ComplianceRepository(session),
            )
            if lock_ship_id is not None:
                uow.compliance.lock_ship(lock_ship_id)
            yield uow
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Database operation failed: {e.__class__.__name__}") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()
