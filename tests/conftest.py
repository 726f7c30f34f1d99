"""Pytest fixtures for testing"""

from decimal import Decimal
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from fueleu_banking.api.main import create_app
from fueleu_banking.domain.models import ComplianceRecord
from fueleu_banking.infrastructure.database.session import Database
from fueleu_banking.infrastructure.memory_store import InMemoryBankingStore
from fueleu_banking.services.banking_service import BankingService


@pytest.fixture
def memory_store() -> Generator[InMemoryBankingStore, None, None]:
    """Open in-memory store, closed after the test"""
    store = InMemoryBankingStore()
    store.open()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def service(memory_store: InMemoryBankingStore) -> BankingService:
    return BankingService(memory_store)


@pytest.fixture
def seed(memory_store: InMemoryBankingStore) -> Callable[[str, int, str], ComplianceRecord]:
    """Seed a CB record: seed("R001", 2024, "1000")"""

    def _seed(ship_id: str, year: int, cb: str) -> ComplianceRecord:
        return memory_store.seed_compliance(ship_id, year, Decimal(cb))

    return _seed


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    """SQLite-backed Database with banking tables created"""
    db = Database(f"sqlite:///{tmp_path / 'banking.db'}", connect_args={"check_same_thread": False})
    db.open()
    db.create_schema()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seed_db(database: Database) -> Callable[[str, int, str], None]:
    """Seed a CB record through the SQL compliance repository"""

    def _seed(ship_id: str, year: int, cb: str) -> None:
        with database.unit_of_work() as uow:
            uow.compliance.save(ComplianceRecord(ship_id=ship_id, year=year, cb_gco2eq=Decimal(cb)))

    return _seed


@pytest.fixture
def client(database: Database) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with test database"""
    app = create_app(store=database)
    with TestClient(app) as test_client:
        yield test_client
