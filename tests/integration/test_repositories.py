"""Integration tests for the SQLAlchemy ledger and compliance repositories"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import insert

from fueleu_banking.domain.exceptions import AmountExceedsSurplusError, InvalidAmountError, PersistenceError
from fueleu_banking.domain.models import BankEntry, ComplianceRecord, TransactionType
from fueleu_banking.infrastructure.database.models import BankEntryRow
from fueleu_banking.infrastructure.database.repositories import ComplianceRepository
from fueleu_banking.infrastructure.database.session import Database
from fueleu_banking.services.banking_service import BankingService

pytestmark = pytest.mark.integration


def test_append_assigns_id_and_created_at(database: Database):
    with database.unit_of_work() as uow:
        created = uow.ledger.append(
            BankEntry(
                ship_id="R001",
                year=2024,
                amount_gco2eq=Decimal("400"),
                cb_before=Decimal("1000"),
                cb_after=Decimal("600"),
                transaction_type=TransactionType.BANK,
            )
        )

    assert created.id is not None
    assert created.created_at is not None
    assert created.amount_gco2eq == Decimal("400")
    assert created.cb_after == Decimal("600")


def test_listings_order_and_filters(database: Database):
    with database.unit_of_work() as uow:
        for ship_id, year, amount in [
            ("R001", 2024, "100"),
            ("R002", 2024, "50"),
            ("R001", 2025, "-30"),
            ("R001", 2024, "20"),
        ]:
            uow.ledger.append(BankEntry(ship_id=ship_id, year=year, amount_gco2eq=Decimal(amount)).normalized())

    with database.unit_of_work() as uow:
        by_year = uow.ledger.list_by_ship_year("R001", 2024)
        by_ship = uow.ledger.list_by_ship("R001")
        everything = uow.ledger.list_all()
        available = uow.ledger.sum_available("R001")

    assert [e.amount_gco2eq for e in by_year] == [Decimal("20"), Decimal("100")]
    assert [e.amount_gco2eq for e in by_ship] == [Decimal("20"), Decimal("-30"), Decimal("100")]
    assert len(everything) == 4
    assert available == Decimal("90")


def test_sum_available_for_unknown_ship_is_zero(database: Database):
    with database.unit_of_work() as uow:
        assert uow.ledger.sum_available("NOBODY") == Decimal("0")


def test_legacy_rows_get_type_from_sign(database: Database):
    with database.engine.begin() as conn:
        conn.execute(
            insert(BankEntryRow),
            [
                {"ship_id": "OLD", "year": 2022, "amount_gco2eq": Decimal("80")},
                {"ship_id": "OLD", "year": 2023, "amount_gco2eq": Decimal("-30")},
            ],
        )

    history = BankingService(database).get_ship_banking_history("OLD")

    types = {e.year: e.transaction_type for e in history}
    assert types == {2022: TransactionType.BANK, 2023: TransactionType.APPLY}
    assert all(e.cb_before is None and e.cb_after is None for e in history)


def test_compliance_save_upserts(database: Database):
    with database.unit_of_work() as uow:
        uow.compliance.save(ComplianceRecord(ship_id="R001", year=2024, cb_gco2eq=Decimal("10")))
    with database.unit_of_work() as uow:
        uow.compliance.save(ComplianceRecord(ship_id="R001", year=2024, cb_gco2eq=Decimal("-5.25")))

    with database.unit_of_work() as uow:
        record = uow.compliance.get("R001", 2024)
        assert uow.compliance.get("R001", 2025) is None

    assert record.cb_gco2eq == Decimal("-5.25")


def test_service_round_trip_against_sqlite(database: Database, seed_db):
    seed_db("R001", 2024, "1000")
    seed_db("R001", 2025, "-250")
    service = BankingService(database)

    service.bank_surplus("R001", 2024, Decimal("400"))
    result = service.apply_banked_surplus("R001", 2025, Decimal("250"))

    assert result.cb_after == Decimal("0")
    assert result.remaining_banked == Decimal("150")
    report = service.get_banking_status("R001", 2024)
    assert report.current_cb == Decimal("600")
    assert report.totals.available_banked == Decimal("150")


def test_rejection_leaves_database_untouched(database: Database, seed_db):
    seed_db("R003", 2024, "50")
    service = BankingService(database)

    with pytest.raises(AmountExceedsSurplusError):
        service.bank_surplus("R003", 2024, Decimal("75"))

    assert service.get_bank_records() == []
    assert service.get_banking_status("R003", 2024).current_cb == Decimal("50")


def test_failed_write_back_rolls_back_ledger_append(database: Database, seed_db):
    seed_db("R050", 2024, "100")
    service = BankingService(database)

    with patch.object(ComplianceRepository, "save", side_effect=PersistenceError("disk full")):
        with pytest.raises(PersistenceError):
            service.bank_surplus("R050", 2024, Decimal("40"))

    assert service.get_bank_records() == []
    assert service.get_banking_status("R050", 2024).current_cb == Decimal("100")


def test_unit_of_work_requires_open_database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'closed.db'}")

    with pytest.raises(PersistenceError):
        with database.unit_of_work():
            pass


def test_sub_cent_amount_is_rejected_before_storage(database: Database, seed_db):
    seed_db("P001", 2024, "1000")
    service = BankingService(database)

    with pytest.raises(InvalidAmountError):
        service.bank_surplus("P001", 2024, Decimal("0.004"))
    with pytest.raises(InvalidAmountError):
        service.add_bank_entry(BankEntry(ship_id="P001", year=2024, amount_gco2eq=Decimal("0.004")))

    assert service.get_ship_banking_history("P001") == []
    assert service.get_banking_status("P001", 2024).current_cb == Decimal("1000")


def test_committed_state_matches_returned_result(database: Database, seed_db):
    seed_db("P002", 2024, "1000")
    service = BankingService(database)

    for _ in range(10):
        with pytest.raises(InvalidAmountError):
            service.bank_surplus("P002", 2024, Decimal("0.006"))
    results = [service.bank_surplus("P002", 2024, Decimal("0.01")) for _ in range(10)]

    report = service.get_banking_status("P002", 2024)
    history = service.get_ship_banking_history("P002")
    assert report.current_cb == results[-1].cb_after == Decimal("999.90")
    assert report.totals.available_banked == results[-1].remaining_banked == Decimal("0.10")
    assert report.current_cb + report.totals.available_banked == Decimal("1000")
    assert all(e.amount_gco2eq == Decimal("0.01") for e in history)
