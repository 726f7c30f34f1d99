"""Data access layer for bank entries and ship compliance balances"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fueleu_banking.domain.models import BankEntry, ComplianceRecord, TransactionType
from fueleu_banking.infrastructure.database.models import BankEntryRow, ShipComplianceRow
from fueleu_banking.utils.decimal_utils import GCO2EQ_QUANTUM, ZERO, to_decimal


def _to_entry(row: BankEntryRow) -> BankEntry:
    """Map a row to a domain entry, deriving the type for legacy rows"""
    entry = BankEntry(
        id=row.id,
        ship_id=row.ship_id,
        year=row.year,
        amount_gco2eq=to_decimal(row.amount_gco2eq),
        cb_before=to_decimal(row.cb_before) if row.cb_before is not None else None,
        cb_after=to_decimal(row.cb_after) if row.cb_after is not None else None,
        transaction_type=TransactionType(row.transaction_type) if row.transaction_type else None,
        created_at=row.created_at,
    )
    return entry.normalized()


class BankEntryRepository:
    """Repository for the append-only banking ledger"""

    def __init__(self, db: Session):
        self.db = db

    def append(self, entry: BankEntry) -> BankEntry:
        """Insert a new entry; id and created_at come from the database"""
        row = BankEntryRow(
            ship_id=entry.ship_id,
            year=entry.year,
            amount_gco2eq=entry.amount_gco2eq,
            cb_before=entry.cb_before,
            cb_after=entry.cb_after,
            transaction_type=entry.transaction_type.value if entry.transaction_type else None,
        )
        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return _to_entry(row)

    def list_by_ship_year(self, ship_id: str, year: int) -> List[BankEntry]:
        stmt = (
            select(BankEntryRow)
            .where(BankEntryRow.ship_id == ship_id, BankEntryRow.year == year)
            .order_by(BankEntryRow.created_at.desc(), BankEntryRow.id.desc())
        )
        return [_to_entry(row) for row in self.db.execute(stmt).scalars()]

    def list_all(self) -> List[BankEntry]:
        stmt = select(BankEntryRow).order_by(BankEntryRow.created_at.desc(), BankEntryRow.id.desc())
        return [_to_entry(row) for row in self.db.execute(stmt).scalars()]

    def list_by_ship(self, ship_id: str) -> List[BankEntry]:
        stmt = (
            select(BankEntryRow)
            .where(BankEntryRow.ship_id == ship_id)
            .order_by(BankEntryRow.created_at.desc(), BankEntryRow.id.desc())
        )
        return [_to_entry(row) for row in self.db.execute(stmt).scalars()]

    def sum_available(self, ship_id: str) -> Decimal:
        """Banked balance across all years: deposits minus withdrawals"""
        total = self.db.execute(
            select(func.sum(BankEntryRow.amount_gco2eq)).where(BankEntryRow.ship_id == ship_id)
        ).scalar_one()
        return to_decimal(total).quantize(GCO2EQ_QUANTUM) if total is not None else ZERO


class ComplianceRepository:
    """Repository for ship-year compliance balances"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, ship_id: str, year: int) -> Optional[ShipComplianceRow]:
        return self.db.execute(
            select(ShipComplianceRow).where(
                ShipComplianceRow.ship_id == ship_id,
                ShipComplianceRow.year == year,
            )
        ).scalar_one_or_none()

    def get(self, ship_id: str, year: int) -> Optional[ComplianceRecord]:
        row = self._get_row(ship_id, year)
        if row is None:
            return None
        return ComplianceRecord(ship_id=row.ship_id, year=row.year, cb_gco2eq=to_decimal(row.cb_gco2eq))

    def save(self, record: ComplianceRecord) -> None:
        """Upsert the CB for (ship, year)"""
        row = self._get_row(record.ship_id, record.year)
        if row is None:
            row = ShipComplianceRow(ship_id=record.ship_id, year=record.year, cb_gco2eq=record.cb_gco2eq)
            self.db.add(row)
        else:
            row.cb_gco2eq = record.cb_gco2eq
        self.db.flush()

    def lock_ship(self, ship_id: str) -> None:
        """
        Take row locks on every CB row of the ship until the transaction ends.

        The bank pool is ship-wide, so all years are locked, not just the one
        being changed. SQLite ignores FOR UPDATE and serializes writers itself.
        """
        self.db.execute(
            select(ShipComplianceRow.id)
            .where(ShipComplianceRow.ship_id == ship_id)
            .with_for_update()
        ).all()
