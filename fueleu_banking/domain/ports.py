"""Outbound ports the banking service depends on"""

from decimal import Decimal
from typing import ContextManager, List, Optional, Protocol

from fueleu_banking.domain.models import BankEntry, ComplianceRecord


class BankLedger(Protocol):
    """Append-only store of bank entries; listings are most-recent-first"""

    def append(self, entry: BankEntry) -> BankEntry: ...

    def list_by_ship_year(self, ship_id: str, year: int) -> List[BankEntry]: ...

    def list_all(self) -> List[BankEntry]: ...

    def list_by_ship(self, ship_id: str) -> List[BankEntry]: ...

    def sum_available(self, ship_id: str) -> Decimal: ...


class ComplianceStore(Protocol):
    """Read/write access to per ship-year compliance balances"""

    def get(self, ship_id: str, year: int) -> Optional[ComplianceRecord]: ...

    def save(self, record: ComplianceRecord) -> None: ...

    def lock_ship(self, ship_id: str) -> None: ...


class UnitOfWork(Protocol):
    ledger: BankLedger
    compliance: ComplianceStore


class BankingStore(Protocol):
    """
    Persistence handle injected into BankingService.

    unit_of_work() commits on normal exit and rolls back when the block
    raises, so a ledger append and a CB write-back land together or not at
    all. Passing lock_ship_id serializes writers for that ship.
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    def unit_of_work(self, lock_ship_id: Optional[str] = None) -> ContextManager[UnitOfWork]: ...
