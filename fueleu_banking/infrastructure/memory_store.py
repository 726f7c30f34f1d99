"""In-memory banking store for tests and local seeding"""

import threading
from collections import defaultdict
from contextlib import contextmanager, nullcontext
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple

from fueleu_banking.domain.exceptions import PersistenceError
from fueleu_banking.domain.models import BankEntry, ComplianceRecord
from fueleu_banking.utils.decimal_utils import ZERO

RecordKey = Tuple[str, int]


def _most_recent_first(entries: List[BankEntry]) -> List[BankEntry]:
    return sorted(entries, key=lambda e: (e.created_at, e.id), reverse=True)


class InMemoryLedger:
    """Ledger view for one unit of work: committed entries plus staged ones"""

    def __init__(self, store: "InMemoryBankingStore"):
        self._store = store
        self.pending: List[BankEntry] = []

    def _visible(self) -> List[BankEntry]:
        return self._store._entries + self.pending

    def append(self, entry: BankEntry) -> BankEntry:
        created = replace(entry, id=self._store._next_id(), created_at=datetime.now(timezone.utc)).normalized()
        self.pending.append(created)
        return created

    def list_by_ship_year(self, ship_id: str, year: int) -> List[BankEntry]:
        return _most_recent_first([e for e in self._visible() if e.ship_id == ship_id and e.year == year])

    def list_all(self) -> List[BankEntry]:
        return _most_recent_first(self._visible())

    def list_by_ship(self, ship_id: str) -> List[BankEntry]:
        return _most_recent_first([e for e in self._visible() if e.ship_id == ship_id])

    def sum_available(self, ship_id: str) -> Decimal:
        return sum((e.amount_gco2eq for e in self._visible() if e.ship_id == ship_id), ZERO)


class InMemoryCompliance:
    """Compliance view for one unit of work: committed records plus staged saves"""

    def __init__(self, store: "InMemoryBankingStore"):
        self._store = store
        self.pending: Dict[RecordKey, ComplianceRecord] = {}

    def get(self, ship_id: str, year: int) -> Optional[ComplianceRecord]:
        key = (ship_id, year)
        record = self.pending.get(key) or self._store._records.get(key)
        return replace(record) if record is not None else None

    def save(self, record: ComplianceRecord) -> None:
        self.pending[(record.ship_id, record.year)] = replace(record)

    def lock_ship(self, ship_id: str) -> None:
        # Locking is taken by the store when the unit of work starts
        pass


class InMemoryUnitOfWork:
    def __init__(self, store: "InMemoryBankingStore"):
        self.ledger = InMemoryLedger(store)
        self.compliance = InMemoryCompliance(store)


class InMemoryBankingStore:
    """
    Dict/list backed BankingStore.

    Writes are staged per unit of work and published on commit, so a block
    that raises leaves no trace. Mutating units of work hold a per-ship lock.
    """

    def __init__(self):
        self._entries: List[BankEntry] = []
        self._records: Dict[RecordKey, ComplianceRecord] = {}
        self._ids = 0
        self._mutex = threading.Lock()
        self._ship_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._is_open = False

    def open(self) -> None:
        self._is_open = True

    def close(self) -> None:
        self._is_open = False

    def _next_id(self) -> int:
        with self._mutex:
            self._ids += 1
            return self._ids

    def _ship_lock(self, ship_id: str) -> threading.Lock:
        with self._mutex:
            return self._ship_locks[ship_id]

    def seed_compliance(self, ship_id: str, year: int, cb_gco2eq: Decimal) -> ComplianceRecord:
        """Create or overwrite a CB record, standing in for the CB computation"""
        record = ComplianceRecord(ship_id=ship_id, year=year, cb_gco2eq=Decimal(cb_gco2eq))
        with self._mutex:
            self._records[(ship_id, year)] = record
        return replace(record)

    @contextmanager
    def unit_of_work(self, lock_ship_id: Optional[str] = None) -> Iterator[InMemoryUnitOfWork]:
        if not self._is_open:
            raise PersistenceError("In-memory store is not open")

        guard = self._ship_lock(lock_ship_id) if lock_ship_id is not None else nullcontext()
        with guard:
            uow = InMemoryUnitOfWork(self)
            yield uow
            with self._mutex:
                self._entries.extend(uow.ledger.pending)
                self._records.update(uow.compliance.pending)
