"""Banking service - transactional orchestration of the banking ledger and CB store"""

import logging
from decimal import Decimal
from typing import Any, Callable, List, Optional

from fueleu_banking.domain.banking import Transition, plan_apply, plan_bank
from fueleu_banking.domain.exceptions import BankingError, InvalidAmountError, InvalidEntryError, PersistenceError
from fueleu_banking.domain.models import (
    BankEntry,
    BankingResult,
    BankingStatusReport,
    ComplianceRecord,
    TransactionType,
)
from fueleu_banking.domain.ports import BankingStore
from fueleu_banking.domain.status import build_status_report
from fueleu_banking.infrastructure.observability.logging import log_banking_operation, log_banking_rejection
from fueleu_banking.infrastructure.observability.metrics import record_banking_outcome
from fueleu_banking.utils.decimal_utils import to_decimal, to_storable_gco2eq

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES = {
    TransactionType.BANK: "Surplus banked successfully",
    TransactionType.APPLY: "Banked surplus applied successfully",
}

Planner = Callable[..., Transition]

RAW_ENTRY = "RAW_ENTRY"


class BankingService:
    """
    Sole mutator of the banking ledger and of CB values for banking transitions.

    Stateless between calls: every operation opens its own unit of work on the
    injected store. Mutations lock the ship first, so two requests for the same
    ship (any year) never interleave between the reads and the write-back.
    """

    def __init__(self, store: BankingStore, request_id: str = "unknown"):
        self.store = store
        self.request_id = request_id

    # Ledger queries

    def get_bank_entries(self, ship_id: str, year: int) -> List[BankEntry]:
        with self.store.unit_of_work() as uow:
            return uow.ledger.list_by_ship_year(ship_id, year)

    def get_bank_records(self) -> List[BankEntry]:
        with self.store.unit_of_work() as uow:
            return uow.ledger.list_all()

    def get_ship_banking_history(self, ship_id: str) -> List[BankEntry]:
        with self.store.unit_of_work() as uow:
            return uow.ledger.list_by_ship(ship_id)

    def add_bank_entry(self, entry: BankEntry) -> BankEntry:
        """
        Append an entry without checking it against CB (migration/seeding).

        The entry must still be well-formed: non-empty ship, non-zero amount
        storable at 2 decimal places, and a transaction type that agrees with
        the sign when one is given.
        """
        try:
            to_store = _well_formed_entry(entry)
        except BankingError as e:
            log_banking_rejection(
                self.request_id, RAW_ENTRY, entry.ship_id, entry.year, entry.amount_gco2eq, e.code, e.message
            )
            raise

        with self.store.unit_of_work(lock_ship_id=entry.ship_id) as uow:
            created = uow.ledger.append(to_store)

        logger.info(
            "Raw bank entry added",
            extra={
                "request_id": self.request_id,
                "ship_id": created.ship_id,
                "year": created.year,
                "amount_gco2eq": str(created.amount_gco2eq),
            },
        )
        return created

    # Status

    def get_banking_status(self, ship_id: str, year: int) -> BankingStatusReport:
        """Informational; reports not-found instead of raising when CB is missing"""
        with self.store.unit_of_work() as uow:
            record = uow.compliance.get(ship_id, year)
            if record is None:
                return BankingStatusReport.not_found(ship_id, year)
            history = uow.ledger.list_by_ship(ship_id)
            available = uow.ledger.sum_available(ship_id)
        return build_status_report(record, history, available)

    # Transitions

    def bank_surplus(self, ship_id: str, year: int, amount: Any) -> BankingResult:
        """Move `amount` of surplus from the ship-year CB into the ship's bank"""
        return self._execute(TransactionType.BANK, plan_bank, ship_id, year, amount)

    def apply_banked_surplus(self, ship_id: str, year: int, amount: Any) -> BankingResult:
        """Draw `amount` from the ship's bank to offset the ship-year deficit"""
        return self._execute(TransactionType.APPLY, plan_apply, ship_id, year, amount)

    def _execute(
        self,
        operation: TransactionType,
        planner: Planner,
        ship_id: str,
        year: int,
        amount: Any,
    ) -> BankingResult:
        try:
            with self.store.unit_of_work(lock_ship_id=ship_id) as uow:
                record: Optional[ComplianceRecord] = uow.compliance.get(ship_id, year)
                available = uow.ledger.sum_available(ship_id)

                transition = planner(ship_id, year, record, amount, available)

                entry = uow.ledger.append(transition.to_entry())
                uow.compliance.save(
                    ComplianceRecord(ship_id=ship_id, year=year, cb_gco2eq=transition.cb_after)
                )
        except BankingError as e:
            record_banking_outcome(operation.value, "rejected")
            log_banking_rejection(self.request_id, operation.value, ship_id, year, amount, e.code, e.message)
            raise
        except PersistenceError:
            record_banking_outcome(operation.value, "failed")
            logger.exception(
                "Banking operation failed in persistence",
                extra={"request_id": self.request_id, "operation": operation.value, "ship_id": ship_id, "year": year},
            )
            raise

        record_banking_outcome(operation.value, "success", transition.amount)
        log_banking_operation(
            self.request_id,
            operation.value,
            ship_id,
            year,
            transition.amount,
            transition.cb_before,
            transition.cb_after,
            transition.bank_after,
        )

        return BankingResult(
            operation=operation,
            ship_id=ship_id,
            year=year,
            cb_before=transition.cb_before,
            cb_after=transition.cb_after,
            applied=transition.cb_delta,
            bank_before=transition.bank_before,
            remaining_banked=transition.bank_after,
            entry=entry,
            message=SUCCESS_MESSAGES[operation],
        )


def _storable(value: Optional[Any], field: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return to_storable_gco2eq(to_decimal(value))
    except ValueError as e:
        raise InvalidAmountError(f"Bank entry {field}: {e}", requested=value) from e


def _well_formed_entry(entry: BankEntry) -> BankEntry:
    if not entry.ship_id or not entry.ship_id.strip():
        raise InvalidEntryError("Bank entry must have a ship ID")

    try:
        amount = to_decimal(entry.amount_gco2eq)
    except ValueError as e:
        raise InvalidAmountError("Bank entry amount must be numeric", requested=entry.amount_gco2eq) from e
    if amount == 0:
        raise InvalidAmountError("Bank entry amount must not be zero", requested=amount)
    amount = _storable(amount, "amount")

    derived = TransactionType.from_amount(amount)
    if entry.transaction_type is not None and entry.transaction_type is not derived:
        raise InvalidEntryError(
            f"Transaction type {entry.transaction_type.value} does not match amount {amount}",
            transaction_type=entry.transaction_type.value,
            amount=amount,
        )

    return BankEntry(
        ship_id=entry.ship_id,
        year=entry.year,
        amount_gco2eq=amount,
        cb_before=_storable(entry.cb_before, "cbBefore"),
        cb_after=_storable(entry.cb_after, "cbAfter"),
        transaction_type=derived,
    )
