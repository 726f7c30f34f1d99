"""Banking rules - validation and CB/bank transitions for a single request"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from fueleu_banking.domain.exceptions import (
    AmountExceedsDeficitError,
    AmountExceedsSurplusError,
    ComplianceNotFoundError,
    InsufficientBankedSurplusError,
    InvalidAmountError,
    NoBankedSurplusError,
    NoDeficitError,
    NoSurplusError,
)
from fueleu_banking.domain.models import BankEntry, ComplianceRecord, TransactionType
from fueleu_banking.utils.decimal_utils import format_gco2eq, to_decimal, to_storable_gco2eq


@dataclass(frozen=True)
class Transition:
    """Computed effect of an accepted banking request, not yet persisted"""

    operation: TransactionType
    ship_id: str
    year: int
    amount: Decimal
    cb_before: Decimal
    cb_after: Decimal
    bank_before: Decimal
    bank_after: Decimal

    @property
    def ledger_amount(self) -> Decimal:
        """Signed amount on the bank axis: +amount for BANK, -amount for APPLY"""
        return self.amount if self.operation is TransactionType.BANK else -self.amount

    @property
    def cb_delta(self) -> Decimal:
        """Signed change on the CB axis, opposite in sign to ledger_amount"""
        return self.cb_after - self.cb_before

    def to_entry(self) -> BankEntry:
        return BankEntry(
            ship_id=self.ship_id,
            year=self.year,
            amount_gco2eq=self.ledger_amount,
            cb_before=self.cb_before,
            cb_after=self.cb_after,
            transaction_type=self.operation,
        )


def parse_amount(value: Any, message: str) -> Decimal:
    """Coerce a requested amount, require it to be strictly positive and storable without rounding"""
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise InvalidAmountError(message, requested=value) from e
    if amount <= 0:
        raise InvalidAmountError(message, requested=amount)
    try:
        return to_storable_gco2eq(amount)
    except ValueError as e:
        raise InvalidAmountError(str(e), requested=amount) from e


def _require_record(record: Optional[ComplianceRecord], ship_id: str, year: int) -> ComplianceRecord:
    if record is None:
        raise ComplianceNotFoundError(
            f"No compliance record found for ship {ship_id} in year {year}. Please compute CB first.",
            ship_id=ship_id,
            year=year,
        )
    return record


def plan_bank(
    ship_id: str,
    year: int,
    record: Optional[ComplianceRecord],
    requested: Any,
    available_banked: Decimal,
) -> Transition:
    """
    Validate a bank request and compute the resulting balances.

    Rules, checked in order:
    - amount must be > 0 with at most 2 decimal places
    - a CB record must exist for (ship, year)
    - CB must be strictly positive
    - amount may not exceed the CB surplus

    Banking moves `amount` out of the ship-year CB and into the ship-wide
    pool, so CB can reach zero but never go below it.
    """
    amount = parse_amount(requested, "Amount must be positive. Only positive CB (surplus) can be banked")
    record = _require_record(record, ship_id, year)
    cb_before = record.cb_gco2eq

    if cb_before <= 0:
        raise NoSurplusError(
            f"Cannot bank surplus. Ship {ship_id} has CB of {format_gco2eq(cb_before)} gCO₂eq (≤ 0). "
            "Banking is only allowed when CB > 0.",
            cb=cb_before,
        )

    if amount > cb_before:
        raise AmountExceedsSurplusError(
            f"Cannot bank {format_gco2eq(amount)} gCO₂eq. "
            f"Ship {ship_id} only has {format_gco2eq(cb_before)} gCO₂eq surplus.",
            requested=amount,
            surplus=cb_before,
        )

    return Transition(
        operation=TransactionType.BANK,
        ship_id=ship_id,
        year=year,
        amount=amount,
        cb_before=cb_before,
        cb_after=cb_before - amount,
        bank_before=available_banked,
        bank_after=available_banked + amount,
    )


def plan_apply(
    ship_id: str,
    year: int,
    record: Optional[ComplianceRecord],
    requested: Any,
    available_banked: Decimal,
) -> Transition:
    """
    Validate an apply request and compute the resulting balances.

    Rules, checked in order:
    - amount must be > 0 with at most 2 decimal places
    - a CB record must exist for (ship, year)
    - CB must be strictly negative
    - the ship must have banked surplus available
    - amount may not exceed the available bank
    - amount may not exceed the deficit

    Excess is rejected, never clamped: CB can reach zero but never go above
    it, and the pool can reach zero but never go below it.
    """
    amount = parse_amount(requested, "Amount to apply must be positive")
    record = _require_record(record, ship_id, year)
    cb_before = record.cb_gco2eq

    if cb_before >= 0:
        raise NoDeficitError(
            f"Cannot apply banked surplus. Ship {ship_id} has CB of {format_gco2eq(cb_before)} gCO₂eq (≥ 0). "
            "Applying banked surplus is only allowed when CB < 0.",
            cb=cb_before,
        )

    if available_banked <= 0:
        raise NoBankedSurplusError(
            f"Ship {ship_id} has no banked surplus to apply.",
            available_banked=available_banked,
        )

    if amount > available_banked:
        raise InsufficientBankedSurplusError(
            f"Cannot apply {format_gco2eq(amount)} gCO₂eq. "
            f"Ship {ship_id} only has {format_gco2eq(available_banked)} gCO₂eq banked.",
            requested=amount,
            available_banked=available_banked,
        )

    deficit = abs(cb_before)
    if amount > deficit:
        raise AmountExceedsDeficitError(
            f"Cannot apply {format_gco2eq(amount)} gCO₂eq. "
            f"Ship {ship_id} only has a deficit of {format_gco2eq(deficit)} gCO₂eq.",
            requested=amount,
            deficit=deficit,
        )

    return Transition(
        operation=TransactionType.APPLY,
        ship_id=ship_id,
        year=year,
        amount=amount,
        cb_before=cb_before,
        cb_after=cb_before + amount,
        bank_before=available_banked,
        bank_after=available_banked - amount,
    )
