"""Domain models - pure Python dataclasses representing banking entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class TransactionType(str, Enum):
    """Direction of a ledger entry relative to the ship's banked pool"""

    BANK = "BANK"  # deposit, positive amount
    APPLY = "APPLY"  # withdrawal, negative amount

    @classmethod
    def from_amount(cls, amount: Decimal) -> "TransactionType":
        """Derive the type from the sign of a ledger amount (legacy rows)"""
        if amount == 0:
            raise ValueError("Ledger amount must not be zero")
        return cls.BANK if amount > 0 else cls.APPLY


class CBStatus(str, Enum):
    """Sign classification of a ship-year compliance balance"""

    SURPLUS = "SURPLUS"
    DEFICIT = "DEFICIT"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def classify(cls, cb: Decimal) -> "CBStatus":
        if cb > 0:
            return cls.SURPLUS
        if cb < 0:
            return cls.DEFICIT
        return cls.NEUTRAL


@dataclass(frozen=True)
class BankEntry:
    """
    One immutable banking transaction.

    `id` and `created_at` are assigned by the ledger on append.
    `cb_before`/`cb_after` are None only for legacy rows.
    """

    ship_id: str
    year: int
    amount_gco2eq: Decimal
    cb_before: Optional[Decimal] = None
    cb_after: Optional[Decimal] = None
    transaction_type: Optional[TransactionType] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def normalized(self) -> "BankEntry":
        """Return a copy with transaction_type filled in from the amount sign"""
        if self.transaction_type is not None:
            return self
        return BankEntry(
            ship_id=self.ship_id,
            year=self.year,
            amount_gco2eq=self.amount_gco2eq,
            cb_before=self.cb_before,
            cb_after=self.cb_after,
            transaction_type=TransactionType.from_amount(self.amount_gco2eq),
            id=self.id,
            created_at=self.created_at,
        )


@dataclass
class ComplianceRecord:
    """Current CB for a (ship, year); positive = surplus, negative = deficit"""

    ship_id: str
    year: int
    cb_gco2eq: Decimal


@dataclass(frozen=True)
class BankingResult:
    """Successful outcome of bank_surplus / apply_banked_surplus"""

    operation: TransactionType
    ship_id: str
    year: int
    cb_before: Decimal
    cb_after: Decimal
    applied: Decimal  # signed change to CB
    bank_before: Decimal
    remaining_banked: Decimal
    entry: BankEntry
    message: str


@dataclass(frozen=True)
class BankingFailure:
    """Transport-friendly form of a rejected banking request"""

    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BankingTotals:
    """Ship-wide aggregates across every year"""

    total_banked: Decimal
    total_applied: Decimal
    available_banked: Decimal


@dataclass(frozen=True)
class YearSummary:
    """Banking activity attributed to a single compliance year"""

    year: int
    banked: Decimal
    applied: Decimal
    transactions: int


@dataclass(frozen=True)
class BankingStatusReport:
    """Audit-friendly breakdown returned by get_banking_status"""

    exists: bool
    ship_id: str
    year: int
    message: Optional[str] = None
    current_cb: Optional[Decimal] = None
    status: Optional[CBStatus] = None
    totals: Optional[BankingTotals] = None
    this_year: List[BankEntry] = field(default_factory=list)
    other_years: List[BankEntry] = field(default_factory=list)
    other_years_by_year: List[YearSummary] = field(default_factory=list)
    all_history: List[BankEntry] = field(default_factory=list)

    @classmethod
    def not_found(cls, ship_id: str, year: int) -> "BankingStatusReport":
        return cls(
            exists=False,
            ship_id=ship_id,
            year=year,
            message=f"No compliance record found for ship {ship_id} in year {year}. Please compute CB first.",
        )
