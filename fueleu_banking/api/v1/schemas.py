"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from fueleu_banking.domain.models import (
    BankEntry,
    BankingFailure,
    BankingResult,
    BankingStatusReport,
    CBStatus,
    TransactionType,
    YearSummary,
)

# Decimals go over the wire as JSON numbers
Gco2eq = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BankingOperationRequest(CamelModel):
    """Request body for POST /v1/banking/bank and /v1/banking/apply"""

    ship_id: str = Field(..., min_length=1, description="Ship identifier")
    year: int = Field(..., description="Compliance year")
    amount: Decimal = Field(..., description="Amount in gCO2eq; must be positive")


class BankEntryCreate(CamelModel):
    """Request body for POST /v1/banking/records (raw append)"""

    ship_id: str = Field(..., min_length=1)
    year: int
    amount_gco2eq: Decimal
    cb_before: Optional[Decimal] = None
    cb_after: Optional[Decimal] = None
    transaction_type: Optional[TransactionType] = None

    def to_domain(self) -> BankEntry:
        return BankEntry(
            ship_id=self.ship_id,
            year=self.year,
            amount_gco2eq=self.amount_gco2eq,
            cb_before=self.cb_before,
            cb_after=self.cb_after,
            transaction_type=self.transaction_type,
        )


class BankEntrySchema(CamelModel):
    """Single ledger entry"""

    id: Optional[int] = None
    ship_id: str
    year: int
    amount_gco2eq: Gco2eq
    cb_before: Optional[Gco2eq] = None
    cb_after: Optional[Gco2eq] = None
    transaction_type: Optional[TransactionType] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, entry: BankEntry) -> "BankEntrySchema":
        return cls(
            id=entry.id,
            ship_id=entry.ship_id,
            year=entry.year,
            amount_gco2eq=entry.amount_gco2eq,
            cb_before=entry.cb_before,
            cb_after=entry.cb_after,
            transaction_type=entry.transaction_type,
            created_at=entry.created_at,
        )


def entries_to_schema(entries: List[BankEntry]) -> List[BankEntrySchema]:
    return [BankEntrySchema.from_domain(e) for e in entries]


class BankingResultResponse(CamelModel):
    """Response for a committed bank/apply operation"""

    success: bool = True
    message: str
    operation: TransactionType
    ship_id: str
    year: int
    cb_before: Gco2eq
    applied: Gco2eq
    cb_after: Gco2eq
    bank_before: Gco2eq
    remaining_banked: Gco2eq
    entry: BankEntrySchema

    @classmethod
    def from_domain(cls, result: BankingResult) -> "BankingResultResponse":
        return cls(
            message=result.message,
            operation=result.operation,
            ship_id=result.ship_id,
            year=result.year,
            cb_before=result.cb_before,
            applied=result.applied,
            cb_after=result.cb_after,
            bank_before=result.bank_before,
            remaining_banked=result.remaining_banked,
            entry=BankEntrySchema.from_domain(result.entry),
        )


class ErrorResponse(CamelModel):
    """Body returned for rejected requests"""

    success: bool = False
    error: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_failure(cls, failure: BankingFailure) -> "ErrorResponse":
        context = {k: float(v) if isinstance(v, Decimal) else v for k, v in failure.context.items()}
        return cls(error=failure.code, message=failure.message, context=context)


class BankingTotalsSchema(CamelModel):
    total_banked: Gco2eq
    total_applied: Gco2eq
    available_banked: Gco2eq


class YearSummarySchema(CamelModel):
    year: int
    banked: Gco2eq
    applied: Gco2eq
    transactions: int

    @classmethod
    def from_domain(cls, summary: YearSummary) -> "YearSummarySchema":
        return cls(
            year=summary.year,
            banked=summary.banked,
            applied=summary.applied,
            transactions=summary.transactions,
        )


class EntryGroupSchema(CamelModel):
    transactions: int
    entries: List[BankEntrySchema]


class OtherYearsSchema(EntryGroupSchema):
    by_year: List[YearSummarySchema]


class BankingStatusResponse(CamelModel):
    """Response for GET /v1/banking/status/{ship_id}/{year}"""

    exists: bool
    ship_id: str
    year: int
    message: Optional[str] = None
    current_cb: Optional[Gco2eq] = Field(default=None, alias="currentCB")
    status: Optional[CBStatus] = None
    banking: Optional[BankingTotalsSchema] = None
    this_year: Optional[EntryGroupSchema] = None
    other_years: Optional[OtherYearsSchema] = None
    all_history: Optional[List[BankEntrySchema]] = None

    @classmethod
    def from_domain(cls, report: BankingStatusReport) -> "BankingStatusResponse":
        if not report.exists:
            return cls(exists=False, ship_id=report.ship_id, year=report.year, message=report.message)

        return cls(
            exists=True,
            ship_id=report.ship_id,
            year=report.year,
            current_cb=report.current_cb,
            status=report.status,
            banking=BankingTotalsSchema(
                total_banked=report.totals.total_banked,
                total_applied=report.totals.total_applied,
                available_banked=report.totals.available_banked,
            ),
            this_year=EntryGroupSchema(
                transactions=len(report.this_year),
                entries=entries_to_schema(report.this_year),
            ),
            other_years=OtherYearsSchema(
                transactions=len(report.other_years),
                entries=entries_to_schema(report.other_years),
                by_year=[YearSummarySchema.from_domain(s) for s in report.other_years_by_year],
            ),
            all_history=entries_to_schema(report.all_history),
        )
