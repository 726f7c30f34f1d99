"""Banking status report assembly"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from fueleu_banking.domain.models import (
    BankEntry,
    BankingStatusReport,
    BankingTotals,
    CBStatus,
    ComplianceRecord,
    YearSummary,
)
from fueleu_banking.utils.decimal_utils import ZERO


def summarize_years(entries: List[BankEntry]) -> List[YearSummary]:
    """Group entries by year with banked/applied subtotals, oldest year first"""
    banked: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    applied: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    counts: Dict[int, int] = defaultdict(int)

    for entry in entries:
        if entry.amount_gco2eq > 0:
            banked[entry.year] += entry.amount_gco2eq
        else:
            applied[entry.year] += -entry.amount_gco2eq
        counts[entry.year] += 1

    return [
        YearSummary(year=year, banked=banked[year], applied=applied[year], transactions=counts[year])
        for year in sorted(counts)
    ]


def build_status_report(
    record: ComplianceRecord,
    history: List[BankEntry],
    available_banked: Decimal,
) -> BankingStatusReport:
    """
    Assemble the status breakdown for record's (ship, year).

    `history` is every entry for the ship across all years, most-recent-first.
    Totals are ship-wide; entries are split into the requested year and the rest.
    """
    total_banked = sum((e.amount_gco2eq for e in history if e.amount_gco2eq > 0), ZERO)
    total_applied = sum((-e.amount_gco2eq for e in history if e.amount_gco2eq < 0), ZERO)

    this_year = [e for e in history if e.year == record.year]
    other_years = [e for e in history if e.year != record.year]

    return BankingStatusReport(
        exists=True,
        ship_id=record.ship_id,
        year=record.year,
        current_cb=record.cb_gco2eq,
        status=CBStatus.classify(record.cb_gco2eq),
        totals=BankingTotals(
            total_banked=total_banked,
            total_applied=total_applied,
            available_banked=available_banked,
        ),
        this_year=this_year,
        other_years=other_years,
        other_years_by_year=summarize_years(other_years),
        all_history=list(history),
    )
