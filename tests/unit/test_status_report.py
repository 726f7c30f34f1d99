"""Unit tests for banking status reporting"""

from decimal import Decimal

from fueleu_banking.domain.models import BankEntry, CBStatus, ComplianceRecord, TransactionType
from fueleu_banking.domain.status import build_status_report, summarize_years


def test_status_after_banking_then_applying(service, seed):
    seed("R001", 2024, "1000")
    seed("R001", 2025, "-250")
    service.bank_surplus("R001", 2024, Decimal("400"))

    report = service.get_banking_status("R001", 2024)
    assert report.exists is True
    assert report.status is CBStatus.SURPLUS
    assert report.current_cb == Decimal("600")
    assert report.totals.total_banked == Decimal("400")
    assert report.totals.available_banked == Decimal("400")

    service.apply_banked_surplus("R001", 2025, Decimal("250"))

    report = service.get_banking_status("R001", 2024)
    assert report.totals.total_banked == Decimal("400")
    assert report.totals.total_applied == Decimal("250")
    assert report.totals.available_banked == Decimal("150")
    assert [e.year for e in report.this_year] == [2024]
    assert [e.year for e in report.other_years] == [2025]
    assert len(report.all_history) == 2
    assert report.all_history[0].transaction_type is TransactionType.APPLY


def test_status_for_deficit_year(service, seed):
    seed("R001", 2025, "-250")

    report = service.get_banking_status("R001", 2025)

    assert report.status is CBStatus.DEFICIT
    assert report.totals.available_banked == Decimal("0")
    assert report.all_history == []


def test_status_without_compliance_record_is_not_an_error(service):
    report = service.get_banking_status("R404", 2030)

    assert report.exists is False
    assert report.totals is None
    assert "Please compute CB first" in report.message


def test_neutral_classification():
    assert CBStatus.classify(Decimal("0")) is CBStatus.NEUTRAL
    assert CBStatus.classify(Decimal("0.01")) is CBStatus.SURPLUS
    assert CBStatus.classify(Decimal("-0.01")) is CBStatus.DEFICIT


def test_other_years_grouped_with_subtotals():
    history = [
        BankEntry(ship_id="S", year=2026, amount_gco2eq=Decimal("-40"), id=5),
        BankEntry(ship_id="S", year=2023, amount_gco2eq=Decimal("100"), id=4),
        BankEntry(ship_id="S", year=2024, amount_gco2eq=Decimal("-30"), id=3),
        BankEntry(ship_id="S", year=2023, amount_gco2eq=Decimal("-20"), id=2),
        BankEntry(ship_id="S", year=2024, amount_gco2eq=Decimal("70"), id=1),
    ]
    record = ComplianceRecord(ship_id="S", year=2024, cb_gco2eq=Decimal("5"))

    report = build_status_report(record, history, Decimal("80"))

    assert [e.id for e in report.this_year] == [3, 1]
    assert [e.id for e in report.other_years] == [5, 4, 2]
    assert [(s.year, s.banked, s.applied, s.transactions) for s in report.other_years_by_year] == [
        (2023, Decimal("100"), Decimal("20"), 2),
        (2026, Decimal("0"), Decimal("40"), 1),
    ]
    assert report.totals.total_banked == Decimal("170")
    assert report.totals.total_applied == Decimal("90")


def test_summarize_years_empty():
    assert summarize_years([]) == []
