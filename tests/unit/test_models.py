"""Unit tests for domain models and decimal helpers"""

from decimal import Decimal

import pytest

from fueleu_banking.domain.exceptions import NoSurplusError
from fueleu_banking.domain.models import BankEntry, TransactionType
from fueleu_banking.utils.decimal_utils import format_gco2eq, to_decimal, to_storable_gco2eq


def test_legacy_entry_type_derived_from_sign():
    deposit = BankEntry(ship_id="R1", year=2024, amount_gco2eq=Decimal("10")).normalized()
    withdrawal = BankEntry(ship_id="R1", year=2024, amount_gco2eq=Decimal("-10")).normalized()

    assert deposit.transaction_type is TransactionType.BANK
    assert withdrawal.transaction_type is TransactionType.APPLY


def test_stored_type_is_kept():
    entry = BankEntry(ship_id="R1", year=2024, amount_gco2eq=Decimal("10"), transaction_type=TransactionType.BANK)
    assert entry.normalized() is entry


def test_zero_amount_has_no_type():
    with pytest.raises(ValueError):
        TransactionType.from_amount(Decimal("0"))


def test_to_decimal_keeps_float_literal():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(" 12.50 ") == Decimal("12.50")
    assert to_decimal(7) == Decimal("7")


@pytest.mark.parametrize("value", ["abc", "inf", None, False, [1]])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_decimal(value)


def test_format_gco2eq():
    assert format_gco2eq(Decimal("1000")) == "1000.00"
    assert format_gco2eq(Decimal("-0.5")) == "-0.50"


def test_banking_error_to_failure():
    error = NoSurplusError("no surplus", cb=Decimal("-1"))
    failure = error.to_failure()

    assert failure.code == "NO_SURPLUS"
    assert failure.message == "no surplus"
    assert failure.context == {"cb": Decimal("-1")}


def test_to_storable_gco2eq():
    assert to_storable_gco2eq(Decimal("7")) == Decimal("7.00")
    assert to_storable_gco2eq(Decimal("-0.10")) == Decimal("-0.10")
    with pytest.raises(ValueError):
        to_storable_gco2eq(Decimal("0.001"))
    with pytest.raises(ValueError):
        to_storable_gco2eq(Decimal("-10000000000000"))
