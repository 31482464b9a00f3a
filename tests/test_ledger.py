"""Unit tests for payment status derivation and fee position arithmetic."""

from decimal import Decimal

import pytest

from schoolhub.api.v1.finance.ledger import (
    derive_fee_status,
    fee_position,
    stored_status_drifted,
    sum_amounts,
    to_money,
)
from schoolhub.core.enums import FeeStatus


@pytest.mark.parametrize(
    "paid, amount, expected",
    [
        ("0", "500", FeeStatus.PENDING),
        ("0.01", "500", FeeStatus.PARTIAL),
        ("499.99", "500", FeeStatus.PARTIAL),
        ("500", "500", FeeStatus.PAID),
        ("600", "500", FeeStatus.PAID),
    ],
)
def test_derive_fee_status(paid: str, amount: str, expected: FeeStatus) -> None:
    assert derive_fee_status(Decimal(paid), Decimal(amount)) is expected


def test_fee_position_overpayment_gives_negative_balance() -> None:
    paid, balance, status = fee_position(Decimal("500"), [Decimal("600")])
    assert paid == Decimal("600.00")
    assert balance == Decimal("-100.00")
    assert status is FeeStatus.PAID


def test_fee_position_without_payments() -> None:
    paid, balance, status = fee_position(Decimal("300"), [])
    assert paid == Decimal("0")
    assert balance == Decimal("300")
    assert status is FeeStatus.PENDING


def test_sum_amounts_accepts_floats_without_drift() -> None:
    # SQLite hands numerics back as floats
    assert sum_amounts([0.1, 0.2]) == Decimal("0.30")
    assert sum_amounts([]) == Decimal("0.00")


def test_to_money_quantizes_and_treats_none_as_zero() -> None:
    assert to_money(None) == Decimal("0.00")
    assert str(to_money("12.5")) == "12.50"


def test_stored_status_drift() -> None:
    assert not stored_status_drifted("PAID", FeeStatus.PAID)
    assert stored_status_drifted("PENDING", FeeStatus.PARTIAL)
    assert not stored_status_drifted(None, FeeStatus.PENDING)
