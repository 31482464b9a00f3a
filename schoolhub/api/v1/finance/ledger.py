"""Pure ledger arithmetic: payment status derivation and per-fee / per-student totals."""

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from schoolhub.core.enums import FeeStatus

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce DB/JSON numbers to a 2-place Decimal. None counts as zero."""
    if value is None:
        return ZERO.quantize(CENTS)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS)


def sum_amounts(amounts: Iterable) -> Decimal:
    total = ZERO
    for amount in amounts:
        total += to_money(amount)
    return total.quantize(CENTS)


def derive_fee_status(total_paid: Decimal, fee_amount: Decimal) -> FeeStatus:
    """
    PENDING when nothing has been paid, PARTIAL while below the fee amount,
    PAID once the fee amount is reached. Overpayment stays PAID.
    """
    total_paid = to_money(total_paid)
    if total_paid <= ZERO:
        return FeeStatus.PENDING
    if total_paid < to_money(fee_amount):
        return FeeStatus.PARTIAL
    return FeeStatus.PAID


def fee_position(fee_amount, payment_amounts: Iterable) -> Tuple[Decimal, Decimal, FeeStatus]:
    """(paid_amount, balance, status) for one student fee. Balance is negative under overpayment."""
    paid = sum_amounts(payment_amounts)
    amount = to_money(fee_amount)
    return paid, (amount - paid).quantize(CENTS), derive_fee_status(paid, amount)


def stored_status_drifted(stored: Optional[str], derived: FeeStatus) -> bool:
    return (stored or FeeStatus.PENDING.value) != derived.value
