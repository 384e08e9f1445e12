"""
Input validation for document authoring (``cashbook_kernel.domain.validation``).

Responsibility:
    Reject caller-supplied amounts that would make a stored document
    inconsistent: negative quantities, prices or amounts, and discounts
    larger than the amount they apply to.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.  Called by services BEFORE
    anything is written.  The aggregation engines never call these; they
    clamp defensively instead of raising.

Failure modes:
    - ``ValidationError`` subclasses from ``cashbook_kernel.exceptions``.
"""

from decimal import Decimal

from cashbook_kernel.exceptions import (
    DiscountExceedsAmountError,
    NegativeAmountError,
    NegativePriceError,
    NegativeQuantityError,
)


def validate_amount(field: str, value: Decimal) -> Decimal:
    if value < 0:
        raise NegativeAmountError(field, value)
    return value


def validate_discount(raw_amount: Decimal, discount_amount: Decimal) -> Decimal:
    """
    Check ``0 <= discount_amount <= raw_amount``.

    Returns:
        The validated discount.

    Raises:
        NegativeAmountError: If the discount is negative.
        DiscountExceedsAmountError: If the discount exceeds the amount.
    """
    validate_amount("discount_amount", discount_amount)
    if discount_amount > raw_amount:
        raise DiscountExceedsAmountError(raw_amount, discount_amount)
    return discount_amount


def validate_line(qty: Decimal, unit_price: Decimal) -> None:
    """Check a quantity/price pair (order item, job item, acceptance)."""
    if qty < 0:
        raise NegativeQuantityError(qty)
    if unit_price < 0:
        raise NegativePriceError(unit_price)
