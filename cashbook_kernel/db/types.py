"""
Module: cashbook_kernel.db.types
Responsibility: Money helpers shared by the ORM models, the services and the
    engines.  Column precision itself comes from ``Base.type_annotation_map``
    (Decimal -> Numeric(38, 9)).
Architecture position: Kernel > DB.  MUST NOT import from models/, domain/,
    services/ or selectors/.

Invariants enforced:
    CRITICAL: No floats anywhere.  All monetary amounts are Decimal;
    ``to_money`` refuses float input.
"""

from decimal import Decimal

ZERO = Decimal("0")


def to_money(value: Decimal | int | str | None) -> Decimal:
    """
    Coerce a stored or caller-supplied amount to Decimal.

    ``None`` becomes zero (nullable amount columns read as 0).

    Raises:
        TypeError: If a float is passed.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        raise TypeError("Monetary amounts must not be floats")
    if isinstance(value, Decimal):
        return value
    return Decimal(value)
