"""
Immutable rule values injected into kernel services and engines.

``SequenceFormat`` tells ``SequenceService`` how to render a counter value
as a document code; ``ClassificationRules`` carries the keyword tables the
income classifier consults.  Both are built by ``cashbook_config.loader``
from YAML and handed in by callers.  The kernel never reads configuration
files itself.
"""

from __future__ import annotations

from dataclasses import dataclass

INCOME_DEPOSIT = "DEPOSIT"
INCOME_PAYMENT = "PAYMENT"
INCOME_FINAL = "FINAL"

INCOME_CLASSES = (INCOME_DEPOSIT, INCOME_PAYMENT, INCOME_FINAL)


@dataclass(frozen=True)
class SequenceFormat:
    """
    Rendering rule for one sequence key.

    ``prefix`` + counter value zero-padded to ``width`` digits.  ``minimum``
    is the value a counter is created at; the first allocation returns
    ``minimum + 1``.
    """

    key: str
    prefix: str
    width: int
    minimum: int = 0

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"Sequence width must be >= 1, got {self.width} for {self.key}")
        if self.minimum < 0:
            raise ValueError(f"Sequence minimum must be >= 0, got {self.minimum} for {self.key}")


@dataclass(frozen=True)
class ClassificationRules:
    """
    Keyword tables for income classification.

    Keywords are matched as case-insensitive substrings after NFC
    normalization of both sides.  Deposit keywords
    are always checked before final-settlement keywords.
    """

    deposit_keywords: tuple[str, ...] = ("đặt cọc", "cọc")
    final_keywords: tuple[str, ...] = ("tất toán", "quyết toán")
    deposit_code: str = INCOME_DEPOSIT
    payment_code: str = INCOME_PAYMENT
    final_code: str = INCOME_FINAL


DEFAULT_CLASSIFICATION_RULES = ClassificationRules()
