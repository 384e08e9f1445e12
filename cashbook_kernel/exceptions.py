"""
Typed exception hierarchy for the cashbook core.

Every error carries a machine-readable ``code`` class attribute and its
context as attributes, so callers catch by type and API layers serialize
``e.code`` plus fields instead of parsing messages.

    CashbookError (base)
    |
    +-- ValidationError
    |   +-- DiscountExceedsAmountError
    |   +-- NegativeAmountError
    |   +-- NegativeQuantityError
    |   +-- NegativePriceError
    |
    +-- ConflictError
    |   +-- CodeConflictError
    |
    +-- NotFoundError
    |   +-- ProjectNotFoundError
    |   +-- WorkshopNotFoundError
    |   +-- WorkshopJobNotFoundError
    |   +-- WalletNotFoundError
    |
    +-- SequenceError
        +-- UnknownSequenceKeyError

Where each family is raised:

    ValidationError  -- by cashbook_kernel.domain.validation, BEFORE any
                        engine runs.  Engines never raise it; they clamp.
    ConflictError    -- only by the legacy scan/retry code allocator once
                        its retry ceiling is exhausted.  The counter-based
                        SequenceService cannot produce it.
    NotFoundError    -- by services performing their own existence checks.
                        Aggregation engines return zeros for unknown ids.
    SequenceError    -- by SequenceService for keys with no configured
                        format.
"""

from decimal import Decimal


class CashbookError(Exception):
    """
    Base exception for all cashbook errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "CASHBOOK_ERROR"


# Validation exceptions


class ValidationError(CashbookError):
    """Caller-supplied data is invalid."""

    code: str = "VALIDATION_ERROR"


class DiscountExceedsAmountError(ValidationError):
    """Discount is larger than the amount it applies to."""

    code: str = "DISCOUNT_EXCEEDS_AMOUNT"

    def __init__(self, raw_amount: Decimal, discount_amount: Decimal):
        self.raw_amount = str(raw_amount)
        self.discount_amount = str(discount_amount)
        super().__init__(
            f"Discount {discount_amount} exceeds amount {raw_amount}"
        )


class NegativeAmountError(ValidationError):
    """Amount must not be negative."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, field: str, value: Decimal):
        self.field = field
        self.value = str(value)
        super().__init__(f"{field} must not be negative: {value}")


class NegativeQuantityError(ValidationError):
    """Quantity must not be negative."""

    code: str = "NEGATIVE_QUANTITY"

    def __init__(self, value: Decimal):
        self.value = str(value)
        super().__init__(f"Quantity must not be negative: {value}")


class NegativePriceError(ValidationError):
    """Unit price must not be negative."""

    code: str = "NEGATIVE_PRICE"

    def __init__(self, value: Decimal):
        self.value = str(value)
        super().__init__(f"Unit price must not be negative: {value}")


# Conflict exceptions


class ConflictError(CashbookError):
    """A uniqueness constraint could not be satisfied."""

    code: str = "CONFLICT"


class CodeConflictError(ConflictError):
    """
    Code generation gave up after repeated unique-constraint collisions.

    Only the legacy scan/retry allocator raises this.
    """

    code: str = "CODE_CONFLICT"

    def __init__(self, sequence_key: str, attempts: int, last_code: str | None):
        self.sequence_key = sequence_key
        self.attempts = attempts
        self.last_code = last_code
        super().__init__(
            f"Could not allocate a unique code for {sequence_key} "
            f"after {attempts} attempts (last tried {last_code})"
        )


# Not-found exceptions


class NotFoundError(CashbookError):
    """Referenced entity does not exist (or is soft-deleted)."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(NotFoundError):
    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id):
        self.project_id = str(project_id)
        super().__init__(f"Project not found: {project_id}")


class WorkshopNotFoundError(NotFoundError):
    code: str = "WORKSHOP_NOT_FOUND"

    def __init__(self, workshop_id):
        self.workshop_id = str(workshop_id)
        super().__init__(f"Workshop not found: {workshop_id}")


class WorkshopJobNotFoundError(NotFoundError):
    code: str = "WORKSHOP_JOB_NOT_FOUND"

    def __init__(self, job_id):
        self.job_id = str(job_id)
        super().__init__(f"Workshop job not found: {job_id}")


class WalletNotFoundError(NotFoundError):
    code: str = "WALLET_NOT_FOUND"

    def __init__(self, wallet_id):
        self.wallet_id = str(wallet_id)
        super().__init__(f"Wallet not found: {wallet_id}")


# Sequence exceptions


class SequenceError(CashbookError):
    """Base exception for sequence allocation errors."""

    code: str = "SEQUENCE_ERROR"


class UnknownSequenceKeyError(SequenceError):
    """No code format is configured for the sequence key."""

    code: str = "UNKNOWN_SEQUENCE_KEY"

    def __init__(self, sequence_key: str):
        self.sequence_key = sequence_key
        super().__init__(f"No code format configured for sequence: {sequence_key}")
