"""
SequenceService -- per-key document code allocation via counter rows.

Responsibility:
    Issues unique, strictly increasing integers per sequence key (one key
    per document type: WORKSHOP_JOB, PROJECT, EXPENSE_VOUCHER, ...) and
    renders them as human-readable codes such as ``JG0001``.  One
    ``sequence_counters`` row per key is the single source of truth.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.  Called by
    authoring services (``WorkshopJobService``) before inserting the
    document that carries the code.

Invariants enforced:
    - Monotonicity: for a fixed key every allocation returns a value
      strictly greater than every value previously returned for that key.
    - Uniqueness: the increment is a single
      ``UPDATE ... SET value = value + 1 ... RETURNING value`` statement.
      The row lock it takes serializes concurrent allocators for the same
      key; the scan-existing-codes-and-add-one approach is FORBIDDEN here
      (see ``legacy_code_service`` for why).
    - Transactional: the increment is visible only when the caller's
      transaction commits.  Rollback leaves the counter unchanged.
    - Keys are independent: allocators for different keys never contend.

Failure modes:
    - UnknownSequenceKeyError: ``allocate`` for a key with no format.
    - IntegrityError during lazy counter creation is absorbed (the
      concurrent creator won); every other database error propagates.

Audit relevance:
    Allocations are logged at DEBUG with sequence_key, value and code.
    Bootstrapping from legacy codes is logged at INFO.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from sqlalchemy import BigInteger, String, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from cashbook_kernel.db.base import Base
from cashbook_kernel.domain.rules import SequenceFormat
from cashbook_kernel.exceptions import SequenceError, UnknownSequenceKeyError
from cashbook_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row holds the last value issued for one key.
    """

    __tablename__ = "sequence_counters"

    # Sequence key (e.g., "WORKSHOP_JOB", "PROJECT")
    key: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    # Last issued value
    value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )


@dataclass(frozen=True)
class AllocatedCode:
    """A freshly issued counter value and its rendered code."""

    value: int
    code: str


def format_code(fmt: SequenceFormat, value: int) -> str:
    """
    Render ``value`` as ``prefix`` + zero-padded digits.

    Values wider than ``fmt.width`` are rendered in full, never truncated:
    ``format_code(SequenceFormat("X", "X", 3), 1234) == "X1234"``.
    """
    return f"{fmt.prefix}{value:0{fmt.width}d}"


def extract_numeric_suffix(code: str | None, prefix: str) -> int | None:
    """
    Numeric part of a code after ``prefix``.

    Returns None when the code does not start with the prefix or the
    remainder is not a plain run of ASCII digits (e.g. ``"CC0NaN"``).
    """
    if not code or not code.startswith(prefix):
        return None
    suffix = code[len(prefix):]
    if not suffix or not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


class SequenceService:
    """
    Service for allocating document codes.

    Contract:
        ``allocate(key)`` returns the next value for ``key`` and its code.
        The increment joins the caller's transaction.

    Guarantees:
        - Strictly increasing, pairwise distinct values per key under any
          number of concurrent callers.
        - Bounded latency: at most one insert-if-absent and two UPDATE
          statements per allocation.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT guarantee gap-free codes.  A value whose transaction
          committed but whose document was later discarded is not reused.

    Usage:
        with session_scope() as session:
            sequences = SequenceService(session, config.sequence_formats)
            allocated = sequences.allocate("WORKSHOP_JOB")
            session.add(WorkshopJobModel(code=allocated.code, ...))
    """

    WORKSHOP_JOB = "WORKSHOP_JOB"
    PROJECT = "PROJECT"
    EXPENSE_CATEGORY = "EXPENSE_CATEGORY"
    INCOME_VOUCHER = "INCOME_VOUCHER"
    EXPENSE_VOUCHER = "EXPENSE_VOUCHER"
    TRANSFER = "TRANSFER"

    def __init__(self, session: Session, formats: Mapping[str, SequenceFormat] | None = None):
        """
        Args:
            session: SQLAlchemy session (should be in a transaction).
            formats: Sequence key -> rendering rule, usually
                ``get_active_config().sequence_formats``.
        """
        self._session = session
        self._formats = dict(formats or {})

    def format_for(self, key: str) -> SequenceFormat:
        """
        Raises:
            UnknownSequenceKeyError: If ``key`` has no configured format.
        """
        fmt = self._formats.get(key)
        if fmt is None:
            raise UnknownSequenceKeyError(key)
        return fmt

    def allocate(self, key: str) -> AllocatedCode:
        """
        Allocate the next value for ``key`` and render its code.

        Postconditions:
            - ``result.value`` is strictly greater than every value
              previously returned for ``key``.
            - ``result.code == format_code(format_for(key), result.value)``.

        Raises:
            UnknownSequenceKeyError: If ``key`` has no configured format.
        """
        fmt = self.format_for(key)
        with LogContext.bind(sequence_key=key):
            value = self.next_value(key)
            allocated = AllocatedCode(value=value, code=format_code(fmt, value))
            logger.debug("sequence_allocated", extra={"value": value, "code": allocated.code})
        return allocated

    def next_value(self, key: str) -> int:
        """
        Atomically increment the counter for ``key`` and return the new value.

        If the counter row does not exist yet it is created at the key's
        configured minimum (0 for unformatted keys) and the increment is
        retried once, so the first value is ``minimum + 1``.

        Preconditions:
            - The caller is within an active database transaction.

        Postconditions:
            - The counter row stays locked until the transaction completes.
        """
        value = self._increment(key)
        if value is None:
            self._ensure_counter(key, self._minimum_for(key))
            value = self._increment(key)
            if value is None:
                raise SequenceError(f"Sequence counter for {key} could not be created")

        # INVARIANT: counter values are strictly positive once issued
        assert value > 0, f"Sequence value must be strictly positive, got {value} for {key}"
        return value

    def current_value(self, key: str) -> int | None:
        """Last issued value for ``key``, or None if no counter exists."""
        return self._session.execute(
            select(SequenceCounter.value).where(SequenceCounter.key == key)
        ).scalar_one_or_none()

    def reset(self, key: str, value: int = 0) -> None:
        """
        Set the counter for ``key`` to ``value``.

        WARNING: Only for tests and migration scripts.  Moving a counter
        backwards in production re-issues codes that already exist.
        """
        self._ensure_counter(key, value)
        self._session.execute(
            update(SequenceCounter)
            .where(SequenceCounter.key == key)
            .values(value=value)
            .execution_options(synchronize_session=False)
        )
        self._session.flush()

    def initialize_sequences(self) -> None:
        """
        Create a counter at its minimum for every configured key.

        Existing counters are left untouched.
        """
        for key, fmt in sorted(self._formats.items()):
            self._ensure_counter(key, fmt.minimum)
        self._session.flush()

    def bootstrap_from_codes(self, key: str, codes: Iterable[str | None]) -> int:
        """
        Seed the counter for ``key`` from codes issued before counters existed.

        The counter is raised to the highest well-formed numeric suffix found
        among ``codes``.  Malformed codes are ignored.  The counter never
        moves backwards.

        Returns:
            The counter value after seeding.
        """
        fmt = self.format_for(key)
        highest = fmt.minimum
        skipped = 0
        for code in codes:
            number = extract_numeric_suffix(code, fmt.prefix)
            if number is None:
                skipped += 1
                continue
            highest = max(highest, number)

        self._ensure_counter(key, fmt.minimum)
        self._session.execute(
            update(SequenceCounter)
            .where(SequenceCounter.key == key, SequenceCounter.value < highest)
            .values(value=highest)
            .execution_options(synchronize_session=False)
        )
        value = self.current_value(key)
        logger.info(
            "sequence_bootstrapped",
            extra={"sequence_key": key, "value": value, "skipped_codes": skipped},
        )
        return value

    # ------------------------------------------------------------------

    def _minimum_for(self, key: str) -> int:
        fmt = self._formats.get(key)
        return fmt.minimum if fmt is not None else 0

    def _increment(self, key: str) -> int | None:
        return self._session.execute(
            update(SequenceCounter)
            .where(SequenceCounter.key == key)
            .values(value=SequenceCounter.value + 1)
            .returning(SequenceCounter.value)
            .execution_options(synchronize_session=False)
        ).scalar_one_or_none()

    def _ensure_counter(self, key: str, initial: int) -> None:
        """Insert the counter row unless it exists; a concurrent creator wins."""
        dialect = self._session.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = pg_insert if dialect == "postgresql" else sqlite_insert
            self._session.execute(
                insert(SequenceCounter)
                .values(key=key, value=initial)
                .on_conflict_do_nothing(index_elements=["key"])
            )
            return

        if self.current_value(key) is not None:
            return
        savepoint = self._session.begin_nested()
        try:
            self._session.add(SequenceCounter(key=key, value=initial))
            self._session.flush()
            savepoint.commit()
        except IntegrityError:
            logger.debug("sequence_counter_race_retry", extra={"sequence_key": key})
            savepoint.rollback()
