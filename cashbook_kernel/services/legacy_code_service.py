"""
Scan-and-retry code allocation (``cashbook_kernel.services.legacy_code_service``).

Responsibility:
    Reproduces how document codes were generated before counter rows
    existed: read every existing code for the prefix, take the highest
    numeric suffix, add one, insert, and retry when the unique constraint
    rejects the insert.  Kept so migrations and old import scripts behave
    as they did, and so ``SequenceService.bootstrap_from_codes`` has a
    documented counterpart.

Architecture position:
    Kernel > Services.  New code MUST use ``SequenceService``.

Why this is race-prone:
    Two transactions that scan at the same time compute the same "next"
    code.  One insert wins; the other hits the unique constraint and
    retries, and under sustained contention every retry can lose again.
    The retry ceiling bounds the latency, after which creation fails
    permanently with ``CodeConflictError`` rather than looping.

Failure modes:
    - CodeConflictError after ``max_retries`` rejected inserts.
    - UnknownSequenceKeyError for a key with no format.
    - Any non-IntegrityError database error propagates on the first
      attempt.
"""

from __future__ import annotations

from typing import Callable, Mapping, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cashbook_kernel.domain.rules import SequenceFormat
from cashbook_kernel.exceptions import CodeConflictError, UnknownSequenceKeyError
from cashbook_kernel.logging_config import LogContext, get_logger
from cashbook_kernel.services.sequence_service import extract_numeric_suffix, format_code

logger = get_logger("services.legacy_code")

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "ScanRetryCodeAllocator",
    "extract_numeric_suffix",
]


class ScanRetryCodeAllocator:
    """
    Allocate a code by scanning existing rows, then insert with retries.

    ``model`` must be a mapped class with a unique ``code`` column.
    ``build`` receives the candidate code and returns an unsaved instance.
    """

    def __init__(
        self,
        session: Session,
        formats: Mapping[str, SequenceFormat],
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self._session = session
        self._formats = dict(formats)
        self._max_retries = max_retries

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def next_candidate(self, fmt: SequenceFormat, model: type) -> str:
        """Highest well-formed existing suffix plus one, rendered."""
        highest = fmt.minimum
        codes = self._session.execute(
            select(model.code).where(model.code.like(f"{fmt.prefix}%"))
        ).scalars()
        for code in codes:
            number = extract_numeric_suffix(code, fmt.prefix)
            if number is not None and number > highest:
                highest = number
        return format_code(fmt, highest + 1)

    def create(self, key: str, model: type, build: Callable[[str], T]) -> T:
        """
        Insert a new ``model`` row carrying the next free code for ``key``.

        Each attempt runs inside a savepoint so a rejected insert does not
        abort the caller's transaction.

        Raises:
            CodeConflictError: If every attempt hit the unique constraint.
        """
        fmt = self._formats.get(key)
        if fmt is None:
            raise UnknownSequenceKeyError(key)

        last_code = ""
        with LogContext.bind(sequence_key=key):
            for attempt in range(1, self._max_retries + 1):
                last_code = self.next_candidate(fmt, model)
                entity = build(last_code)
                savepoint = self._session.begin_nested()
                try:
                    self._session.add(entity)
                    self._session.flush()
                    savepoint.commit()
                except IntegrityError:
                    savepoint.rollback()
                    logger.warning(
                        "legacy_code_conflict",
                        extra={"code": last_code, "attempt": attempt},
                    )
                    continue

                logger.debug(
                    "legacy_code_allocated",
                    extra={"code": last_code, "attempt": attempt},
                )
                return entity

        raise CodeConflictError(key, self._max_retries, last_code)
