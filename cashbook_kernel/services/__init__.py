"""Kernel services: document code allocation."""

from cashbook_kernel.services.legacy_code_service import ScanRetryCodeAllocator
from cashbook_kernel.services.sequence_service import (
    AllocatedCode,
    SequenceCounter,
    SequenceService,
    extract_numeric_suffix,
    format_code,
)

__all__ = [
    "AllocatedCode",
    "ScanRetryCodeAllocator",
    "SequenceCounter",
    "SequenceService",
    "extract_numeric_suffix",
    "format_code",
]
