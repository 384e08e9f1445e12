"""Read-only selectors for the cashbook kernel."""

from cashbook_kernel.selectors.base import BaseSelector
from cashbook_kernel.selectors.ledger_selector import LedgerSelector

__all__ = ["BaseSelector", "LedgerSelector"]
