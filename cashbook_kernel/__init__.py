"""
Cashbook Kernel

Persistence and allocation core of the cashbook ledger:
- Per-key document code allocation on atomic counter rows
- Soft-deleted, Decimal-only ledger records
- Read-only snapshot selection for the aggregation engines
"""

__version__ = "0.1.0"
