"""Data models for reconciliation."""

from .transaction import (
    LedgerRecord,
    StatementRecord,
    TransactionKind,
    MatchResult,
    ReconciliationReport,
)

__all__ = [
    "LedgerRecord",
    "StatementRecord",
    "TransactionKind",
    "MatchResult",
    "ReconciliationReport",
]
