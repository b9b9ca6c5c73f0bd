"""Data models for ledger records, statement records and reconciliation results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any


class TransactionKind(Enum):
    """Direction of a ledger transaction."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    @classmethod
    def parse(cls, value: str) -> "TransactionKind":
        """Parse a kind from raw text, case-insensitively."""
        return cls(value.strip().upper())


@dataclass(frozen=True)
class LedgerRecord:
    """
    Internal system-of-record transaction.

    The kind is carried through to the report but plays no part in matching.
    """

    id: str
    amount: Decimal
    kind: TransactionKind
    date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "trxID": self.id,
            "amount": float(self.amount),
            "type": self.kind.value,
            "transactionTime": self.date.isoformat(),
        }


@dataclass(frozen=True)
class StatementRecord:
    """Transaction reported by an external bank feed."""

    id: str
    amount: Decimal
    date: date
    # Identifier of the feed the record came from (the statement file path)
    origin: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "unique_identifier": self.id,
            "amount": float(self.amount),
            "date": self.date.isoformat(),
            "file_path": self.origin,
        }


@dataclass(frozen=True)
class MatchResult:
    """A ledger record paired with the statement record it consumed."""

    ledger_record: LedgerRecord
    statement_record: StatementRecord
    absolute_difference: Decimal
    is_discrepancy: bool = False

    @property
    def is_exact_match(self) -> bool:
        """True when both amounts are identical."""
        return self.absolute_difference == 0


@dataclass
class ReconciliationReport:
    """
    Aggregate outcome of a single reconciliation run.

    Built once by the engine and not modified afterwards.
    """

    total_transactions: int
    total_matched_transactions: int
    total_discrepancies_amount: Decimal
    unmatched_ledger: list[LedgerRecord] = field(default_factory=list)
    # origin -> unmatched statement records, in input order
    unmatched_statements: dict[str, list[StatementRecord]] = field(default_factory=dict)
    matches: list[MatchResult] = field(default_factory=list)

    @property
    def unmatched_ledger_count(self) -> int:
        return len(self.unmatched_ledger)

    @property
    def unmatched_statement_counts(self) -> dict[str, int]:
        """Number of unmatched statement records per origin."""
        return {origin: len(records) for origin, records in self.unmatched_statements.items()}

    @property
    def total_unmatched_statements(self) -> int:
        return sum(len(records) for records in self.unmatched_statements.values())

    @property
    def discrepancy_count(self) -> int:
        """Matched pairs whose difference fell inside the discrepancy band."""
        return sum(1 for m in self.matches if m.is_discrepancy)

    @property
    def match_rate(self) -> float:
        """Percentage of all records that ended up in a matched pair."""
        if self.total_transactions == 0:
            return 0.0
        return (self.total_matched_transactions * 2 / self.total_transactions) * 100

    def to_dict(self) -> dict[str, Any]:
        """Render the report in its published output shape."""
        return {
            "total_transactions": self.total_transactions,
            "total_matched_transactions": self.total_matched_transactions,
            "sys_unmatched_transactions_detail": {
                "total_system_trans_missing_bank": self.unmatched_ledger_count,
                "system_trans_missing_bank_list": [
                    record.to_dict() for record in self.unmatched_ledger
                ],
            },
            "bank_unmatched_transactions_detail": {
                origin: {
                    "this_bank_unmatched_trans_count": len(records),
                    "this_bank_unmatched_trans_list": [r.to_dict() for r in records],
                }
                for origin, records in self.unmatched_statements.items()
            },
            "total_discrepancies_amount": float(self.total_discrepancies_amount),
        }
