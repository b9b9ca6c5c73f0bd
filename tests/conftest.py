"""Shared fixtures and helpers for the reconciliation test suite."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_bank_recon.models.transaction import (
    LedgerRecord,
    StatementRecord,
    TransactionKind,
)


def make_ledger(
    id: str,
    amount: str,
    txn_date: date,
    kind: TransactionKind = TransactionKind.DEBIT,
) -> LedgerRecord:
    return LedgerRecord(id=id, amount=Decimal(amount), kind=kind, date=txn_date)


def make_statement(
    id: str,
    amount: str,
    txn_date: date,
    origin: str = "bank_A.csv",
) -> StatementRecord:
    return StatementRecord(id=id, amount=Decimal(amount), date=txn_date, origin=origin)


def write_csv(path: Path, header: str, rows: list[str]) -> Path:
    """Write a small CSV file and return its path."""
    path.write_text("\n".join([header, *rows]) + "\n", encoding="utf-8")
    return path


LEDGER_HEADER = "trxID,amount,type,transactionTime"
STATEMENT_HEADER = "unique_identifier,amount,date"


@pytest.fixture
def fixture_ledger() -> list[LedgerRecord]:
    """Ledger side of the reference scenario."""
    return [
        make_ledger("TXN001", "1500.50", date(2025, 7, 8), TransactionKind.DEBIT),
        make_ledger("TXN002", "250.75", date(2025, 7, 10), TransactionKind.CREDIT),
        make_ledger("TXN003", "100.00", date(2025, 7, 8), TransactionKind.CREDIT),
    ]


@pytest.fixture
def fixture_statements() -> list[StatementRecord]:
    """Statement side of the reference scenario, single origin."""
    return [
        make_statement("BS001", "1500.20", date(2025, 7, 8)),
        make_statement("BS002", "250.75", date(2025, 7, 10)),
        make_statement("BS003", "105.00", date(2025, 7, 8)),
    ]


@pytest.fixture
def sample_files(tmp_path: Path) -> dict[str, Path]:
    """Ledger and two statement feeds on disk, some rows outside 2025-06-10..2025-07-10."""
    ledger = write_csv(
        tmp_path / "system_data.csv",
        LEDGER_HEADER,
        [
            "TXN001,1500.50,DEBIT,2025-07-08 10:15:00",
            "TXN002,250.75,CREDIT,2025-07-10 23:59:59",
            "TXN003,100.00,CREDIT,2025-07-08 08:00:00",
            "TXN004,42.00,DEBIT,2025-05-01 12:00:00",
        ],
    )
    bank_a = write_csv(
        tmp_path / "bank_A.csv",
        STATEMENT_HEADER,
        [
            "BS001,1500.20,2025-07-08",
            "BS003,105.00,2025-07-08",
        ],
    )
    bank_b = write_csv(
        tmp_path / "bank_B.csv",
        STATEMENT_HEADER,
        [
            "BB001,250.75,2025-07-10",
            "BB002,999.99,2025-06-15",
            "BB003,10.00,2025-08-01",
        ],
    )
    return {"ledger": ledger, "bank_a": bank_a, "bank_b": bank_b}
