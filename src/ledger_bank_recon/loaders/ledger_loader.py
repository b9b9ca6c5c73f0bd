"""
Ledger CSV loader.
Parses the internal system transaction export into ledger records.
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union
import logging

import pandas as pd

from ..models.transaction import LedgerRecord, TransactionKind
from ..config import ReconConfig
from ..utils.exceptions import LoadError
from .common import in_window, parse_amount, parse_date, read_csv_frame

logger = logging.getLogger(__name__)


class LedgerLoader:
    """
    Loader for the internal ledger CSV export.

    Timestamps are normalized to calendar days so they compare directly with
    statement dates. Any malformed row aborts the load.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the loader with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()
        self.settings = self.config.input.ledger
        self.column_mappings = self.settings.get("column_mappings", {})

    def load_file(
        self,
        file_path: Union[str, Path],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[LedgerRecord]:
        """
        Load ledger records dated within [start, end].

        Args:
            file_path: Path to the ledger CSV
            start: First day to keep (inclusive), open if None
            end: Last day to keep (inclusive), open if None

        Returns:
            Ledger records in file order

        Raises:
            LoadError: If the file or any row cannot be parsed
        """
        logger.info(f"Loading ledger file: {file_path}")

        columns = self._columns()
        df = read_csv_frame(file_path, self.settings, list(columns.values()))

        source = str(file_path)
        records: list[LedgerRecord] = []
        seen_ids: set[str] = set()
        skipped = 0
        for idx, row in df.iterrows():
            row_number = int(idx) + 1
            record = self._normalize_row(row, row_number, source, columns)
            if record.id in seen_ids:
                raise LoadError(
                    f"Duplicate transaction id '{record.id}'", source=source, row=row_number
                )
            seen_ids.add(record.id)
            if in_window(record.date, start, end):
                records.append(record)
            else:
                skipped += 1

        logger.debug(f"Skipped {skipped} ledger records outside the date window")
        logger.info(f"Loaded {len(records)} ledger records from {file_path}")

        return records

    def _columns(self) -> dict[str, str]:
        return {
            "id": self.column_mappings.get("id", "trxID"),
            "amount": self.column_mappings.get("amount", "amount"),
            "kind": self.column_mappings.get("kind", "type"),
            "date": self.column_mappings.get("date", "transactionTime"),
        }

    def _normalize_row(
        self, row: pd.Series, row_number: int, source: str, columns: dict[str, str]
    ) -> LedgerRecord:
        """
        Convert a DataFrame row to a LedgerRecord.

        Args:
            row: Pandas Series representing a row
            row_number: 1-based data row number
            source: File the row came from
            columns: Logical field to CSV column mapping

        Returns:
            Ledger record
        """
        record_id = str(row[columns["id"]]).strip()
        if not record_id:
            raise LoadError("Missing transaction id", source=source, row=row_number)

        kind_text = str(row[columns["kind"]])
        try:
            kind = TransactionKind.parse(kind_text)
        except ValueError as e:
            raise LoadError(
                f"Invalid transaction type '{kind_text}'", source=source, row=row_number
            ) from e

        return LedgerRecord(
            id=record_id,
            amount=parse_amount(row[columns["amount"]], source, row_number),
            kind=kind,
            date=parse_date(
                row[columns["date"]],
                self.settings.get("date_format", "%Y-%m-%d %H:%M:%S"),
                source,
                row_number,
            ),
        )
