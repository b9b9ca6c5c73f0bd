"""
Bank statement CSV loader.
Parses one statement feed per file and merges several feeds in parallel.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Optional, Sequence, Union
import logging

import pandas as pd

from ..models.transaction import StatementRecord
from ..config import ReconConfig
from ..utils.exceptions import LoadError
from .common import in_window, parse_amount, parse_date, read_csv_frame

logger = logging.getLogger(__name__)


class StatementLoader:
    """
    Loader for bank statement CSV feeds.

    Every record is tagged with the path of the feed it came from, which is
    the key unmatched records are grouped under.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the loader with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()
        self.settings = self.config.input.statements
        self.column_mappings = self.settings.get("column_mappings", {})

    def load_file(
        self,
        file_path: Union[str, Path],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[StatementRecord]:
        """
        Load statement records dated within [start, end].

        Args:
            file_path: Path to the statement CSV
            start: First day to keep (inclusive), open if None
            end: Last day to keep (inclusive), open if None

        Returns:
            Statement records in file order

        Raises:
            LoadError: If the file or any row cannot be parsed
        """
        logger.info(f"Loading statement file: {file_path}")

        origin = str(file_path)
        columns = {
            "id": self.column_mappings.get("id", "unique_identifier"),
            "amount": self.column_mappings.get("amount", "amount"),
            "date": self.column_mappings.get("date", "date"),
        }
        df = read_csv_frame(file_path, self.settings, list(columns.values()))

        records: list[StatementRecord] = []
        seen_ids: set[str] = set()
        skipped = 0
        for idx, row in df.iterrows():
            row_number = int(idx) + 1
            record = self._normalize_row(row, row_number, origin, columns)
            if record.id in seen_ids:
                raise LoadError(
                    f"Duplicate statement identifier '{record.id}'", source=origin, row=row_number
                )
            seen_ids.add(record.id)
            if in_window(record.date, start, end):
                records.append(record)
            else:
                skipped += 1

        logger.debug(f"Skipped {skipped} statement records outside the date window in {origin}")
        logger.info(f"Loaded {len(records)} statement records from {origin}")

        return records

    def _normalize_row(
        self, row: pd.Series, row_number: int, origin: str, columns: dict[str, str]
    ) -> StatementRecord:
        """Convert a DataFrame row to a StatementRecord."""
        record_id = str(row[columns["id"]]).strip()
        if not record_id:
            raise LoadError("Missing statement identifier", source=origin, row=row_number)

        return StatementRecord(
            id=record_id,
            amount=parse_amount(row[columns["amount"]], origin, row_number),
            date=parse_date(
                row[columns["date"]],
                self.settings.get("date_format", "%Y-%m-%d"),
                origin,
                row_number,
            ),
            origin=origin,
        )


def load_statement_feeds(
    file_paths: Sequence[Union[str, Path]],
    config: Optional[ReconConfig] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[StatementRecord]:
    """
    Load several statement feeds in parallel and merge them.

    Feeds are parsed independently on a thread pool. The merged list holds
    each feed's records in file order, feeds in the order given, whatever
    order the workers finish in. A failure in any feed aborts the whole load.

    Args:
        file_paths: Statement CSV paths
        config: Application configuration
        start: First day to keep (inclusive)
        end: Last day to keep (inclusive)

    Returns:
        Merged statement records

    Raises:
        LoadError: If any feed fails to load
    """
    config = config or ReconConfig()
    if not file_paths:
        return []

    loader = StatementLoader(config)
    max_workers = min(config.loading.max_workers, len(file_paths))
    logger.info(f"Loading {len(file_paths)} statement feed(s) with {max_workers} worker(s)")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map() yields in submission order and re-raises worker exceptions
        per_feed = list(
            executor.map(lambda path: loader.load_file(path, start, end), file_paths)
        )

    merged: list[StatementRecord] = []
    for records in per_feed:
        merged.extend(records)

    logger.info(f"Merged {len(merged)} statement records from {len(file_paths)} feed(s)")
    return merged
