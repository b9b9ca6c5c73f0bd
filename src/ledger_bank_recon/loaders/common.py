"""
Shared CSV helpers for the ledger and statement loaders.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, Union
import logging
import re

import pandas as pd

from ..utils.exceptions import LoadError, LoadErrorKind, ValidationError

logger = logging.getLogger(__name__)

WINDOW_DATE_FORMAT = "%Y-%m-%d"

# pandas tokenizer errors name the physical file line, header included
_BAD_LINE_PATTERN = re.compile(r"in line (\d+)")


def parse_window(start: str, end: str) -> tuple[date, date]:
    """
    Parse the reconciliation date window.

    Args:
        start: First day of the window, YYYY-MM-DD
        end: Last day of the window, YYYY-MM-DD

    Returns:
        Tuple of (start, end) dates

    Raises:
        ValidationError: If either date is malformed or start is after end
    """
    try:
        parsed_start = datetime.strptime(start, WINDOW_DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Error parsing given start date '{start}': {e}") from e

    try:
        parsed_end = datetime.strptime(end, WINDOW_DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Error parsing given end date '{end}': {e}") from e

    if parsed_start > parsed_end:
        raise ValidationError(
            f"Start date {parsed_start} is after end date {parsed_end}"
        )

    return parsed_start, parsed_end


def in_window(value: date, start: Optional[date], end: Optional[date]) -> bool:
    """Inclusive window check; a missing bound is open."""
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def read_csv_frame(
    file_path: Union[str, Path],
    settings: dict[str, Any],
    required_columns: list[str],
) -> pd.DataFrame:
    """
    Read a CSV file as text columns and check the header.

    Args:
        file_path: Path to the CSV file
        settings: Input settings (encoding, delimiter)
        required_columns: Columns that must be present

    Returns:
        DataFrame with every cell as a string

    Raises:
        LoadError: If the file cannot be read or a column is missing
    """
    source = str(file_path)

    try:
        df = pd.read_csv(
            file_path,
            encoding=settings.get("encoding", "utf-8"),
            delimiter=settings.get("delimiter", ","),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError:
        # A file without even a header holds no records
        logger.warning(f"CSV file is empty: {source}")
        return pd.DataFrame(columns=required_columns)
    except pd.errors.ParserError as e:
        logger.error(f"Malformed row in CSV file {source}: {e}")
        line = _BAD_LINE_PATTERN.search(str(e))
        raise LoadError(
            f"Malformed row: {e}",
            kind=LoadErrorKind.PARSE_FAILURE,
            source=source,
            row=int(line.group(1)) - 1 if line else None,
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read CSV file {source}: {e}")
        raise LoadError(
            f"Failed to read CSV file: {e}",
            kind=LoadErrorKind.FILE_UNREADABLE,
            source=source,
        ) from e

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise LoadError(
            f"Missing column(s): {', '.join(missing)}",
            kind=LoadErrorKind.MISSING_COLUMN,
            source=source,
        )

    return df


def parse_amount(value: Any, source: str, row: int) -> Decimal:
    """
    Parse an amount cell.

    Raises:
        LoadError: If the cell is blank or not a number
    """
    text = str(value).replace("$", "").replace(",", "").strip()
    if not text:
        raise LoadError("Missing amount", source=source, row=row)

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise LoadError(f"Invalid amount '{value}'", source=source, row=row) from e

    if not amount.is_finite():
        raise LoadError(f"Invalid amount '{value}'", source=source, row=row)
    return amount


def parse_date(value: Any, date_format: str, source: str, row: int) -> date:
    """
    Parse a date or timestamp cell down to its calendar day.

    Raises:
        LoadError: If the cell is blank or cannot be parsed
    """
    text = str(value).strip()
    if not text:
        raise LoadError("Missing date", source=source, row=row)

    try:
        return datetime.strptime(text, date_format).date()
    except ValueError:
        # Try pandas parser as fallback
        try:
            parsed = pd.to_datetime(text)
        except (ValueError, OverflowError) as e:
            raise LoadError(f"Invalid date '{text}'", source=source, row=row) from e
        if pd.isna(parsed):
            raise LoadError(f"Invalid date '{text}'", source=source, row=row)
        return parsed.date()
