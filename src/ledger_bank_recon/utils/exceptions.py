"""Custom exceptions for the reconciliation application."""

from enum import Enum
from typing import Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class LoadErrorKind(Enum):
    """Category of a loader failure."""

    FILE_UNREADABLE = "file_unreadable"
    MISSING_COLUMN = "missing_column"
    PARSE_FAILURE = "parse_failure"


class LoadError(ReconciliationError):
    """
    Error loading ledger or statement records.

    Carries the source file and, for row-level failures, the 1-based
    data row so the offending input can be located.
    """

    def __init__(
        self,
        message: str,
        kind: LoadErrorKind = LoadErrorKind.PARSE_FAILURE,
        source: Optional[str] = None,
        row: Optional[int] = None,
    ):
        self.kind = kind
        self.source = source
        self.row = row
        self.detail = message

        location = ""
        if source is not None:
            location = f"{source}"
            if row is not None:
                location += f", row {row}"
            location = f" [{location}]"

        super().__init__(f"{kind.value}: {message}{location}")


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ValidationError(ReconciliationError):
    """Data validation error."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating an output report."""

    pass
