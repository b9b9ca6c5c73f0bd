"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    LoadError,
    LoadErrorKind,
    ConfigurationError,
    ValidationError,
    ReportGenerationError,
)
from .logging_config import setup_logging, parse_log_level

__all__ = [
    "ReconciliationError",
    "LoadError",
    "LoadErrorKind",
    "ConfigurationError",
    "ValidationError",
    "ReportGenerationError",
    "setup_logging",
    "parse_log_level",
]
