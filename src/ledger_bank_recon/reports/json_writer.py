"""JSON serialization of reconciliation reports."""

from pathlib import Path
import json
import logging

from ..models.transaction import ReconciliationReport
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)


def report_to_json(report: ReconciliationReport, indent: int = 2) -> str:
    """
    Serialize a report to a JSON document.

    Args:
        report: Reconciliation report
        indent: Indentation width

    Returns:
        JSON text
    """
    return json.dumps(report.to_dict(), indent=indent)


def write_json_report(report: ReconciliationReport, output_path: Path, indent: int = 2) -> Path:
    """
    Write a report to a JSON file.

    Args:
        report: Reconciliation report
        output_path: Destination file
        indent: Indentation width

    Returns:
        Path to the written file

    Raises:
        ReportGenerationError: If the file cannot be written
    """
    logger.info(f"Writing JSON report: {output_path}")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_to_json(report, indent) + "\n", encoding="utf-8")
    except OSError as e:
        raise ReportGenerationError(f"Failed to write JSON report {output_path}: {e}") from e

    return output_path
