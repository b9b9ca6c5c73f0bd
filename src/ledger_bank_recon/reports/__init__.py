"""Report writers for reconciliation results."""

from .excel_generator import ExcelReportGenerator
from .json_writer import report_to_json, write_json_report

__all__ = ["ExcelReportGenerator", "report_to_json", "write_json_report"]
