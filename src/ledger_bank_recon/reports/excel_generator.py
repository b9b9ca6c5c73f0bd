"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import ReconciliationReport, MatchResult, LedgerRecord
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
DISCREPANCY_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def generate_report(
        self,
        report: ReconciliationReport,
        output_path: Path,
        ledger_filename: str = "",
        statement_filenames: Sequence[str] = (),
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
    ) -> Path:
        """
        Generate the complete reconciliation workbook.

        Args:
            report: Reconciliation report
            output_path: Path for output file
            ledger_filename: Ledger file shown on the summary sheet
            statement_filenames: Statement feeds shown on the summary sheet
            period_start: First day of the reconciled window
            period_end: Last day of the reconciled window

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(
                wb, report, ledger_filename, statement_filenames, period_start, period_end
            )
        if sheets.matched.enabled:
            self._create_matched_sheet(wb, report.matches)
        if sheets.discrepancies.enabled:
            self._create_discrepancy_sheet(wb, [m for m in report.matches if m.is_discrepancy])
        if sheets.unmatched_ledger.enabled:
            self._create_unmatched_ledger_sheet(wb, report.unmatched_ledger)
        if sheets.unmatched_statements.enabled:
            self._create_unmatched_statements_sheet(wb, report)

        if not wb.sheetnames:
            raise ReportGenerationError("Every report sheet is disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        report: ReconciliationReport,
        ledger_filename: str,
        statement_filenames: Sequence[str],
        period_start: Optional[date],
        period_end: Optional[date],
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Ledger Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "Run Information"
        ws["A3"].font = Font(bold=True)

        period = ""
        if period_start or period_end:
            period = f"{period_start or '-'} to {period_end or '-'}"

        run_info = [
            ("Ledger File:", ledger_filename),
            ("Statement Files:", ", ".join(statement_filenames)),
            ("Reconciliation Date:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Period:", period),
            ("Config File:", self.config.config_file_path or "Default"),
            ("Strategy:", self.config.matching.strategy),
        ]

        row = 4
        for label, value in run_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = str(value)
            row += 1

        row += 1
        ws[f"A{row}"] = "Transaction Counts"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        count_data = [
            ("Total Transactions:", report.total_transactions),
            ("Matched Pairs:", report.total_matched_transactions),
            ("Discrepant Pairs:", report.discrepancy_count),
            ("Unmatched Ledger:", report.unmatched_ledger_count),
            ("Unmatched Statements:", report.total_unmatched_statements),
            ("Match Rate:", f"{report.match_rate:.1f}%"),
            ("Total Discrepancy Amount:", f"{report.total_discrepancies_amount:,.2f}"),
        ]
        for label, value in count_data:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Unmatched Statements by Origin"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        for origin, count in report.unmatched_statement_counts.items():
            ws[f"A{row}"] = origin
            ws[f"B{row}"] = count
            row += 1

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 48

    def _create_matched_sheet(self, wb: Workbook, matches: list[MatchResult]) -> None:
        """Create the matched pairs sheet."""
        ws = wb.create_sheet(self.sheet_config.matched.name)

        self._write_headers(
            ws,
            [
                "Ledger ID",
                "Ledger Date",
                "Ledger Amount",
                "Type",
                "Statement ID",
                "Statement Date",
                "Statement Amount",
                "Origin",
                "Difference",
                "Discrepancy",
            ],
        )

        for row_num, match in enumerate(matches, start=2):
            ledger = match.ledger_record
            statement = match.statement_record
            row_data = [
                ledger.id,
                ledger.date,
                float(ledger.amount),
                ledger.kind.value,
                statement.id,
                statement.date,
                float(statement.amount),
                statement.origin,
                float(match.absolute_difference),
                "Yes" if match.is_discrepancy else "No",
            ]
            fill = DISCREPANCY_FILL if match.is_discrepancy else MATCH_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_discrepancy_sheet(
        self, wb: Workbook, discrepancies: list[MatchResult]
    ) -> None:
        """Create the discrepant pairs sheet."""
        ws = wb.create_sheet(self.sheet_config.discrepancies.name)

        self._write_headers(
            ws,
            [
                "Ledger ID",
                "Statement ID",
                "Date",
                "Ledger Amount",
                "Statement Amount",
                "Difference",
                "Difference %",
                "Origin",
            ],
        )

        for row_num, match in enumerate(discrepancies, start=2):
            ledger = match.ledger_record
            statement = match.statement_record

            difference_pct = ""
            if ledger.amount:
                difference_pct = f"{(match.absolute_difference / abs(ledger.amount)) * 100:.2f}%"

            row_data = [
                ledger.id,
                statement.id,
                ledger.date,
                float(ledger.amount),
                float(statement.amount),
                float(match.absolute_difference),
                difference_pct,
                statement.origin,
            ]
            self._write_row(ws, row_num, row_data, DISCREPANCY_FILL)

        self._auto_fit_columns(ws)

    def _create_unmatched_ledger_sheet(
        self, wb: Workbook, unmatched: list[LedgerRecord]
    ) -> None:
        """Create the ledger-only sheet."""
        ws = wb.create_sheet(self.sheet_config.unmatched_ledger.name)

        self._write_headers(ws, ["Ledger ID", "Date", "Amount", "Type"])

        for row_num, record in enumerate(unmatched, start=2):
            row_data = [record.id, record.date, float(record.amount), record.kind.value]
            self._write_row(ws, row_num, row_data, UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_unmatched_statements_sheet(
        self, wb: Workbook, report: ReconciliationReport
    ) -> None:
        """Create the statement-only sheet, one block of rows per origin."""
        ws = wb.create_sheet(self.sheet_config.unmatched_statements.name)

        self._write_headers(ws, ["Origin", "Statement ID", "Date", "Amount"])

        row_num = 2
        for origin, records in report.unmatched_statements.items():
            for record in records:
                row_data = [origin, record.id, record.date, float(record.amount)]
                self._write_row(ws, row_num, row_data, UNMATCHED_FILL)
                row_num += 1

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self, ws: Worksheet, row_num: int, values: list, fill: PatternFill
    ) -> None:
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
