"""
Command-line interface for the ledger to bank statement reconciliation tool.
"""

from datetime import date
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import load_config, generate_default_config, validate_config, ReconConfig, STRATEGY_NAMES
from .loaders import LedgerLoader, StatementLoader, load_statement_feeds, parse_window
from .matching.engine import ReconciliationEngine
from .models.transaction import ReconciliationReport
from .reports.excel_generator import ExcelReportGenerator
from .reports.json_writer import report_to_json, write_json_report
from .utils.logging_config import setup_logging, parse_log_level

console = Console()


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Ledger to Bank Statement Reconciliation Tool."""
    pass


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.argument(
    "statement_files", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option("--start-date", required=True, help="First day of the window (YYYY-MM-DD)")
@click.option("--end-date", required=True, help="Last day of the window (YYYY-MM-DD)")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output JSON file path")
@click.option("--excel", type=click.Path(path_type=Path), help="Also write an Excel report")
@click.option(
    "--strategy",
    type=click.Choice(STRATEGY_NAMES),
    default=None,
    help="Override the pairing strategy",
)
@click.option(
    "--amount-epsilon",
    type=float,
    default=None,
    help="Override the amount match tolerance",
)
@click.option("--index-by-date", is_flag=True, help="Bucket statements by date before matching")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show summary without writing reports"
)
def reconcile(
    ledger_file: Path,
    statement_files: tuple[Path, ...],
    start_date: str,
    end_date: str,
    config: Optional[Path],
    output: Optional[Path],
    excel: Optional[Path],
    strategy: Optional[str],
    amount_epsilon: Optional[float],
    index_by_date: bool,
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile a ledger export with one or more bank statement feeds.

    LEDGER_FILE: Path to the internal ledger CSV
    STATEMENT_FILES: Paths to the bank statement CSVs
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        recon_config = load_config(config)
        _configure_logging(recon_config, verbose)

        # Apply command-line overrides
        if strategy is not None:
            recon_config.matching.strategy = strategy
        if amount_epsilon is not None:
            recon_config.matching.amount_match_epsilon = amount_epsilon
        if index_by_date:
            recon_config.matching.index_by_date = True
        validate_config(recon_config)

        period_start, period_end = parse_window(start_date, end_date)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Loading ledger...", total=None)
            ledger = LedgerLoader(recon_config).load_file(ledger_file, period_start, period_end)
            progress.update(task, completed=True)

            task = progress.add_task("Loading statement feeds...", total=None)
            statements = load_statement_feeds(
                statement_files, recon_config, period_start, period_end
            )
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            report = ReconciliationEngine(recon_config).reconcile(ledger, statements)
            progress.update(task, completed=True)

        _display_summary(report)

        if dry_run:
            console.print("\n[yellow]Dry run - no report written[/yellow]")
            return

        indent = recon_config.output.json_report.indent
        if output is None:
            console.print("\n[bold]Final Reconciliation Result (JSON):[/bold]")
            click.echo(report_to_json(report, indent))
        else:
            write_json_report(report, output, indent)
            console.print(f"\n[green]JSON report written: {output}[/green]")

        if excel is not None:
            ExcelReportGenerator(recon_config).generate_report(
                report,
                excel,
                ledger_filename=ledger_file.name,
                statement_filenames=[str(p) for p in statement_files],
                period_start=period_start,
                period_end=period_end,
            )
            console.print(f"[green]Excel report generated: {excel}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-ledger")
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option("--start-date", default=None, help="First day to keep (YYYY-MM-DD)")
@click.option("--end-date", default=None, help="Last day to keep (YYYY-MM-DD)")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_ledger(
    ledger_file: Path,
    start_date: Optional[str],
    end_date: Optional[str],
    config: Optional[Path],
):
    """
    Parse a ledger CSV and display its records.

    LEDGER_FILE: Path to the internal ledger CSV
    """
    try:
        recon_config = load_config(config)
        start, end = _optional_window(start_date, end_date)
        records = LedgerLoader(recon_config).load_file(ledger_file, start, end)

        table = Table(title=f"Ledger Records: {ledger_file.name}")
        table.add_column("ID")
        table.add_column("Date")
        table.add_column("Amount", justify="right")
        table.add_column("Type")

        for record in records[:20]:  # Show first 20
            table.add_row(record.id, str(record.date), f"{record.amount:,.2f}", record.kind.value)

        console.print(table)

        if len(records) > 20:
            console.print(f"\n... and {len(records) - 20} more records")

        console.print(f"\nTotal records: {len(records)}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {escape(str(e))}[/red]")
        sys.exit(1)


@main.command("parse-statements")
@click.argument(
    "statement_files", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option("--start-date", default=None, help="First day to keep (YYYY-MM-DD)")
@click.option("--end-date", default=None, help="Last day to keep (YYYY-MM-DD)")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_statements(
    statement_files: tuple[Path, ...],
    start_date: Optional[str],
    end_date: Optional[str],
    config: Optional[Path],
):
    """
    Parse bank statement CSVs and display their records.

    STATEMENT_FILES: Paths to the bank statement CSVs
    """
    try:
        recon_config = load_config(config)
        start, end = _optional_window(start_date, end_date)
        loader = StatementLoader(recon_config)

        total = 0
        for statement_file in statement_files:
            records = loader.load_file(statement_file, start, end)
            total += len(records)

            table = Table(title=f"Statement Records: {statement_file.name}")
            table.add_column("ID")
            table.add_column("Date")
            table.add_column("Amount", justify="right")

            for record in records[:20]:  # Show first 20
                table.add_row(record.id, str(record.date), f"{record.amount:,.2f}")

            console.print(table)

            if len(records) > 20:
                console.print(f"... and {len(records) - 20} more records")

        console.print(f"\nTotal records: {total}")

    except Exception as e:
        console.print(f"[red]Error parsing file: {escape(str(e))}[/red]")
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(report: ReconciliationReport) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(report.total_transactions))
    table.add_row("Matched Pairs", str(report.total_matched_transactions))
    table.add_row("Discrepant Pairs", str(report.discrepancy_count))
    table.add_row("Total Discrepancy Amount", f"{report.total_discrepancies_amount:,.2f}")
    table.add_row("Unmatched Ledger", str(report.unmatched_ledger_count))
    for origin, count in report.unmatched_statement_counts.items():
        table.add_row(f"Unmatched in {origin}", str(count))
    table.add_row("Match Rate", f"{report.match_rate:.1f}%")

    console.print(table)


def _configure_logging(config: ReconConfig, verbose: bool) -> None:
    """Reapply logging with the level, format and file from configuration."""
    level = logging.DEBUG if verbose else parse_log_level(config.logging.level)
    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(level, log_file=log_file, log_format=config.logging.format)


def _optional_window(
    start_date: Optional[str], end_date: Optional[str]
) -> tuple[Optional[date], Optional[date]]:
    """Parse a window where either bound may be left open."""
    if start_date and end_date:
        return parse_window(start_date, end_date)
    start = parse_window(start_date, start_date)[0] if start_date else None
    end = parse_window(end_date, end_date)[1] if end_date else None
    return start, end


if __name__ == "__main__":
    main()
