"""
Reconciliation engine pairing ledger records with bank statement records.
Implements greedy one-to-one matching and builds the reconciliation report.
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator, Optional, Sequence
import logging

from ..models.transaction import (
    LedgerRecord,
    StatementRecord,
    MatchResult,
    ReconciliationReport,
)
from ..config import ReconConfig
from .strategies import MatchingStrategy, STRATEGIES

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Reconciles ledger records against merged statement records.

    Each ledger record, in input order, takes at most one statement record
    chosen by the configured strategy. A statement record is consumed by at
    most one match. Leftover statement records are grouped by origin.
    """

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        strategy: Optional[MatchingStrategy] = None,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration (defaults when omitted)
            strategy: Explicit strategy overriding the configured one
        """
        self.config = config or ReconConfig()
        matching = self.config.matching

        self.amount_epsilon = Decimal(str(matching.amount_match_epsilon))
        self.discrepancy_min = Decimal(str(matching.discrepancy_min))
        self.discrepancy_max = Decimal(str(matching.discrepancy_max))
        self.index_by_date = matching.index_by_date
        self.strategy = strategy or self._build_strategy()

        if self.discrepancy_max >= self.amount_epsilon:
            logger.debug(
                f"Discrepancy upper bound {self.discrepancy_max} cannot apply: "
                f"no pair differing by {self.amount_epsilon} or more is matched"
            )

    def _build_strategy(self) -> MatchingStrategy:
        """Create the strategy named in configuration."""
        strategy_name = self.config.matching.strategy
        strategy_cls = STRATEGIES[strategy_name]
        logger.debug(f"Using matching strategy: {strategy_name}")
        return strategy_cls(amount_epsilon=self.amount_epsilon)

    def reconcile(
        self,
        ledger: Sequence[LedgerRecord],
        statements: Sequence[StatementRecord],
    ) -> ReconciliationReport:
        """
        Perform reconciliation between ledger and statement records.

        Args:
            ledger: Ledger records, already restricted to the date window
            statements: Statement records from every feed, merged

        Returns:
            Reconciliation report for this run
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(ledger)} ledger records, "
            f"{len(statements)} statement records"
        )

        consumed = [False] * len(statements)
        date_index = self._index_by_date(statements) if self.index_by_date else None

        matches: list[MatchResult] = []
        unmatched_ledger: list[LedgerRecord] = []
        total_discrepancies = Decimal("0")

        for ledger_record in ledger:
            candidates = self._candidates(ledger_record, statements, consumed, date_index)
            position = self.strategy.select(ledger_record, candidates)

            if position is None:
                unmatched_ledger.append(ledger_record)
                continue

            statement_record = statements[position]
            consumed[position] = True

            difference = abs(ledger_record.amount - statement_record.amount)
            is_discrepancy = self._is_discrepancy(difference)
            if is_discrepancy:
                total_discrepancies += difference

            matches.append(
                MatchResult(
                    ledger_record=ledger_record,
                    statement_record=statement_record,
                    absolute_difference=difference,
                    is_discrepancy=is_discrepancy,
                )
            )
            logger.debug(
                f"Matched {ledger_record.id} with {statement_record.id} "
                f"({statement_record.origin}), difference {difference}"
            )

        unmatched_statements = self._group_unmatched_statements(statements, consumed)

        report = ReconciliationReport(
            total_transactions=len(ledger) + len(statements),
            total_matched_transactions=len(matches),
            total_discrepancies_amount=total_discrepancies,
            unmatched_ledger=unmatched_ledger,
            unmatched_statements=unmatched_statements,
            matches=matches,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(matches)} matches, "
            f"{len(unmatched_ledger)} ledger-only, "
            f"{report.total_unmatched_statements} statement-only across "
            f"{len(unmatched_statements)} origin(s)"
        )

        return report

    def _index_by_date(
        self, statements: Sequence[StatementRecord]
    ) -> dict[date, list[tuple[int, StatementRecord]]]:
        """
        Bucket statement records by date.

        Within a bucket records keep their input order, so first-fit picks
        the same partner as a full scan.
        """
        index: dict[date, list[tuple[int, StatementRecord]]] = defaultdict(list)
        for position, statement in enumerate(statements):
            index[statement.date].append((position, statement))
        return index

    def _candidates(
        self,
        ledger_record: LedgerRecord,
        statements: Sequence[StatementRecord],
        consumed: list[bool],
        date_index: Optional[dict[date, list[tuple[int, StatementRecord]]]],
    ) -> Iterator[tuple[int, StatementRecord]]:
        """Yield unconsumed statement records in input order."""
        if date_index is not None:
            pool = date_index.get(ledger_record.date, [])
        else:
            pool = enumerate(statements)

        for position, statement in pool:
            if not consumed[position]:
                yield position, statement

    def _is_discrepancy(self, difference: Decimal) -> bool:
        """Differences strictly inside the discrepancy band are reported."""
        return self.discrepancy_min < difference < self.discrepancy_max

    def _group_unmatched_statements(
        self,
        statements: Sequence[StatementRecord],
        consumed: list[bool],
    ) -> dict[str, list[StatementRecord]]:
        """
        Group statement records that were never consumed by origin.

        Args:
            statements: All statement records
            consumed: Consumption flag per statement record

        Returns:
            Mapping of origin to its unmatched records, in input order
        """
        grouped: dict[str, list[StatementRecord]] = {}
        for statement, is_consumed in zip(statements, consumed):
            if not is_consumed:
                grouped.setdefault(statement.origin, []).append(statement)
        return grouped


def reconcile(
    ledger: Sequence[LedgerRecord],
    statements: Sequence[StatementRecord],
    config: Optional[ReconConfig] = None,
) -> ReconciliationReport:
    """
    Reconcile ledger records against statement records.

    Args:
        ledger: Ledger records
        statements: Statement records
        config: Optional configuration, defaults otherwise

    Returns:
        Reconciliation report
    """
    return ReconciliationEngine(config).reconcile(ledger, statements)
