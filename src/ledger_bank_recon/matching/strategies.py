"""
Pairing strategies for ledger to statement reconciliation.
Each strategy decides which statement record a ledger record pairs with.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

from ..models.transaction import LedgerRecord, StatementRecord

DEFAULT_AMOUNT_MATCH_EPSILON = Decimal("0.50")


class MatchingStrategy(ABC):
    """
    Abstract base class for matching strategies.

    A strategy owns the candidate predicate and the tie-break policy. The
    engine owns consumption bookkeeping and aggregation, so strategies can be
    swapped without touching how the report is built.
    """

    def __init__(self, amount_epsilon: Decimal = DEFAULT_AMOUNT_MATCH_EPSILON):
        """
        Initialize with the amount tolerance.

        Args:
            amount_epsilon: Amount difference a pair must stay strictly below
        """
        self.amount_epsilon = amount_epsilon

    def is_candidate(self, ledger: LedgerRecord, statement: StatementRecord) -> bool:
        """Same calendar day and amounts closer than the epsilon."""
        return (
            ledger.date == statement.date
            and abs(ledger.amount - statement.amount) < self.amount_epsilon
        )

    @abstractmethod
    def select(
        self,
        ledger: LedgerRecord,
        candidates: Iterable[tuple[int, StatementRecord]],
    ) -> Optional[int]:
        """
        Pick the partner for a ledger record.

        Args:
            ledger: Ledger record being matched
            candidates: (position, statement) pairs of unconsumed statement
                records, in input order

        Returns:
            Position of the chosen statement record, or None if none qualifies
        """
        pass


class FirstFitStrategy(MatchingStrategy):
    """
    Accept the first eligible statement record in input order.

    No backtracking: a later, closer amount never displaces an earlier pick.
    """

    def select(
        self,
        ledger: LedgerRecord,
        candidates: Iterable[tuple[int, StatementRecord]],
    ) -> Optional[int]:
        for position, statement in candidates:
            if self.is_candidate(ledger, statement):
                return position
        return None


class BestFitStrategy(MatchingStrategy):
    """
    Accept the eligible statement record with the smallest amount difference.

    Ties go to the earliest record in input order. Still greedy per ledger
    record, not a global optimum.
    """

    def select(
        self,
        ledger: LedgerRecord,
        candidates: Iterable[tuple[int, StatementRecord]],
    ) -> Optional[int]:
        best_position: Optional[int] = None
        best_difference: Optional[Decimal] = None

        for position, statement in candidates:
            if not self.is_candidate(ledger, statement):
                continue
            difference = abs(ledger.amount - statement.amount)
            if best_difference is None or difference < best_difference:
                best_position = position
                best_difference = difference

        return best_position


STRATEGIES: dict[str, type[MatchingStrategy]] = {
    "first_fit": FirstFitStrategy,
    "best_fit": BestFitStrategy,
}
