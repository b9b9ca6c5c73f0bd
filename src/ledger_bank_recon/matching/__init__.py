"""Matching engine and strategies."""

from .engine import ReconciliationEngine, reconcile
from .strategies import (
    MatchingStrategy,
    FirstFitStrategy,
    BestFitStrategy,
    STRATEGIES,
)

__all__ = [
    "ReconciliationEngine",
    "reconcile",
    "MatchingStrategy",
    "FirstFitStrategy",
    "BestFitStrategy",
    "STRATEGIES",
]
