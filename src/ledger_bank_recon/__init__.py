"""Ledger to bank statement reconciliation."""

__version__ = "0.1.0"
