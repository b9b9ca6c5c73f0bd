"""Loaders for ledger and bank statement files."""

from .common import parse_window
from .ledger_loader import LedgerLoader
from .statement_loader import StatementLoader, load_statement_feeds

__all__ = ["LedgerLoader", "StatementLoader", "load_statement_feeds", "parse_window"]
