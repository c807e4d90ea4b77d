"""Ledger sink helpers for Park Reporter."""
from .writer import LedgerWriter, build_rows, classify_error

__all__ = ["LedgerWriter", "build_rows", "classify_error"]
