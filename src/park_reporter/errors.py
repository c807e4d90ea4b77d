#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Error Taxonomy
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Exceptions raised across the reporter.

Each exception carries the classification the orchestrator needs to turn
it into a diagnostic line (stage, category, cause).
"""

from enum import Enum
from typing import Optional


class ReporterError(Exception):
    """Base exception for reporter failures."""

    category = "UNKNOWN"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ReporterError):
    """Raised when required configuration is missing or unparseable."""

    category = "CONFIG"


class ResolutionReason(str, Enum):
    """Why a ledger target could not be resolved."""

    MISSING_MAPPING = "MISSING_MAPPING"
    NO_ENTRY_FOR_YEAR = "NO_ENTRY_FOR_YEAR"


class ResolutionError(ReporterError):
    """Raised when no ledger can be resolved for the current year."""

    def __init__(self, message: str, reason: ResolutionReason, year: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.year = year

    @property
    def category(self) -> str:  # type: ignore[override]
        return self.reason.value


class SourceError(ReporterError):
    """Raised inside the status adapter when the upstream is unusable.

    Never escapes the adapter; it is converted into SOURCE_ERROR statuses.
    """

    category = "SOURCE"


class WriteCategory(str, Enum):
    """Cause categories for ledger write failures."""

    AUTH = "AUTH"
    NOT_FOUND = "NOT_FOUND"
    TRANSIENT = "TRANSIENT"
    SCHEMA = "SCHEMA"
    UNKNOWN = "UNKNOWN"


class WriteFailure(ReporterError):
    """Raised when rows could not be appended to the ledger."""

    def __init__(self, message: str, category: WriteCategory = WriteCategory.UNKNOWN):
        super().__init__(message)
        self.write_category = category

    @property
    def category(self) -> str:  # type: ignore[override]
        return self.write_category.value

    @property
    def retryable(self) -> bool:
        """Whether re-invoking the run later may succeed without operator action."""
        return self.write_category == WriteCategory.TRANSIENT
