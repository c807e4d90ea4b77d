#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Resort Wait Time Logger
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Park Reporter: one-shot live status logger for resort facilities.

Fetches live wait times from themeparks.wiki for a fixed catalog of
facilities and appends them to a Google Sheet provisioned per calendar year.

Usage:
    python -m park_reporter run
    python -m park_reporter run --dry-run
    python -m park_reporter check
"""

__version__ = "1.0.0"
__author__ = "SIRIUS Alpha"

from .config import ReporterConfig
from .errors import ConfigurationError, ResolutionError, SourceError, WriteFailure
from .models import FacilityRef, FacilityStatus, LedgerRow, LedgerTarget, StatusCode, WriteResult
from .orchestrator import RunOutcome, RunState, run_report

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Config
    "ReporterConfig",
    # Models
    "FacilityRef",
    "FacilityStatus",
    "LedgerRow",
    "LedgerTarget",
    "StatusCode",
    "WriteResult",
    # Errors
    "ConfigurationError",
    "ResolutionError",
    "SourceError",
    "WriteFailure",
    # Orchestration
    "RunOutcome",
    "RunState",
    "run_report",
]
