#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Run Orchestrator
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
One-shot report run.

    START -> TARGET_RESOLVED -> STATUSES_FETCHED -> ROWS_WRITTEN -> DONE

Any state may move to FAILED. Configuration is checked before any network
call, the status fetch cannot fail the run, and a ledger write failure ends
the run without retrying.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .adapters import fetch_statuses
from .catalog import load_catalog, validate_catalog
from .config import ReporterConfig
from .errors import ConfigurationError, ReporterError
from .ledger import LedgerWriter, build_rows
from .models import FacilityRef, FacilityStatus, LedgerTarget
from .resolver import parse_year_mapping, resolve_target

LOG = logging.getLogger("park_reporter.orchestrator")


class RunState(str, Enum):
    START = "START"
    TARGET_RESOLVED = "TARGET_RESOLVED"
    STATUSES_FETCHED = "STATUSES_FETCHED"
    ROWS_WRITTEN = "ROWS_WRITTEN"
    DONE = "DONE"
    FAILED = "FAILED"


# Human label for the step attempted from each state
STEP_FROM_STATE = {
    RunState.START: "target resolution",
    RunState.TARGET_RESOLVED: "status fetch",
    RunState.STATUSES_FETCHED: "ledger write",
}


@dataclass(frozen=True)
class PreparedRun:
    """Validated inputs for a run, built before any network call."""

    catalog: Tuple[FacilityRef, ...]
    year_mapping: Dict[str, str]
    credentials: Dict[str, Any]


@dataclass
class RunOutcome:
    """Result of one run, mapped onto the process exit contract."""

    state: RunState = RunState.START
    failed_at: Optional[RunState] = None
    step: str = ""
    category: str = ""
    cause: str = ""
    target: Optional[LedgerTarget] = None
    statuses: List[FacilityStatus] = field(default_factory=list)
    rows_written: int = 0
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.state == RunState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def message(self) -> str:
        """Single diagnostic or summary line."""
        if not self.success:
            return f"FAILED at {self.step} [{self.category}]: {self.cause}"
        year = self.target.year if self.target else "?"
        if self.dry_run:
            return f"DRY RUN: {len(self.statuses)} rows prepared for {year}, nothing written"
        return f"Wrote {self.rows_written} rows to the {year} ledger"


def preflight(config: ReporterConfig, catalog: Optional[Sequence[FacilityRef]] = None) -> PreparedRun:
    """
    Validate catalog, year mapping, credentials and time zone.

    All problems are collected before raising so the operator sees them
    in one pass.

    Raises:
        ConfigurationError: If anything required is missing or malformed
    """
    issues = []
    refs: Tuple[FacilityRef, ...] = ()
    mapping: Dict[str, str] = {}
    credentials: Dict[str, Any] = {}

    try:
        if catalog is None:
            refs = load_catalog(config.catalog_file)
        else:
            refs = tuple(catalog)
            validate_catalog(refs)
    except ConfigurationError as e:
        issues.append(e.message)

    try:
        mapping = parse_year_mapping(config.ledger.yearly_sheet_ids)
    except ConfigurationError as e:
        issues.append(e.message)

    try:
        credentials = config.load_credentials()
    except ConfigurationError as e:
        issues.append(e.message)

    try:
        config.resort_tz()
    except ConfigurationError as e:
        issues.append(e.message)

    if issues:
        raise ConfigurationError("; ".join(issues))

    return PreparedRun(catalog=refs, year_mapping=mapping, credentials=credentials)


def _fail(outcome: RunOutcome, error: ReporterError, step: Optional[str] = None) -> RunOutcome:
    outcome.failed_at = outcome.state
    outcome.step = step or STEP_FROM_STATE.get(outcome.state, "run")
    outcome.state = RunState.FAILED
    outcome.category = error.category
    outcome.cause = error.message
    LOG.debug("Run failed from state %s [%s]", outcome.failed_at.value, outcome.category)
    return outcome


def run_report(
    config: ReporterConfig,
    catalog: Optional[Sequence[FacilityRef]] = None,
    now: Optional[datetime] = None,
    session=None,
    writer: Optional[LedgerWriter] = None,
    dry_run: bool = False,
) -> RunOutcome:
    """
    Execute one report run.

    Args:
        config: Frozen configuration
        catalog: Facilities to report (catalog file or built-in otherwise)
        now: Reference time (resort-local now otherwise)
        session: Optional requests session for the status fetch
        writer: Optional ledger writer (built from the credentials otherwise)
        dry_run: Resolve and fetch, but skip the ledger write

    Returns:
        RunOutcome; never raises for expected failures
    """
    outcome = RunOutcome(dry_run=dry_run)

    try:
        prepared = preflight(config, catalog)
    except ConfigurationError as e:
        return _fail(outcome, e, step="configuration")

    now = now or config.now()

    try:
        outcome.target = resolve_target(prepared.year_mapping, now)
    except ReporterError as e:
        return _fail(outcome, e)
    outcome.state = RunState.TARGET_RESOLVED
    LOG.info("Starting park report. Target year: %s", outcome.target.year)

    outcome.statuses = fetch_statuses(prepared.catalog, config.source, session=session)
    outcome.state = RunState.STATUSES_FETCHED

    rows = build_rows(outcome.statuses, now)

    if dry_run:
        for row in rows:
            LOG.info("[dry-run] %s", row.to_values())
        outcome.state = RunState.DONE
        return outcome

    writer = writer or LedgerWriter(prepared.credentials)
    try:
        result = writer.append_rows(outcome.target, rows)
    except ReporterError as e:
        return _fail(outcome, e)

    outcome.rows_written = result.rows_written
    outcome.state = RunState.ROWS_WRITTEN
    LOG.info("Appended %r", result)

    outcome.state = RunState.DONE
    return outcome
