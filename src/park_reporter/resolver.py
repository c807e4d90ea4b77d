#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Ledger Target Resolver
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Picks the spreadsheet for the current calendar year.

One spreadsheet is provisioned by hand per year and registered in the
YEARLY_SHEET_IDS mapping; this module never creates spreadsheets.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError, ResolutionError, ResolutionReason
from .models import LEDGER_TAB_NAME, LedgerTarget

logger = logging.getLogger(__name__)


def parse_year_mapping(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse the YEARLY_SHEET_IDS JSON text.

    Raises:
        ConfigurationError: If the text is absent, not JSON, or not an
            object of string years to string sheet ids
    """
    if raw is None or not str(raw).strip():
        raise ConfigurationError("YEARLY_SHEET_IDS is not set")

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ConfigurationError(f"Failed to parse YEARLY_SHEET_IDS JSON: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"YEARLY_SHEET_IDS must be a JSON object, got {type(data).__name__}")

    mapping = {}
    for year, sheet_id in data.items():
        if not isinstance(sheet_id, str):
            raise ConfigurationError(f"YEARLY_SHEET_IDS[{year!r}] must be a string sheet id")
        mapping[str(year).strip()] = sheet_id.strip()
    return mapping


def resolve_target(year_mapping: Optional[Mapping[str, Any]], now: Union[datetime, date]) -> LedgerTarget:
    """
    Resolve the ledger target for the calendar year of ``now``.

    Args:
        year_mapping: Parsed year -> sheet id mapping (None if unavailable)
        now: Reference time; only its year is used

    Returns:
        LedgerTarget for the year

    Raises:
        ResolutionError: MISSING_MAPPING if the mapping is absent or not a
            mapping, NO_ENTRY_FOR_YEAR if the year has no sheet id
    """
    year = f"{now.year:04d}"

    if year_mapping is None or not isinstance(year_mapping, Mapping):
        raise ResolutionError(
            "Year to sheet mapping is missing or unparseable (check YEARLY_SHEET_IDS)",
            reason=ResolutionReason.MISSING_MAPPING,
            year=year,
        )

    ledger_id = year_mapping.get(year)
    if not isinstance(ledger_id, str) or not ledger_id.strip():
        raise ResolutionError(
            f"No Sheet ID found for current year ({year}). Create the Google Sheet for "
            f"{year} and add it to the YEARLY_SHEET_IDS secret.",
            reason=ResolutionReason.NO_ENTRY_FOR_YEAR,
            year=year,
        )

    target = LedgerTarget(year=year, ledger_id=ledger_id.strip(), tab_name=LEDGER_TAB_NAME)
    logger.debug("Resolved ledger target for %s: %s", year, target.short_id)
    return target
