#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Facility Catalog
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Tracked facilities.

The built-in catalog covers the Grand Floridian restaurants plus one
Magic Kingdom attraction. A JSON file of ``[{"id": ..., "name": ...}]``
can replace it via FACILITY_CATALOG_FILE.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .models import FacilityRef

logger = logging.getLogger(__name__)

DEFAULT_CATALOG: Tuple[FacilityRef, ...] = (
    FacilityRef("80010375", "Grand Floridian Cafe"),
    FacilityRef("80010381", "Narcoossee's"),
    FacilityRef("80010377", "Citricos"),
    FacilityRef("80010379", "Gasparilla Island Grill"),
    FacilityRef("16975815", "Space Mountain (MK)"),
)


def _ref_from_entry(entry: Any, index: int) -> FacilityRef:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Catalog entry #{index} must be an object, got {type(entry).__name__}")

    facility_id = str(entry.get("id") or "").strip()
    name = str(entry.get("name") or "").strip()
    if not facility_id or not name:
        raise ConfigurationError(f"Catalog entry #{index} needs both 'id' and 'name'")
    return FacilityRef(facility_id=facility_id, display_name=name)


def load_catalog(path: Optional[Path] = None) -> Tuple[FacilityRef, ...]:
    """
    Load the facility catalog.

    Args:
        path: Optional JSON file overriding the built-in catalog

    Returns:
        Tuple of FacilityRef in ledger order

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    if path is None:
        return DEFAULT_CATALOG

    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        raise ConfigurationError(f"Facility catalog not found: {path}")
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read facility catalog {path}: {e}")

    if isinstance(data, dict):
        data = data.get("facilities")
    if not isinstance(data, list):
        raise ConfigurationError("Facility catalog must be a list (or an object with a 'facilities' list)")

    catalog = tuple(_ref_from_entry(entry, i) for i, entry in enumerate(data))
    validate_catalog(catalog)
    logger.debug("Loaded %d facilities from %s", len(catalog), path)
    return catalog


def validate_catalog(catalog: Sequence[FacilityRef]) -> List[str]:
    """Raise ConfigurationError unless the catalog is non-empty with unique ids."""
    if not catalog:
        raise ConfigurationError("Facility catalog is empty")

    seen = set()
    for ref in catalog:
        if ref.facility_id in seen:
            raise ConfigurationError(f"Duplicate facility id in catalog: {ref.facility_id}")
        seen.add(ref.facility_id)
    return [ref.facility_id for ref in catalog]
