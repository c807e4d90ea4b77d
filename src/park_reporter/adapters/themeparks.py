#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - themeparks.wiki Live Status Adapter
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Live facility status from the themeparks.wiki v1 API.

A single GET against the resort-scoped ``/entity/{id}/live`` resource is
normalized into one FacilityStatus per catalog entry. The upstream has
changed its id scheme and nesting between revisions, so each known entry
shape is parsed into a LiveEntry variant and normalized separately.

fetch_statuses() never raises: an unusable upstream degrades every
facility to SOURCE_ERROR.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from ..config import SourceConfig
from ..errors import SourceError
from ..models import FacilityRef, FacilityStatus, StatusCode

logger = logging.getLogger(__name__)

STANDBY_QUEUE = "STANDBY"

# Upstream status strings that map onto our enum without being spelled the same
STATUS_ALIASES = {
    "REFURBISHMENT": StatusCode.CLOSED,
}


class EntryShape(str, Enum):
    """Known live-entry layouts."""

    QUEUE = "queue"  # nested queue.STANDBY sub-record
    FLAT_WAIT = "flat_wait"  # legacy top-level waitTime
    STATUS_ONLY = "status_only"
    EMPTY = "empty"


@dataclass(frozen=True)
class LiveEntry:
    """One upstream live-data entry reduced to what normalization needs."""

    ids: Tuple[str, ...]
    shape: EntryShape
    status: Optional[str] = None
    standby: Optional[Dict[str, Any]] = None
    wait_time: Any = None


# ──────────────────────────────────────────────────────────────────────────────
# Parsing
# ──────────────────────────────────────────────────────────────────────────────


def _entry_ids(raw: Dict[str, Any]) -> Tuple[str, ...]:
    """Every id an entry can be looked up by."""
    ids = []
    for key in ("entityId", "id", "externalId"):
        value = raw.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        text = str(value).strip()
        if key == "externalId":
            # e.g. "80010375;entityType=restaurant"
            text = text.split(";", 1)[0].strip()
        if text and text not in ids:
            ids.append(text)
    return tuple(ids)


def _is_number(value: Any) -> bool:
    """True for a numeric wait value (int, float or numeric string)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def parse_entry(raw: Any) -> Optional[LiveEntry]:
    """Classify a raw entry; returns None when it has no usable id."""
    if not isinstance(raw, dict):
        return None

    ids = _entry_ids(raw)
    if not ids:
        return None

    status = raw.get("status") if isinstance(raw.get("status"), str) else None

    queue = raw.get("queue")
    standby = queue.get(STANDBY_QUEUE) if isinstance(queue, dict) else None
    if isinstance(standby, dict):
        return LiveEntry(ids=ids, shape=EntryShape.QUEUE, status=status, standby=standby)

    if _is_number(raw.get("waitTime")):
        return LiveEntry(ids=ids, shape=EntryShape.FLAT_WAIT, status=status, wait_time=raw.get("waitTime"))

    if status is not None:
        return LiveEntry(ids=ids, shape=EntryShape.STATUS_ONLY, status=status)

    return LiveEntry(ids=ids, shape=EntryShape.EMPTY)


def extract_entries(payload: Any) -> List[Any]:
    """
    Pull the list of raw live entries out of a response body.

    Accepts the v1 envelope (``{"liveData": [...]}``) and a bare list.

    Raises:
        SourceError: If no entry list can be found
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        live = payload.get("liveData")
        if isinstance(live, list):
            return live
    raise SourceError("Response does not contain a liveData list")


def index_entries(raw_entries: Iterable[Any]) -> Dict[str, LiveEntry]:
    """Map every upstream id to its entry; a later entry replaces an earlier one."""
    index: Dict[str, LiveEntry] = {}
    skipped = 0
    for raw in raw_entries:
        entry = parse_entry(raw)
        if entry is None:
            skipped += 1
            continue
        for entity_id in entry.ids:
            index[entity_id] = entry
    if skipped:
        logger.debug("Skipped %d live entries without a usable id", skipped)
    return index


# ──────────────────────────────────────────────────────────────────────────────
# Normalization
# ──────────────────────────────────────────────────────────────────────────────


def normalize_wait(value: Any) -> int:
    """Wait minutes as a non-negative int; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        minutes = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(minutes, 0)


def normalize_status(value: Optional[str]) -> StatusCode:
    """Map an upstream status string onto StatusCode."""
    if not value:
        return StatusCode.UNKNOWN
    key = value.strip().upper()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        code = StatusCode(key)
    except ValueError:
        logger.debug("Unrecognized upstream status %r", value)
        return StatusCode.UNKNOWN
    # Sentinels are ours to assign, never read from upstream
    return StatusCode.UNKNOWN if code.is_sentinel else code


def _queued_status(queue_status: Any, entry_status: Optional[str]) -> StatusCode:
    """
    Status for an entry that carries a wait value.

    The queue's own status wins. Without one, the entry's top-level status
    is used before defaulting to OPERATING: the live API reports status at
    the top level and only the wait under queue.STANDBY, so a closed
    attraction that still has a queue record stays CLOSED. With no status
    anywhere the result is OPERATING.
    """
    if isinstance(queue_status, str) and queue_status.strip():
        return normalize_status(queue_status)
    if entry_status:
        return normalize_status(entry_status)
    return StatusCode.OPERATING


def _from_queue(ref: FacilityRef, entry: LiveEntry) -> FacilityStatus:
    standby = entry.standby or {}
    return FacilityStatus.for_ref(
        ref,
        status_code=_queued_status(standby.get("status"), entry.status),
        wait_minutes=normalize_wait(standby.get("waitTime")),
    )


def _from_flat_wait(ref: FacilityRef, entry: LiveEntry) -> FacilityStatus:
    return FacilityStatus.for_ref(
        ref,
        status_code=_queued_status(None, entry.status),
        wait_minutes=normalize_wait(entry.wait_time),
    )


def _from_status_only(ref: FacilityRef, entry: LiveEntry) -> FacilityStatus:
    return FacilityStatus.for_ref(ref, status_code=normalize_status(entry.status))


def _from_empty(ref: FacilityRef, entry: LiveEntry) -> FacilityStatus:
    return FacilityStatus.for_ref(ref, status_code=StatusCode.UNKNOWN)


NORMALIZERS = {
    EntryShape.QUEUE: _from_queue,
    EntryShape.FLAT_WAIT: _from_flat_wait,
    EntryShape.STATUS_ONLY: _from_status_only,
    EntryShape.EMPTY: _from_empty,
}


def normalize(ref: FacilityRef, entry: Optional[LiveEntry]) -> FacilityStatus:
    """Status for one facility given its entry (None if upstream omitted it)."""
    if entry is None:
        return FacilityStatus.for_ref(ref, status_code=StatusCode.UNKNOWN)
    return NORMALIZERS[entry.shape](ref, entry)


def statuses_from_payload(catalog: Sequence[FacilityRef], payload: Any) -> List[FacilityStatus]:
    """
    Normalize a decoded response body for the whole catalog.

    Raises:
        SourceError: If the body has no recognizable entry list
    """
    index = index_entries(extract_entries(payload))
    return [normalize(ref, index.get(ref.facility_id)) for ref in catalog]


def source_error_statuses(catalog: Sequence[FacilityRef]) -> List[FacilityStatus]:
    """Uniform fallback used when the upstream is unusable."""
    return [FacilityStatus.for_ref(ref, status_code=StatusCode.SOURCE_ERROR) for ref in catalog]


# ──────────────────────────────────────────────────────────────────────────────
# Fetch
# ──────────────────────────────────────────────────────────────────────────────


def fetch_payload(source: SourceConfig, session: Optional[requests.Session] = None) -> Any:
    """
    GET the live resource and decode its JSON body.

    Raises:
        SourceError: On transport failure, non-2xx status or a non-JSON body
    """
    http = session or requests
    url = source.live_url
    logger.info("Fetching live data from %s", url)

    try:
        response = http.get(url, headers={"Accept": "application/json"}, timeout=source.timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceError(f"Live data request failed: {e}")

    try:
        return response.json()
    except ValueError as e:
        raise SourceError(f"Live data response is not valid JSON: {e}")


def fetch_statuses(
    catalog: Sequence[FacilityRef],
    source: SourceConfig,
    session: Optional[requests.Session] = None,
) -> List[FacilityStatus]:
    """
    Fetch and normalize live status for every catalog facility.

    Args:
        catalog: Tracked facilities, in ledger order
        source: Upstream settings
        session: Optional requests session (module-level requests otherwise)

    Returns:
        One FacilityStatus per catalog entry, in catalog order
    """
    try:
        statuses = statuses_from_payload(catalog, fetch_payload(source, session))
    except SourceError as e:
        logger.warning("%s; marking %d facilities as %s", e, len(catalog), StatusCode.SOURCE_ERROR.value)
        return source_error_statuses(catalog)

    missing = sum(1 for s in statuses if s.status_code == StatusCode.UNKNOWN)
    if missing:
        logger.warning("%d of %d facilities have no usable live data", missing, len(catalog))
    logger.info("Normalized live status for %d facilities", len(statuses))
    return statuses
