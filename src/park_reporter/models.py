#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Data Model
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Records passed between the resolver, the status adapter and the ledger writer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

# Fixed worksheet name inside every yearly spreadsheet
LEDGER_TAB_NAME = "Disney_Dining"

# Written in place of reservation availability, which is checked by hand
RESERVATION_PLACEHOLDER = "N/A - Check Dining API Manually"

# Column order of the ledger; one column per LedgerRow field
LEDGER_HEADER: List[str] = [
    "DateTime",
    "FacilityID",
    "Name",
    "WaitTimeMinutes",
    "WaitTimeStatus",
    "ReservationAvailability",
]


class StatusCode(str, Enum):
    """Normalized facility status."""

    OPERATING = "OPERATING"
    CLOSED = "CLOSED"
    DOWN = "DOWN"
    UNKNOWN = "UNKNOWN"
    SOURCE_ERROR = "SOURCE_ERROR"

    @property
    def is_sentinel(self) -> bool:
        """True for statuses that describe an acquisition failure, not a reported state."""
        return self in (StatusCode.UNKNOWN, StatusCode.SOURCE_ERROR)


@dataclass(frozen=True)
class FacilityRef:
    """A tracked facility."""

    facility_id: str
    display_name: str


@dataclass(frozen=True)
class FacilityStatus:
    """Live status of one facility for one run."""

    facility_id: str
    display_name: str
    wait_minutes: int = 0
    status_code: StatusCode = StatusCode.UNKNOWN

    @classmethod
    def for_ref(cls, ref: FacilityRef, status_code: StatusCode, wait_minutes: int = 0) -> "FacilityStatus":
        return cls(
            facility_id=ref.facility_id,
            display_name=ref.display_name,
            wait_minutes=wait_minutes,
            status_code=status_code,
        )


@dataclass(frozen=True)
class LedgerTarget:
    """The spreadsheet and tab a run writes to."""

    year: str
    ledger_id: str
    tab_name: str = LEDGER_TAB_NAME

    @property
    def short_id(self) -> str:
        """Truncated sheet id for log output."""
        return f"{self.ledger_id[:8]}..."


@dataclass(frozen=True)
class LedgerRow:
    """One appended ledger row."""

    timestamp: str
    facility_id: str
    display_name: str
    wait_minutes: int
    status_code: str
    reservation_note: str = RESERVATION_PLACEHOLDER

    @classmethod
    def from_status(cls, status: FacilityStatus, timestamp: str) -> "LedgerRow":
        return cls(
            timestamp=timestamp,
            facility_id=status.facility_id,
            display_name=status.display_name,
            wait_minutes=status.wait_minutes,
            status_code=status.status_code.value,
        )

    def to_values(self) -> list:
        """Cell values in LEDGER_HEADER order."""
        return [
            self.timestamp,
            self.facility_id,
            self.display_name,
            self.wait_minutes,
            self.status_code,
            self.reservation_note,
        ]


@dataclass
class WriteResult:
    """Outcome of a successful ledger append."""

    ledger_id: str
    tab_name: str
    rows_written: int = 0
    tab_created: bool = False

    def __repr__(self) -> str:
        return (
            f"WriteResult(ledger={self.ledger_id[:8]!r}, tab={self.tab_name!r}, "
            f"rows={self.rows_written}, created={self.tab_created})"
        )
