#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Google Sheets Ledger Writer
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Append-only writer for the yearly Google Sheet.

The worksheet and its header row are created the first time a yearly
spreadsheet is written to; after that the header is only checked, never
rewritten. Each run's rows go out in one append call.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import gspread
import requests
from google.auth.exceptions import GoogleAuthError, TransportError
from gspread.exceptions import APIError, SpreadsheetNotFound

from ..errors import WriteCategory, WriteFailure
from ..models import LEDGER_HEADER, FacilityStatus, LedgerRow, LedgerTarget, WriteResult

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Size of a freshly created worksheet; append_rows grows it as needed
NEW_TAB_ROWS = 1000

ClientFactory = Callable[[Dict[str, Any]], Any]


def default_client_factory(credentials: Dict[str, Any]) -> gspread.Client:
    """Authorize a gspread client from a service-account key."""
    return gspread.service_account_from_dict(credentials, scopes=SCOPES)


def build_rows(statuses: Sequence[FacilityStatus], now: datetime) -> List[LedgerRow]:
    """One row per status, all sharing the run's timestamp."""
    stamp = now.strftime(TIMESTAMP_FORMAT)
    return [LedgerRow.from_status(status, stamp) for status in statuses]


def _status_code_of(exc: APIError) -> Optional[int]:
    code = getattr(exc, "code", None)
    if isinstance(code, int) and code > 0:
        return code
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def classify_error(exc: BaseException) -> WriteCategory:
    """Map a client/transport exception onto a write failure category."""
    if isinstance(exc, SpreadsheetNotFound):
        return WriteCategory.NOT_FOUND

    if isinstance(exc, APIError):
        status = _status_code_of(exc)
        if status in (401, 403):
            return WriteCategory.AUTH
        if status == 404:
            return WriteCategory.NOT_FOUND
        if status == 429 or (status is not None and status >= 500):
            return WriteCategory.TRANSIENT
        return WriteCategory.UNKNOWN

    # TransportError subclasses GoogleAuthError, so it is checked first
    if isinstance(exc, TransportError):
        return WriteCategory.TRANSIENT
    if isinstance(exc, GoogleAuthError):
        return WriteCategory.AUTH
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return WriteCategory.TRANSIENT

    return WriteCategory.UNKNOWN


class LedgerWriter:
    """
    Appends ledger rows to a yearly spreadsheet.

    The client is created lazily from the service-account credentials so
    constructing a writer never touches the network.
    """

    def __init__(self, credentials: Dict[str, Any], client_factory: Optional[ClientFactory] = None):
        self.credentials = credentials
        self.client_factory = client_factory or default_client_factory
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                self._client = self.client_factory(self.credentials)
            except (ValueError, KeyError) as e:
                # google-auth rejects malformed keys with ValueError
                raise WriteFailure(f"Service account credentials rejected: {e}", WriteCategory.AUTH) from e
            except Exception as e:
                raise WriteFailure(f"Could not authorize Sheets client: {e}", classify_error(e)) from e
        return self._client

    def ensure_worksheet(self, spreadsheet, tab_name: str) -> Tuple[Any, bool]:
        """
        Return the ledger worksheet, creating it with its header if absent.

        Returns:
            (worksheet, created)

        Raises:
            WriteFailure: SCHEMA if an existing header does not match, or if
                row 1 is blank while rows below it hold data
        """
        titles = [ws.title for ws in spreadsheet.worksheets()]

        if tab_name not in titles:
            logger.info("Creating worksheet %r with header row", tab_name)
            worksheet = spreadsheet.add_worksheet(title=tab_name, rows=NEW_TAB_ROWS, cols=len(LEDGER_HEADER))
            worksheet.append_row(LEDGER_HEADER, value_input_option="RAW")
            return worksheet, True

        worksheet = spreadsheet.worksheet(tab_name)
        header = [str(cell).strip() for cell in worksheet.row_values(1)]

        if not any(header):
            if any(any(str(cell).strip() for cell in row) for row in worksheet.get_all_values()):
                raise WriteFailure(
                    f"Worksheet {tab_name!r} has data but no header in row 1",
                    WriteCategory.SCHEMA,
                )
            logger.info("Worksheet %r is empty; writing header row", tab_name)
            worksheet.update(range_name="A1", values=[LEDGER_HEADER], value_input_option="RAW")
        elif header[: len(LEDGER_HEADER)] != LEDGER_HEADER:
            raise WriteFailure(
                f"Worksheet {tab_name!r} header {header} does not match expected {LEDGER_HEADER}",
                WriteCategory.SCHEMA,
            )

        return worksheet, False

    def append_rows(self, target: LedgerTarget, rows: Sequence[LedgerRow]) -> WriteResult:
        """
        Append rows to the target worksheet in order.

        Args:
            target: Resolved spreadsheet and tab
            rows: Rows to append

        Returns:
            WriteResult with the number of rows written

        Raises:
            WriteFailure: On auth, lookup, quota, network or schema problems
        """
        logger.info("Logging %d rows to Google Sheet (ID: %s)", len(rows), target.short_id)
        client = self._get_client()

        try:
            spreadsheet = client.open_by_key(target.ledger_id)
            worksheet, created = self.ensure_worksheet(spreadsheet, target.tab_name)

            if rows:
                worksheet.append_rows(
                    [row.to_values() for row in rows],
                    value_input_option="RAW",
                    insert_data_option="INSERT_ROWS",
                )
        except WriteFailure:
            raise
        except Exception as e:
            category = classify_error(e)
            logger.debug("Error writing to sheet %s [%s]: %s", target.short_id, category.value, e)
            raise WriteFailure(f"Error writing to sheet {target.short_id}: {e}", category) from e

        logger.info("Sheet update successful")
        return WriteResult(
            ledger_id=target.ledger_id,
            tab_name=target.tab_name,
            rows_written=len(rows),
            tab_created=created,
        )
