import json
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from click.testing import CliRunner

from conftest import FakeResponse, FakeSheetsClient, FakeSpreadsheet
from park_reporter.__main__ import main
from park_reporter.models import LEDGER_HEADER, LEDGER_TAB_NAME

LIVE_PAYLOAD = {
    "liveData": [
        {"id": "80010375", "status": "OPERATING", "queue": {"STANDBY": {"waitTime": 15}}},
        {"id": "16975815", "status": "DOWN"},
    ]
}


@pytest.fixture
def cli_env(monkeypatch, credentials_file):
    year = str(datetime.now(ZoneInfo("UTC")).year)
    monkeypatch.setenv("YEARLY_SHEET_IDS", json.dumps({year: "SHEETcurrentyear"}))
    monkeypatch.setenv("GOOGLE_CREDENTIALS_FILE", str(credentials_file))
    monkeypatch.setenv("RESORT_TIMEZONE", "UTC")
    monkeypatch.delenv("GOOGLE_CREDENTIALS_JSON", raising=False)
    monkeypatch.delenv("FACILITY_CATALOG_FILE", raising=False)
    monkeypatch.delenv("REPORTER_LOG_FILE", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    yield monkeypatch

    # The CLI reconfigures the root logger; drop its handlers between tests
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def live_api(cli_env):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append(url)
        return FakeResponse(LIVE_PAYLOAD)

    cli_env.setattr("requests.get", fake_get)
    return calls


@pytest.fixture
def sheets_factory(cli_env):
    spreadsheet = FakeSpreadsheet("SHEETcurrentyear")
    client = FakeSheetsClient({"SHEETcurrentyear": spreadsheet})
    factory_calls = []

    def factory(credentials):
        factory_calls.append(credentials)
        return client

    cli_env.setattr("park_reporter.ledger.writer.default_client_factory", factory)
    return spreadsheet, factory_calls


def _no_network(*args, **kwargs):
    raise AssertionError("network call attempted")


# ══════════════════════════════════════════════════════════════════════════════
# RUN
# ══════════════════════════════════════════════════════════════════════════════


def test_run_appends_rows_and_exits_zero(live_api, sheets_factory):
    spreadsheet, factory_calls = sheets_factory

    result = CliRunner().invoke(main, ["-q", "run"])

    assert result.exit_code == 0, result.output
    assert "Wrote 5 rows to the" in result.output
    assert len(live_api) == 1
    assert len(factory_calls) == 1

    ws = spreadsheet.worksheet(LEDGER_TAB_NAME)
    assert ws.rows[0] == LEDGER_HEADER
    assert len(ws.rows) == 6
    assert ws.rows[1][1:5] == ["80010375", "Grand Floridian Cafe", 15, "OPERATING"]


def test_default_command_is_run(live_api, sheets_factory):
    result = CliRunner().invoke(main, ["-q"])

    assert result.exit_code == 0, result.output
    assert "Wrote 5 rows" in result.output


def test_dry_run_prints_rows_without_writing(live_api, sheets_factory):
    spreadsheet, factory_calls = sheets_factory

    result = CliRunner().invoke(main, ["-q", "run", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "DRY RUN: 5 rows prepared" in result.output
    assert "Grand Floridian Cafe" in result.output
    assert "DOWN" in result.output
    assert len(live_api) == 1
    assert factory_calls == []
    assert spreadsheet.created == []


def test_run_with_malformed_mapping_exits_nonzero(cli_env):
    cli_env.setenv("YEARLY_SHEET_IDS", "{not-json")
    cli_env.setattr("requests.get", _no_network)

    result = CliRunner().invoke(main, ["-q", "run"])

    assert result.exit_code == 1
    assert "FAILED at configuration [CONFIG]: " in result.output


def test_failure_line_printed_once_with_console_logging(cli_env):
    cli_env.setenv("YEARLY_SHEET_IDS", "{not-json")
    cli_env.setattr("requests.get", _no_network)

    result = CliRunner().invoke(main, ["run"])

    assert result.exit_code == 1
    assert result.output.count("FAILED at configuration") == 1


# ══════════════════════════════════════════════════════════════════════════════
# LOG FILE
# ══════════════════════════════════════════════════════════════════════════════


def test_log_file_records_outcome_at_info(cli_env, live_api, sheets_factory, tmp_path):
    log_file = tmp_path / "logs" / "reporter.log"

    result = CliRunner().invoke(main, ["-q", "--log-file", str(log_file), "run", "--dry-run"])

    assert result.exit_code == 0, result.output
    text = log_file.read_text(encoding="utf-8")
    assert "DRY RUN: 5 rows prepared" in text
    assert "[DEBUG   ]" not in text


def test_debug_setting_raises_log_file_detail(cli_env, live_api, sheets_factory, tmp_path):
    cli_env.setenv("DEBUG", "1")
    log_file = tmp_path / "reporter.log"

    result = CliRunner().invoke(main, ["--log-file", str(log_file), "run", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "[DEBUG   ]" in log_file.read_text(encoding="utf-8")
    assert "[D]" not in result.output


# ══════════════════════════════════════════════════════════════════════════════
# CHECK / FACILITIES
# ══════════════════════════════════════════════════════════════════════════════


def test_check_resolves_target_without_network(cli_env):
    cli_env.setattr("requests.get", _no_network)

    result = CliRunner().invoke(main, ["-q", "check"])

    assert result.exit_code == 0, result.output
    assert "5 facilities tracked" in result.output
    assert "SHEETcur..." in result.output


def test_facilities_lists_catalog(cli_env):
    result = CliRunner().invoke(main, ["-q", "facilities"])

    assert result.exit_code == 0
    assert "Grand Floridian Cafe" in result.output
    assert "16975815" in result.output
