#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - Configuration Module
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Configuration management for Park Reporter.

Settings come from environment variables (optionally seeded from a .env
file) and are frozen into a single value that is built once per process
and passed explicitly to every stage of a run.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError

THEMEPARKS_API_BASE = "https://api.themeparks.wiki/v1"

# themeparks.wiki destination id for Walt Disney World Resort
WDW_DESTINATION_ID = "e957da41-3552-4cf6-b636-5babc5cbc4e5"

DEFAULT_CREDENTIALS_FILE = "google-credentials.json"

REQUIRED_CREDENTIAL_KEYS = ("client_email", "private_key")


def _load_dotenv() -> None:
    """Load the nearest .env at or above the working directory, if python-dotenv is available."""
    try:
        from dotenv import find_dotenv, load_dotenv

        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(env_path)
    except ImportError:
        pass  # rely on system env


def _env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def _env_optional(key: str) -> Optional[str]:
    """Get environment variable, treating blank as unset."""
    val = os.environ.get(key)
    if val is None or not val.strip():
        return None
    return val


def _env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _from_cwd(path: Path) -> Path:
    return path if path.is_absolute() else Path.cwd() / path


def _env_path(key: str) -> Optional[Path]:
    """Get path environment variable; relative paths are taken from the working directory."""
    val = _env_optional(key)
    if val:
        return _from_cwd(Path(val).expanduser())
    return None


@dataclass(frozen=True)
class SourceConfig:
    """Upstream live-status API settings."""

    api_base: str = field(default_factory=lambda: _env("THEMEPARKS_API_BASE", THEMEPARKS_API_BASE))
    scope_id: str = field(default_factory=lambda: _env("THEMEPARKS_SCOPE_ID", WDW_DESTINATION_ID))
    timeout: float = field(default_factory=lambda: _env_float("THEMEPARKS_TIMEOUT", 30.0))

    @property
    def live_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/entity/{self.scope_id}/live"


@dataclass(frozen=True)
class LedgerConfig:
    """Google Sheets ledger settings."""

    # Raw JSON text of the year -> spreadsheet key mapping
    yearly_sheet_ids: Optional[str] = field(default_factory=lambda: _env_optional("YEARLY_SHEET_IDS"))
    credentials_file: Path = field(
        default_factory=lambda: _env_path("GOOGLE_CREDENTIALS_FILE") or _from_cwd(Path(DEFAULT_CREDENTIALS_FILE))
    )
    credentials_json: Optional[str] = field(default_factory=lambda: _env_optional("GOOGLE_CREDENTIALS_JSON"))
    timezone: str = field(default_factory=lambda: _env("RESORT_TIMEZONE", "America/New_York"))


@dataclass(frozen=True)
class ReporterConfig:
    """
    Master configuration for Park Reporter.

    Aggregates the sub-configurations; nothing here performs network I/O.
    """

    source: SourceConfig = field(default_factory=SourceConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    catalog_file: Optional[Path] = field(default_factory=lambda: _env_path("FACILITY_CATALOG_FILE"))
    log_file: Optional[Path] = field(default_factory=lambda: _env_path("REPORTER_LOG_FILE"))
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", False))

    @classmethod
    def from_env(cls) -> "ReporterConfig":
        """Load .env (if present) and build the configuration."""
        _load_dotenv()
        return cls()

    def resort_tz(self) -> tzinfo:
        """Resolve the configured resort time zone."""
        try:
            return ZoneInfo(self.ledger.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown RESORT_TIMEZONE: {self.ledger.timezone!r}")

    def now(self) -> datetime:
        """Current time in the resort time zone."""
        return datetime.now(self.resort_tz())

    def load_credentials(self) -> Dict[str, Any]:
        """
        Load the service-account credential.

        GOOGLE_CREDENTIALS_JSON wins over the credentials file.

        Raises:
            ConfigurationError: If the credential is absent or malformed
        """
        if self.ledger.credentials_json:
            source = "GOOGLE_CREDENTIALS_JSON"
            raw = self.ledger.credentials_json
        else:
            source = str(self.ledger.credentials_file)
            try:
                raw = self.ledger.credentials_file.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise ConfigurationError(f"Google credentials file not found: {source}")
            except OSError as e:
                raise ConfigurationError(f"Could not read Google credentials file {source}: {e}")

        try:
            creds = json.loads(raw)
        except ValueError as e:
            raise ConfigurationError(f"Google credentials in {source} are not valid JSON: {e}")

        validate_credentials(creds, source)
        return creds

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        creds = "GOOGLE_CREDENTIALS_JSON" if self.ledger.credentials_json else str(self.ledger.credentials_file)
        lines = [
            "=" * 60,
            "  PARK REPORTER CONFIGURATION",
            "=" * 60,
            "",
            "Source:",
            f"  Live URL: {self.source.live_url}",
            f"  Timeout: {self.source.timeout}s",
            "",
            "Ledger:",
            f"  Year mapping: {'set' if self.ledger.yearly_sheet_ids else 'MISSING'}",
            f"  Credentials: {creds}",
            f"  Time zone: {self.ledger.timezone}",
            "",
            "Catalog:",
            f"  File: {self.catalog_file or 'built-in'}",
            "",
            "=" * 60,
        ]
        return "\n".join(lines)


def validate_credentials(creds: Any, source: str = "credentials") -> None:
    """Raise ConfigurationError unless creds looks like a service-account key."""
    if not isinstance(creds, dict):
        raise ConfigurationError(f"Google credentials in {source} must be a JSON object")

    missing = [k for k in REQUIRED_CREDENTIAL_KEYS if not creds.get(k)]
    if missing:
        raise ConfigurationError(f"Google credentials in {source} missing: {', '.join(missing)}")

    cred_type = creds.get("type")
    if cred_type is not None and cred_type != "service_account":
        raise ConfigurationError(f"Google credentials in {source} are type {cred_type!r}, expected 'service_account'")
