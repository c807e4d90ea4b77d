#!/usr/bin/env python3
# ══════════════════════════════════════════════════════════════════════════════
#  Park Reporter - CLI Entry Point
#  Copyright (c) 2025 SIRIUS Alpha
# ══════════════════════════════════════════════════════════════════════════════
"""
Command-line interface for Park Reporter.

Features:
- Structured logging (console + rotating file)
- Dry-run mode for testing
- Configuration check without network access
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import click

from .catalog import load_catalog
from .config import ReporterConfig
from .errors import ConfigurationError, ReporterError
from .orchestrator import preflight, run_report
from .resolver import resolve_target

# ══════════════════════════════════════════════════════════════════════════════
# LOGGING SETUP
# ══════════════════════════════════════════════════════════════════════════════


# Libraries whose INFO chatter is only useful when debugging a run
NOISY_LOGGERS = ("urllib3", "google.auth", "gspread")

LOG = logging.getLogger("park_reporter")


def _console_filter(record: logging.LogRecord) -> bool:
    """Keep records already echoed by the CLI out of the console stream."""
    return not getattr(record, "file_only", False)


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: Enable DEBUG level on the console and in the log file
        log_file: Path to log file
        quiet: Suppress console output
        debug: Enable DEBUG level in the log file only (DEBUG setting)
    """
    file_level = logging.DEBUG if (verbose or debug) else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(file_level)

    # Clear existing handlers
    root.handlers.clear()

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)

    # Format
    fmt = "%(asctime)s [%(levelname)-.1s] %(name)s: %(message)s"
    datefmt = "%H:%M:%S"
    formatter = logging.Formatter(fmt, datefmt)

    # Console handler
    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.DEBUG if verbose else logging.INFO)
        console.setFormatter(formatter)
        console.addFilter(_console_filter)
        root.addHandler(console)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)

        file_fmt = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
        file_handler.setFormatter(logging.Formatter(file_fmt))
        root.addHandler(file_handler)


# ══════════════════════════════════════════════════════════════════════════════
# CLI COMMANDS
# ══════════════════════════════════════════════════════════════════════════════


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose (debug) output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress console log output")
@click.option("--log-file", type=click.Path(path_type=Path), help="Path to log file")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_file: Optional[Path],
) -> None:
    """
    Park Reporter

    Polls live wait times for the tracked resort facilities and appends
    them to this year's Google Sheet.
    """
    config = ReporterConfig.from_env()

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    setup_logging(verbose, log_file or config.log_file, quiet, debug=config.debug)

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.option("--dry-run", "-n", is_flag=True, help="Fetch and print rows without writing")
@click.pass_context
def run(ctx: click.Context, dry_run: bool) -> None:
    """
    Run one report (default command).

    Examples:

        park-reporter run

        park-reporter run --dry-run
    """
    config: ReporterConfig = ctx.obj["config"]

    outcome = run_report(config, dry_run=dry_run)

    if outcome.success and dry_run:
        for status in outcome.statuses:
            click.echo(
                f"  {status.facility_id:<10} {status.display_name:<28} "
                f"{status.status_code.value:<13} {status.wait_minutes:>4} min"
            )

    # Record the outcome in the log file; the console gets the echoed line
    LOG.log(
        logging.INFO if outcome.success else logging.ERROR,
        outcome.message,
        extra={"file_only": True},
    )
    click.echo(outcome.message, err=not outcome.success)
    sys.exit(outcome.exit_code)


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """
    Check configuration and this year's ledger target.

    Makes no network calls.
    """
    config: ReporterConfig = ctx.obj["config"]
    click.echo(config.summary())

    try:
        prepared = preflight(config)
        target = resolve_target(prepared.year_mapping, config.now())
    except ReporterError as e:
        click.echo(f"[X] [{e.category}] {e.message}", err=True)
        sys.exit(1)

    click.echo(f"[OK] {len(prepared.catalog)} facilities tracked")
    click.echo(f"[OK] {target.year} ledger: {target.short_id} / {target.tab_name}")


@main.command()
@click.pass_context
def facilities(ctx: click.Context) -> None:
    """
    List tracked facilities.
    """
    config: ReporterConfig = ctx.obj["config"]

    try:
        catalog = load_catalog(config.catalog_file)
    except ConfigurationError as e:
        click.echo(f"[X] {e.message}", err=True)
        sys.exit(1)

    for ref in catalog:
        click.echo(f"  {ref.facility_id:<10} {ref.display_name}")


# ══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    main()
