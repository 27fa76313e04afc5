"""Flask CLI commands for blob storage maintenance."""

from __future__ import annotations

import logging
from datetime import timedelta

import click
from flask.cli import with_appcontext

from filevault.api.deps import get_services
from filevault.services.files import SweepReport

LOGGER = logging.getLogger(__name__)


def _echo_report(report: SweepReport) -> None:
    """Print what the sweep removed (or would remove)."""
    verb = "would remove" if report.dry_run else "removed"
    click.echo("Storage sweep:")
    click.echo(f"  orphan blobs      {verb} {len(report.orphan_blobs)}")
    for key in report.orphan_blobs:
        click.echo(f"    - {key}")
    click.echo(f"  dangling records  {verb} {len(report.dangling_records)}")
    for file_id in report.dangling_records:
        click.echo(f"    - {file_id}")


@click.group("storage")
def storage_cli() -> None:
    """Blob storage maintenance commands."""


@storage_cli.command("sweep")
@click.option("--dry-run", is_flag=True, help="Report leftovers without deleting anything.")
@click.option(
    "--grace-seconds",
    type=click.IntRange(min=0),
    default=None,
    help="Minimum age of an unreferenced blob before removal "
    "(defaults to STORAGE_SWEEP_GRACE_SECONDS).",
)
@with_appcontext
def sweep_command(dry_run: bool, grace_seconds: int | None) -> None:
    """Remove orphan blobs and file records whose blob is missing."""
    services = get_services()
    grace = services.sweep_grace if grace_seconds is None else timedelta(seconds=grace_seconds)
    try:
        report = services.files.sweep(grace=grace, dry_run=dry_run)
    except Exception as exc:  # pragma: no cover - CLI safeguard
        LOGGER.exception("storage.sweep_failed")
        raise click.ClickException(f"Sweep failed: {exc}") from exc
    _echo_report(report)
