"""CLI entry point for Subscription Radar."""

from __future__ import annotations

import click

from . import constants
from .auth import check_auth
from .display import (
    console,
    create_progress,
    display_cancel_guidance,
    display_reminders,
    display_scan_summary,
    display_subscription_detail,
    display_subscriptions,
    display_sync_progress,
)
from .errors import SubscriptionRadarError
from .export import export_subscriptions
from .gmail_client import GmailTransport
from .logging_setup import setup_logging
from .models import SyncProgress
from .patterns import DEFAULT_PATTERNS, load_patterns
from .reminders import due_reminders
from .scanner import scan_subscriptions
from .store import SubscriptionStore
from .sync import SyncService

_token_option = click.option(
    "--token",
    envvar="SUBSCRIPTION_RADAR_TOKEN",
    default=None,
    help="OAuth access token (otherwise the saved credentials are used).",
)

_user_option = click.option(
    "-u",
    "--user",
    default=constants.DEFAULT_USER,
    envvar="SUBSCRIPTION_RADAR_USER",
    show_default=True,
    help="Account the stored subscriptions belong to.",
)


def _open_store() -> SubscriptionStore:
    return SubscriptionStore(constants.STORE_DB_PATH)


@click.group()
@click.version_option(version="0.1.0", prog_name="subscription-radar")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs.")
def cli(verbose: bool) -> None:
    """Subscription Radar - find recurring subscriptions in your Gmail."""
    setup_logging(verbose=verbose, log_file=constants.LOG_PATH)


@cli.command()
@_token_option
@_user_option
@click.option(
    "--lookback-days",
    default=constants.LOOKBACK_DAYS,
    type=click.IntRange(min=1),
    show_default=True,
    help="Only search emails newer than this many days.",
)
@click.option(
    "--max-pages",
    default=constants.MAX_PAGES,
    type=click.IntRange(min=1),
    show_default=True,
    help=f"Maximum result pages of {constants.PAGE_SIZE} messages to list.",
)
@click.option(
    "--patterns",
    "patterns_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file with extra keywords, indicators or exclusions.",
)
@click.option("--no-save", is_flag=True, help="Show results without storing them.")
def scan(
    token: str | None,
    user: str,
    lookback_days: int,
    max_pages: int,
    patterns_path: str | None,
    no_save: bool,
) -> None:
    """Scan your Gmail for subscription emails."""
    patterns = DEFAULT_PATTERNS
    if patterns_path:
        try:
            patterns = load_patterns(patterns_path)
        except ValueError as e:
            raise click.ClickException(f"Invalid patterns file: {e}") from e

    scan_options = {
        "patterns": patterns,
        "lookback_days": lookback_days,
        "max_pages": max_pages,
    }

    with create_progress("Scanning") as progress:
        task = progress.add_task("scan", total=100, detail="")

        def on_progress(update: SyncProgress) -> None:
            progress.update(
                task,
                completed=update.progress,
                detail=(
                    f"{update.processed_emails}/{update.total_emails} emails, "
                    f"{update.found_subscriptions} found"
                ),
            )

        try:
            if no_save:
                transport = GmailTransport.from_access_token(token or "")
                result = scan_subscriptions(transport, on_progress, **scan_options)
            else:
                service = SyncService(
                    GmailTransport.from_access_token, db_path=constants.STORE_DB_PATH, **scan_options
                )
                result = service.run_sync(user, token or "", listener=on_progress)
        except (FileNotFoundError, SubscriptionRadarError) as e:
            raise click.ClickException(str(e)) from e

    display_scan_summary(result)
    if result.subscriptions:
        display_subscriptions(result.subscriptions, title="Found subscriptions")


@cli.command(name="list")
@_user_option
@click.option("--min-confidence", default=0, type=click.IntRange(0, 100), help="Hide less certain results.")
@click.option("--all", "include_inactive", is_flag=True, help="Include removed subscriptions.")
def list_cmd(user: str, min_confidence: int, include_inactive: bool) -> None:
    """List stored subscriptions, soonest renewal first."""
    with _open_store() as store:
        subscriptions = store.list_subscriptions(user, include_inactive=include_inactive)

    if not subscriptions:
        console.print("[dim]No subscriptions stored. Run 'scan' first.[/dim]")
        return

    display_subscriptions(subscriptions, min_confidence=min_confidence)


@cli.command(name="export")
@_user_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    help="Output format.",
)
@click.option("-o", "--output", required=True, help="Output file path.")
def export_cmd(user: str, fmt: str, output: str) -> None:
    """Export stored subscriptions to CSV or JSON."""
    with _open_store() as store:
        subscriptions = store.list_subscriptions(user)

    if not subscriptions:
        raise click.ClickException("No subscriptions stored. Run 'scan' first.")

    export_subscriptions(subscriptions, format=fmt, output_path=output)


@cli.command()
@_user_option
@click.option(
    "-d",
    "--days",
    default=constants.NOTIFY_DAYS_BEFORE,
    type=click.IntRange(min=0),
    show_default=True,
    help="Warn about renewals within this many days.",
)
def reminders(user: str, days: int) -> None:
    """Show subscriptions that renew soon."""
    with _open_store() as store:
        subscriptions = store.list_subscriptions(user)

    display_reminders(due_reminders(subscriptions, notify_days_before=days))


@cli.command()
@_user_option
@click.argument("merchant")
@click.option("--remove", is_flag=True, help="Also remove it from the stored list.")
def cancel(user: str, merchant: str, remove: bool) -> None:
    """Show how to cancel a subscription."""
    with _open_store() as store:
        stored = next(
            (s for s in store.list_subscriptions(user) if s.merchant_key == merchant.lower()),
            None,
        )
        if remove:
            if not store.deactivate(user, merchant):
                raise click.ClickException(f"No stored subscription for {merchant}.")
            console.print(f"[green]Removed {merchant} from your subscriptions.[/green]")

    if stored is not None:
        display_subscription_detail(stored)
    else:
        display_cancel_guidance(merchant)


@cli.command()
@_user_option
def progress(user: str) -> None:
    """Show the progress of the latest scan."""
    with _open_store() as store:
        last = store.load_progress(user)

    if last is None:
        console.print("[dim]No scan has run yet.[/dim]")
        return

    display_sync_progress(last)


@cli.command()
@_token_option
def auth(token: str | None) -> None:
    """Check that Gmail can be read with the saved credentials or a token."""
    if not check_auth(token):
        raise click.exceptions.Exit(1)


@cli.group(name="store")
def store_group() -> None:
    """Manage the subscription store."""


@store_group.command(name="info")
def store_info() -> None:
    """Show store statistics."""
    with _open_store() as store:
        info = store.get_info()

    if info["subscription_count"] == 0 and info["last_sync_date"] is None:
        console.print("[dim]Store is empty.[/dim]")
        return

    console.print(f"[bold]Database size:[/bold] {info['db_file_size'] / 1024:.1f} KB")
    console.print(f"[bold]Last sync:[/bold] {info['last_sync_date']}")
    console.print(f"[bold]Subscriptions:[/bold] {info['subscription_count']}")
    console.print(f"[bold]Users:[/bold] {info['user_count']}")


@store_group.command(name="clear")
def store_clear() -> None:
    """Delete all stored subscriptions and progress."""
    with _open_store() as store:
        store.clear()
    console.print("[green]Store cleared.[/green]")
