"""Rich-based display functions for Subscription Radar."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .merchants import GENERIC_CANCEL_STEPS, cancel_url_for, get
from .models import ExtractedSubscription, ScanResult, SyncProgress, SyncStatus
from .reminders import Reminder
from .scorer import confidence_label

console = Console()

_LABEL_COLORS = {"high": "green", "medium": "yellow", "low": "red"}


def _confidence_color(score: int) -> str:
    """Return a Rich color name based on the confidence value."""
    return _LABEL_COLORS[confidence_label(score)]


def _amount(sub: ExtractedSubscription) -> str:
    return f"{sub.amount:.2f}" if sub.amount > 0 else "[dim]unknown[/dim]"


def display_subscriptions(
    subscriptions: list[ExtractedSubscription],
    min_confidence: int = 0,
    title: str = "Subscriptions",
) -> None:
    """Display subscriptions sorted by renewal date, soonest first."""
    shown = sorted(
        (s for s in subscriptions if s.confidence >= min_confidence),
        key=lambda s: s.renewal_date,
    )

    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Merchant")
    table.add_column("Amount", justify="right")
    table.add_column("Renews")
    table.add_column("Category")
    table.add_column("Confidence", justify="right")
    table.add_column("Trial", justify="center")

    total = 0.0
    for idx, sub in enumerate(shown, start=1):
        color = _confidence_color(sub.confidence)
        total += sub.amount
        table.add_row(
            str(idx),
            f"[{sub.logo_color}]●[/{sub.logo_color}] {sub.merchant}",
            _amount(sub),
            sub.renewal_date.strftime("%Y-%m-%d"),
            sub.category,
            f"[{color}]{sub.confidence}[/{color}]",
            "yes" if sub.is_trial else "",
        )

    console.print(table)
    console.print(
        Panel(
            f"Subscriptions shown: {len(shown)}  |  Known charges: {total:.2f}",
            title="Summary",
        )
    )


def display_scan_summary(result: ScanResult) -> None:
    lines = [
        f"[bold]Messages scanned:[/bold] {result.processed_emails} of {result.total_emails}",
        f"[bold]Subscriptions found:[/bold] {len(result.subscriptions)}",
    ]
    if result.ceiling_reached:
        lines.append("[yellow]Page limit reached: older matching emails were not scanned.[/yellow]")
    console.print(Panel("\n".join(lines), title="Scan complete"))


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar measured in percent."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.fields[detail]}"),
        TimeElapsedColumn(),
        console=console,
    )


def display_subscription_detail(sub: ExtractedSubscription) -> None:
    """Display one subscription with its source email and how to cancel it."""
    color = _confidence_color(sub.confidence)
    lines = [
        f"[bold]Merchant:[/bold] {sub.merchant}",
        f"[bold]Amount:[/bold] {_amount(sub)}",
        f"[bold]Renews:[/bold] {sub.renewal_date.strftime('%Y-%m-%d')}",
        f"[bold]Category:[/bold] {sub.category}",
        f"[bold]Confidence:[/bold] [{color}]{sub.confidence} ({confidence_label(sub.confidence)})[/{color}]",
    ]
    if sub.is_trial:
        lines.append("[bold]Trial:[/bold] yes")
    if sub.email_from or sub.email_subject:
        lines.append("")
        lines.append("[bold]Source email:[/bold]")
        lines.append(f"  From: {sub.email_from}")
        lines.append(f"  Subject: {sub.email_subject}")
        if sub.email_snippet:
            lines.append(f"  {sub.email_snippet}")
    console.print(Panel("\n".join(lines), title="Subscription Detail"))
    display_cancel_guidance(sub.merchant)


def display_cancel_guidance(merchant: str) -> None:
    lines = [f"[bold]Cancel at:[/bold] {cancel_url_for(merchant)}"]
    entry = get(merchant)
    if entry is None or not entry.cancel_url:
        lines.append("")
        for step_num, step in enumerate(GENERIC_CANCEL_STEPS, start=1):
            lines.append(f"  {step_num}. {step.replace('<service>', merchant)}")
    console.print(Panel("\n".join(lines), title=f"Cancel {merchant}"))


def display_reminders(reminders: list[Reminder]) -> None:
    if not reminders:
        console.print("[dim]No renewals coming up.[/dim]")
        return
    for reminder in reminders:
        color = "red" if reminder.days_left == 0 else "yellow"
        console.print(f"[{color}]●[/{color}] {reminder.message}")


def display_sync_progress(progress: SyncProgress) -> None:
    color = {
        SyncStatus.SYNCING: "blue",
        SyncStatus.COMPLETED: "green",
        SyncStatus.ERROR: "red",
    }[progress.status]
    lines = [
        f"[bold]Status:[/bold] [{color}]{progress.status.value}[/{color}]",
        f"[bold]Progress:[/bold] {progress.progress}%",
        f"[bold]Emails:[/bold] {progress.processed_emails} of {progress.total_emails}",
        f"[bold]Found:[/bold] {progress.found_subscriptions}",
    ]
    if progress.error:
        lines.append(f"[bold]Error:[/bold] {progress.error}")
    console.print(Panel("\n".join(lines), title="Sync Progress"))
