"""Renewal reminders for upcoming subscription charges."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from .constants import NOTIFY_DAYS_BEFORE
from .models import ExtractedSubscription


@dataclass
class Reminder:
    merchant: str
    days_left: int
    renewal_date: datetime
    amount: float
    message: str


def _format_message(merchant: str, days_left: int, amount: float) -> str:
    if days_left == 0:
        when = "renews today"
    elif days_left == 1:
        when = "renews tomorrow"
    else:
        when = f"renews in {days_left} days"
    message = f"{merchant} {when}"
    if amount > 0:
        message += f" - {amount:.2f}"
    return message


def due_reminders(
    subscriptions: list[ExtractedSubscription],
    notify_days_before: int = NOTIFY_DAYS_BEFORE,
    now: datetime | None = None,
) -> list[Reminder]:
    """Return reminders for subscriptions renewing within ``notify_days_before`` days.

    Days are counted in calendar days (UTC), so a renewal later today is
    ``0`` days away. Past renewals are ignored. Soonest first.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(timezone.utc).date()

    reminders = []
    for sub in subscriptions:
        days_left = (sub.renewal_date.astimezone(timezone.utc).date() - today).days
        if 0 <= days_left <= notify_days_before:
            reminders.append(
                Reminder(
                    merchant=sub.merchant,
                    days_left=days_left,
                    renewal_date=sub.renewal_date,
                    amount=sub.amount,
                    message=_format_message(sub.merchant, days_left, sub.amount),
                )
            )
    reminders.sort(key=lambda r: (r.days_left, r.merchant.lower()))
    return reminders
