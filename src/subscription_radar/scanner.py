"""Scan orchestration - list messages, extract subscriptions, dedup by merchant."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from .classifier import has_recurring_indicator, is_candidate, is_trial, normalize_text
from .constants import (
    BATCH_SIZE,
    DEFAULT_COLOR,
    LOOKBACK_DAYS,
    MAX_PAGES,
    PAGING_PROGRESS_SHARE,
    SEARCH_GROUPS,
    SNIPPET_LIMIT,
    TOP_SERVICES,
)
from .errors import AuthError, TransportError
from .extractors import default_renewal_date, extract_amount, extract_merchant, extract_renewal_date
from .gmail_client import MailTransport
from .models import (
    Category,
    ExtractedSubscription,
    RawMessage,
    ScanResult,
    SyncProgress,
    SyncStatus,
)
from .patterns import DEFAULT_PATTERNS, PatternSet
from .scorer import score_confidence

logger = logging.getLogger(__name__)

ProgressSink = Callable[[SyncProgress], None]


def build_search_query(
    now: datetime | None = None,
    lookback_days: int = LOOKBACK_DAYS,
    services: list[str] = TOP_SERVICES,
) -> str:
    """Build one broad Gmail query: keyword groups OR service names, recent only."""
    now = now or datetime.now(timezone.utc)
    after = (now - timedelta(days=lookback_days)).strftime("%Y/%m/%d")
    service_query = "(" + " OR ".join(f'"{s}"' for s in services) + ")"
    return f"({' OR '.join([*SEARCH_GROUPS, service_query])}) after:{after}"


def extract_subscription(
    message: RawMessage,
    now: datetime | None = None,
    patterns: PatternSet = DEFAULT_PATTERNS,
) -> ExtractedSubscription | None:
    """Classify one message and extract a subscription from it, or return None."""
    text = normalize_text(message)
    if not is_candidate(text, message.sender, patterns):
        logger.debug("Skipped %s (not subscription-like): %.50s", message.message_id, message.subject)
        return None

    match = extract_merchant(message.sender, message.subject)
    if match is None:
        logger.debug("Skipped %s (no merchant): %.50s", message.message_id, message.subject)
        return None

    amount = extract_amount(text)
    renewal = extract_renewal_date(text, now)
    confidence = score_confidence(
        amount_found=amount is not None,
        date_found=renewal is not None,
        merchant_found=True,
        recurring_indicator=has_recurring_indicator(text, patterns),
        merchant_is_known=match.is_known,
    )
    entry = match.entry

    return ExtractedSubscription(
        name=match.name,
        merchant=match.name,
        amount=amount if amount is not None else 0.0,
        renewal_date=renewal or default_renewal_date(now),
        category=entry.category.value if entry else Category.OTHER.value,
        logo_color=entry.color if entry else DEFAULT_COLOR,
        email_from=message.sender,
        email_subject=message.subject,
        email_snippet=message.snippet[:SNIPPET_LIMIT],
        confidence=confidence,
        is_trial=is_trial(text, patterns),
        message_id=message.message_id,
    )


class _ProgressReporter:
    """Forward progress to a sink, never letting the percentage go backwards."""

    def __init__(self, sink: ProgressSink | None) -> None:
        self.sink = sink
        self.percent = 0
        self.total = 0
        self.processed = 0
        self.found = 0

    def report(self, status: SyncStatus, percent: int | None = None, error: str | None = None) -> None:
        if percent is not None:
            self.percent = max(self.percent, min(percent, 100))
        if self.sink is None:
            return
        self.sink(
            SyncProgress(
                status=status,
                total_emails=self.total,
                processed_emails=self.processed,
                found_subscriptions=self.found,
                progress=self.percent,
                error=error,
            )
        )


def _list_all_ids(
    transport: MailTransport,
    query: str,
    max_pages: int,
    reporter: _ProgressReporter,
) -> tuple[list[str], bool]:
    """Page through search results. Returns (unique ids, ceiling reached)."""
    ids: list[str] = []
    seen: set[str] = set()
    page_token: str | None = None
    pages = 0

    while True:
        page = transport.list_message_ids(query, page_token)
        pages += 1
        for msg_id in page.ids:
            if msg_id not in seen:
                seen.add(msg_id)
                ids.append(msg_id)
        logger.info("Page %d: %d messages (total %d)", pages, len(page.ids), len(ids))

        reporter.total = len(ids)
        reporter.report(
            SyncStatus.SYNCING,
            percent=min(PAGING_PROGRESS_SHARE, pages * PAGING_PROGRESS_SHARE // max_pages),
        )

        page_token = page.next_page_token
        if not page_token:
            return ids, False
        if pages >= max_pages:
            logger.warning(
                "Reached page limit (%d pages, %d messages); older matches are not scanned",
                pages,
                len(ids),
            )
            return ids, True


def _fetch_batch(transport: MailTransport, batch: list[str]) -> list[tuple[str, RawMessage | Exception]]:
    try:
        return transport.get_messages(batch)
    except AuthError:
        raise
    except TransportError as exc:
        logger.warning("Batch fetch failed, skipping %d messages: %s", len(batch), exc)
        return [(msg_id, exc) for msg_id in batch]


def _extract_one(
    msg_id: str,
    outcome: RawMessage | Exception,
    now: datetime,
    patterns: PatternSet,
) -> ExtractedSubscription | None:
    if isinstance(outcome, AuthError):
        raise outcome
    if isinstance(outcome, Exception):
        logger.warning("Skipping message %s: %s", msg_id, outcome)
        return None
    try:
        return extract_subscription(outcome, now, patterns)
    except Exception:  # noqa: BLE001
        logger.warning("Skipping message %s: could not be parsed", msg_id, exc_info=True)
        return None


def scan_subscriptions(
    transport: MailTransport,
    on_progress: ProgressSink | None = None,
    now: datetime | None = None,
    patterns: PatternSet = DEFAULT_PATTERNS,
    lookback_days: int = LOOKBACK_DAYS,
    max_pages: int = MAX_PAGES,
    batch_size: int = BATCH_SIZE,
) -> ScanResult:
    """Run a full scan: search, fetch in batches, extract, dedup by merchant.

    Raises AuthError when the token is rejected and TransportError when
    listing fails; in both cases an ``error`` progress report is sent first
    and no subscriptions are returned.
    """
    now = now or datetime.now(timezone.utc)
    reporter = _ProgressReporter(on_progress)
    query = build_search_query(now, lookback_days)
    logger.info("Searching %d services over the last %d days", len(TOP_SERVICES), lookback_days)

    try:
        ids, ceiling_reached = _list_all_ids(transport, query, max_pages, reporter)

        found: dict[str, ExtractedSubscription] = {}
        total = len(ids)
        total_batches = (total + batch_size - 1) // batch_size

        for batch_num, start in enumerate(range(0, total, batch_size), start=1):
            batch = ids[start:start + batch_size]
            logger.info("Processing batch %d/%d (%d messages)", batch_num, total_batches, len(batch))

            for msg_id, outcome in _fetch_batch(transport, batch):
                sub = _extract_one(msg_id, outcome, now, patterns)
                if sub is None or sub.merchant_key in found:
                    continue
                found[sub.merchant_key] = sub
                logger.info("Found subscription: %s - %.2f", sub.merchant, sub.amount)

            reporter.processed += len(batch)
            reporter.found = len(found)
            reporter.report(
                SyncStatus.SYNCING,
                percent=PAGING_PROGRESS_SHARE
                + reporter.processed * (100 - PAGING_PROGRESS_SHARE) // total,
            )
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        reporter.report(SyncStatus.ERROR, error=str(exc) or exc.__class__.__name__)
        raise

    logger.info(
        "Extracted %d unique subscriptions from %d messages%s",
        len(found),
        total,
        " (page limit reached)" if ceiling_reached else "",
    )
    reporter.report(SyncStatus.COMPLETED, percent=100)

    return ScanResult(
        subscriptions=list(found.values()),
        total_emails=total,
        processed_emails=reporter.processed,
        ceiling_reached=ceiling_reached,
        query=query,
    )
