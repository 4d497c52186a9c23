"""Background sync: one scan per user at a time, progress published for polling."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable

from .errors import ScanInProgressError
from .gmail_client import GmailTransport, MailTransport
from .models import ScanResult, SyncProgress, SyncStatus
from .scanner import ProgressSink, scan_subscriptions
from .store import SubscriptionStore

logger = logging.getLogger(__name__)


class SyncService:
    """Runs subscription scans and keeps the latest progress per user.

    A user holds at most one scan token at a time. Starting a second scan
    while one is active raises ScanInProgressError, and progress written
    under a token that is no longer active is dropped.
    """

    def __init__(
        self,
        transport_factory: Callable[[str], MailTransport] = GmailTransport.from_access_token,
        db_path: Path | None = None,
        **scan_options,
    ) -> None:
        self.transport_factory = transport_factory
        self.db_path = db_path
        self.scan_options = scan_options
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._active: dict[str, int] = {}
        self._progress: dict[str, SyncProgress] = {}

    # --- scan tokens ---

    def _acquire(self, user_id: str) -> int:
        with self._lock:
            if user_id in self._active:
                raise ScanInProgressError(user_id)
            token = next(self._tokens)
            self._active[user_id] = token
            self._progress[user_id] = SyncProgress(status=SyncStatus.SYNCING)
            return token

    def _release(self, user_id: str, token: int) -> None:
        with self._lock:
            if self._active.get(user_id) == token:
                del self._active[user_id]

    def _write(
        self,
        store: SubscriptionStore,
        user_id: str,
        token: int,
        progress: SyncProgress,
        listener: ProgressSink | None = None,
    ) -> None:
        with self._lock:
            if self._active.get(user_id) != token:
                logger.debug("Dropped stale progress for %s", user_id)
                return
            self._progress[user_id] = progress
        store.save_progress(user_id, progress)
        if listener is not None:
            listener(progress)

    # --- public API ---

    def is_running(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._active

    def get_progress(self, user_id: str) -> SyncProgress | None:
        """Latest progress for a user, falling back to the stored record."""
        with self._lock:
            progress = self._progress.get(user_id)
        if progress is not None:
            return progress
        with SubscriptionStore(self.db_path) as store:
            return store.load_progress(user_id)

    def run_sync(
        self, user_id: str, access_token: str, listener: ProgressSink | None = None
    ) -> ScanResult:
        """Scan in the calling thread and persist what was found.

        ``listener`` also receives every progress report, e.g. to drive a
        progress bar.
        """
        token = self._acquire(user_id)
        return self._run(user_id, access_token, token, listener)

    def start_sync(self, user_id: str, access_token: str) -> threading.Thread:
        """Start a scan in a background thread and return immediately."""
        token = self._acquire(user_id)
        thread = threading.Thread(
            target=self._run_in_background,
            args=(user_id, access_token, token),
            name=f"subscription-sync-{user_id}",
            daemon=True,
        )
        thread.start()
        return thread

    # --- workers ---

    def _run_in_background(self, user_id: str, access_token: str, token: int) -> None:
        try:
            self._run(user_id, access_token, token)
        except Exception:  # noqa: BLE001
            logger.exception("Background sync for %s failed", user_id)

    def _run(
        self, user_id: str, access_token: str, token: int, listener: ProgressSink | None = None
    ) -> ScanResult:
        try:
            with SubscriptionStore(self.db_path) as store:
                completed: list[SyncProgress] = []

                def on_progress(progress: SyncProgress) -> None:
                    # Hold back "completed" until results are stored
                    if progress.status is SyncStatus.COMPLETED:
                        completed.append(progress)
                        return
                    self._write(store, user_id, token, progress, listener)

                try:
                    transport = self.transport_factory(access_token)
                except Exception as exc:
                    failed = SyncProgress(status=SyncStatus.ERROR, error=str(exc))
                    self._write(store, user_id, token, failed, listener)
                    raise

                result = scan_subscriptions(transport, on_progress, **self.scan_options)
                try:
                    inserted = store.save_subscriptions(user_id, result.subscriptions)
                except Exception as exc:
                    last = completed[-1] if completed else SyncProgress(status=SyncStatus.SYNCING)
                    failed = replace(last, status=SyncStatus.ERROR, error=str(exc))
                    self._write(store, user_id, token, failed, listener)
                    raise
                logger.info(
                    "Sync for %s stored %d new of %d found subscriptions",
                    user_id,
                    inserted,
                    len(result.subscriptions),
                )
                for progress in completed:
                    self._write(store, user_id, token, progress, listener)
                return result
        finally:
            self._release(user_id, token)
