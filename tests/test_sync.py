"""Tests for the background sync service."""

import sqlite3
import threading

import pytest

from subscription_radar.errors import AuthError, ScanInProgressError
from subscription_radar.models import SyncStatus
from subscription_radar.store import SubscriptionStore
from subscription_radar.sync import SyncService


def test_run_sync_stores_results(tmp_path, make_transport, spotify_message, karzoun_message, now):
    """A sync should persist subscriptions and finish with completed progress."""
    db_path = tmp_path / "store.db"
    transport = make_transport([spotify_message, karzoun_message])
    service = SyncService(lambda token: transport, db_path=db_path, now=now)

    result = service.run_sync("me", "token")

    assert len(result.subscriptions) == 2
    with SubscriptionStore(db_path) as store:
        assert len(store.list_subscriptions("me")) == 2
    progress = service.get_progress("me")
    assert progress.status is SyncStatus.COMPLETED
    assert progress.progress == 100
    assert progress.found_subscriptions == 2
    assert not service.is_running("me")


def test_completed_reported_after_results_stored(tmp_path, make_transport, spotify_message, now):
    """A poller seeing 'completed' should already find the results stored."""
    db_path = tmp_path / "store.db"
    transport = make_transport([spotify_message])
    service = SyncService(lambda token: transport, db_path=db_path, now=now)
    stored_at_completion = []

    def listener(progress):
        if progress.status is SyncStatus.COMPLETED:
            with SubscriptionStore(db_path) as store:
                stored_at_completion.append(len(store.list_subscriptions("me")))

    service.run_sync("me", "token", listener=listener)

    assert stored_at_completion == [1]


def test_listener_sees_monotonic_progress(tmp_path, make_transport, spotify_message, karzoun_message, now):
    """The listener should receive every report in non-decreasing order."""
    transport = make_transport([spotify_message, karzoun_message])
    service = SyncService(lambda token: transport, db_path=tmp_path / "store.db", now=now, batch_size=1)
    updates = []

    service.run_sync("me", "token", listener=updates.append)

    percents = [u.progress for u in updates]
    assert percents == sorted(percents)
    assert updates[-1].status is SyncStatus.COMPLETED


def test_second_scan_rejected_while_running(tmp_path, make_transport, spotify_message, now):
    """Only one scan per user may run at a time."""
    release = threading.Event()
    started = threading.Event()
    transport = make_transport([spotify_message])
    original = transport.list_message_ids

    def slow_list(query, page_token=None):
        started.set()
        release.wait(timeout=5)
        return original(query, page_token)

    transport.list_message_ids = slow_list
    service = SyncService(lambda token: transport, db_path=tmp_path / "store.db", now=now)

    thread = service.start_sync("me", "token")
    assert started.wait(timeout=5)
    assert service.is_running("me")
    assert service.get_progress("me").status is SyncStatus.SYNCING

    with pytest.raises(ScanInProgressError) as excinfo:
        service.run_sync("me", "token")
    assert excinfo.value.user_id == "me"

    release.set()
    thread.join(timeout=5)
    assert not service.is_running("me")
    assert service.get_progress("me").status is SyncStatus.COMPLETED


def test_auth_error_recorded(tmp_path, make_transport, now):
    """A rejected token should leave an error record and free the user."""
    transport = make_transport([], list_error=AuthError("token expired"))
    service = SyncService(lambda token: transport, db_path=tmp_path / "store.db", now=now)

    with pytest.raises(AuthError):
        service.run_sync("me", "bad-token")

    progress = service.get_progress("me")
    assert progress.status is SyncStatus.ERROR
    assert progress.error == "token expired"
    assert not service.is_running("me")


def test_transport_factory_failure_recorded(tmp_path):
    """A transport that cannot be built should be reported as an error."""

    def factory(token):
        raise AuthError("no token")

    service = SyncService(factory, db_path=tmp_path / "store.db")

    with pytest.raises(AuthError):
        service.run_sync("me", "")

    assert service.get_progress("me").status is SyncStatus.ERROR
    assert not service.is_running("me")


def test_background_failure_is_contained(tmp_path, make_transport, now):
    """A failing background scan should record the error, not crash the caller."""
    transport = make_transport([], list_error=AuthError("token expired"))
    service = SyncService(lambda token: transport, db_path=tmp_path / "store.db", now=now)

    service.start_sync("me", "bad-token").join(timeout=5)

    assert service.get_progress("me").status is SyncStatus.ERROR


def test_progress_read_from_store(tmp_path, make_transport, spotify_message, now):
    """A fresh service should read the last stored progress."""
    db_path = tmp_path / "store.db"
    transport = make_transport([spotify_message])
    SyncService(lambda token: transport, db_path=db_path, now=now).run_sync("me", "token")

    progress = SyncService(db_path=db_path).get_progress("me")

    assert progress.status is SyncStatus.COMPLETED
    assert SyncService(db_path=db_path).get_progress("someone-else") is None


def test_storage_failure_reports_error(tmp_path, make_transport, spotify_message, now, monkeypatch):
    """If results cannot be stored the scan should end in error, not stay syncing."""
    def broken_save(self, user_id, subscriptions):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(SubscriptionStore, "save_subscriptions", broken_save)
    transport = make_transport([spotify_message])
    service = SyncService(lambda token: transport, db_path=tmp_path / "store.db", now=now)
    updates = []

    with pytest.raises(sqlite3.OperationalError):
        service.run_sync("me", "token", listener=updates.append)

    progress = service.get_progress("me")
    assert progress.status is SyncStatus.ERROR
    assert progress.error == "database is locked"
    assert progress.progress == 100
    assert all(u.status is not SyncStatus.COMPLETED for u in updates)
    assert not service.is_running("me")
    with SubscriptionStore(tmp_path / "store.db") as store:
        assert store.load_progress("me").status is SyncStatus.ERROR
