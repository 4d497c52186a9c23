"""Tests for the data models."""

from datetime import datetime, timezone

from subscription_radar.models import ExtractedSubscription, MerchantMatch, SyncProgress, SyncStatus


def test_subscription_to_dict(sample_subscription):
    """Output records should use camelCase keys and ISO dates."""
    data = sample_subscription.to_dict()
    assert data["merchant"] == "Netflix"
    assert data["renewalDate"] == "2025-02-03T00:00:00+00:00"
    assert data["logoColor"] == "#E50914"
    assert data["isTrial"] is False
    assert "message_id" not in data


def test_subscription_from_dict_round_trip(sample_subscription):
    """A record read back should equal the original."""
    data = sample_subscription.to_dict()
    assert ExtractedSubscription.from_dict(data, message_id="msg_netflix") == sample_subscription


def test_subscription_from_dict_naive_date():
    """Dates without a timezone are read as UTC."""
    sub = ExtractedSubscription.from_dict(
        {
            "name": "Spotify",
            "merchant": "Spotify",
            "amount": "21.99",
            "renewalDate": "2025-03-01T00:00:00",
            "category": "streaming",
            "logoColor": "#1DB954",
            "confidence": "90",
        }
    )
    assert sub.renewal_date == datetime(2025, 3, 1, tzinfo=timezone.utc)
    assert sub.amount == 21.99
    assert sub.confidence == 90
    assert sub.email_from == ""


def test_merchant_key_is_case_insensitive(sample_subscription):
    """Merchant keys should ignore case."""
    assert sample_subscription.merchant_key == "netflix"


def test_merchant_match_is_known():
    """Heuristic matches have no registry entry."""
    assert not MerchantMatch(name="Karzoun").is_known


def test_sync_progress_to_dict_omits_missing_error():
    """The error field is only present for failed scans."""
    ok = SyncProgress(status=SyncStatus.SYNCING, total_emails=10, processed_emails=5, progress=60)
    assert ok.to_dict() == {
        "status": "syncing",
        "progress": 60,
        "totalEmails": 10,
        "processedEmails": 5,
        "foundSubscriptions": 0,
    }
    failed = SyncProgress(status=SyncStatus.ERROR, error="token expired")
    assert failed.to_dict()["error"] == "token expired"
    assert SyncProgress.from_dict(failed.to_dict()) == failed
