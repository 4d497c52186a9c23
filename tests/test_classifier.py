"""Tests for the classifier module."""

from subscription_radar.classifier import (
    has_recurring_indicator,
    is_candidate,
    is_excluded,
    is_trial,
    normalize_text,
)
from subscription_radar.models import RawMessage
from subscription_radar.patterns import DEFAULT_PATTERNS


def test_normalize_text_joins_and_lowercases():
    """Subject, snippet and body should be joined and lower-cased."""
    message = RawMessage(message_id="m1", sender="x@y.com", subject="Your Receipt", snippet="SAR 10", body="Thanks")
    assert normalize_text(message) == "your receipt sar 10 thanks"


def test_receipt_is_candidate(spotify_message):
    """A receipt with billing wording should be a candidate."""
    text = normalize_text(spotify_message)
    assert is_candidate(text, spotify_message.sender)


def test_arabic_renewal_is_candidate(karzoun_message):
    """Arabic renewal wording should be recognized."""
    text = normalize_text(karzoun_message)
    assert is_candidate(text, karzoun_message.sender)
    assert has_recurring_indicator(text)


def test_personal_mail_is_not_candidate(personal_message):
    """Personal mail without billing wording should be rejected."""
    text = normalize_text(personal_message)
    assert not is_candidate(text, personal_message.sender)


def test_exclusion_wins_over_keywords(newsletter_message):
    """Exclusion phrases reject a message even when it says 'subscription'."""
    text = normalize_text(newsletter_message)
    assert "subscription" in text
    assert is_excluded(text)
    assert not is_candidate(text, newsletter_message.sender)


def test_newsletter_domain_rejected():
    """Bulk newsletter platforms should be rejected by sender."""
    text = "your monthly subscription receipt"
    assert not is_candidate(text, "Writer <writer@substack.com>")


def test_trial_detection():
    """Trial wording should be detected in English and Arabic."""
    assert is_trial("your free trial ends soon")
    assert is_trial("تجربة مجانية لمدة شهر")
    assert not is_trial("your receipt")


def test_extended_patterns_apply():
    """Extra exclusion phrases should reject otherwise valid messages."""
    patterns = DEFAULT_PATTERNS.extended(exclusion_patterns=["Webinar"])
    text = "webinar payment receipt"
    assert is_candidate(text, "events@example.com")
    assert not is_candidate(text, "events@example.com", patterns)
