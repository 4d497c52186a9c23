"""Shared fixtures for tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from subscription_radar.gmail_client import MailTransport, MessagePage
from subscription_radar.models import ExtractedSubscription, RawMessage


class FakeTransport(MailTransport):
    """In-memory mailbox: ``pages`` of ids and a dict of messages.

    ``errors`` maps a message id to the exception ``get_message`` raises for it;
    ``list_error`` is raised by every listing call.
    """

    def __init__(self, pages=None, messages=None, errors=None, list_error=None):
        self.pages = pages or []
        self.messages = messages or {}
        self.errors = errors or {}
        self.list_error = list_error
        self.list_calls = 0

    def list_message_ids(self, query, page_token=None):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        if not self.pages:
            return MessagePage()
        index = int(page_token) if page_token else 0
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return MessagePage(ids=list(self.pages[index]), next_page_token=next_token)

    def get_message(self, message_id):
        if message_id in self.errors:
            raise self.errors[message_id]
        return self.messages[message_id]


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 2, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def spotify_message() -> RawMessage:
    return RawMessage(
        message_id="msg_spotify",
        sender="Spotify <billing@spotify.com>",
        subject="Your receipt",
        snippet="Thanks for your payment",
        body="Spotify Premium Individual\nTotal charged: SAR 21.99\nYour plan renews on 2025-03-01.",
    )


@pytest.fixture
def karzoun_message() -> RawMessage:
    return RawMessage(
        message_id="msg_karzoun",
        sender="noreply@karzoun.com",
        subject="تم تجديد اشتراكك",
        snippet="شكرا لك",
    )


@pytest.fixture
def newsletter_message() -> RawMessage:
    return RawMessage(
        message_id="msg_newsletter",
        sender="Weekly Team <hello@example-news.com>",
        subject="Weekly Digest",
        snippet="Top stories this week",
        body="Our newsletter for you. Manage your subscription preferences at any time.",
    )


@pytest.fixture
def personal_message() -> RawMessage:
    return RawMessage(
        message_id="msg_personal",
        sender="Alice Smith <alice.smith@gmail.com>",
        subject="Lunch tomorrow?",
        snippet="Are you free at noon",
    )


@pytest.fixture
def make_transport():
    """Build a FakeTransport from messages spread over pages."""

    def _make(messages, page_size=500, **kwargs):
        ids = [m.message_id for m in messages]
        pages = [ids[i:i + page_size] for i in range(0, len(ids), page_size)]
        return FakeTransport(pages=pages, messages={m.message_id: m for m in messages}, **kwargs)

    return _make


@pytest.fixture
def sample_subscription() -> ExtractedSubscription:
    return ExtractedSubscription(
        name="Netflix",
        merchant="Netflix",
        amount=44.99,
        renewal_date=datetime(2025, 2, 3, tzinfo=timezone.utc),
        category="streaming",
        logo_color="#E50914",
        email_from="Netflix <info@mailer.netflix.com>",
        email_subject="Your Netflix membership",
        email_snippet="Your monthly membership renews soon",
        confidence=100,
        message_id="msg_netflix",
    )
