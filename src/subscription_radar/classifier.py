"""Decide whether a message looks like a recurring-payment notification."""

from __future__ import annotations

from .models import RawMessage
from .patterns import DEFAULT_PATTERNS, PatternSet


def normalize_text(message: RawMessage) -> str:
    """Lower-cased subject, snippet and body, as read by every extractor."""
    return f"{message.subject} {message.snippet} {message.body}".lower()


def _contains_any(text: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)


def is_excluded(text: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    return _contains_any(text, patterns.exclusion_patterns)


def is_newsletter_sender(sender: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    return _contains_any(sender.lower(), patterns.newsletter_domains)


def has_subscription_keyword(text: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    return _contains_any(text, patterns.subscription_keywords)


def has_recurring_indicator(text: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    """True when the text uses explicit recurrence language."""
    return _contains_any(text, patterns.recurring_indicators)


def is_trial(text: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    return _contains_any(text, patterns.trial_indicators)


def is_candidate(text: str, sender: str, patterns: PatternSet = DEFAULT_PATTERNS) -> bool:
    """Return True if normalized ``text`` from ``sender`` is subscription-like.

    Exclusion phrases and bulk-newsletter senders reject the message before
    any inclusion signal is considered.
    """
    if is_excluded(text, patterns):
        return False
    if is_newsletter_sender(sender, patterns):
        return False
    return has_subscription_keyword(text, patterns) or has_recurring_indicator(text, patterns)
