"""Tests for the patterns module."""

import json

import pytest

from subscription_radar.patterns import DEFAULT_PATTERNS, load_patterns


def test_default_patterns_are_lowercase():
    """Every default phrase should already be lower-cased."""
    for phrases in (
        DEFAULT_PATTERNS.subscription_keywords,
        DEFAULT_PATTERNS.recurring_indicators,
        DEFAULT_PATTERNS.exclusion_patterns,
    ):
        assert all(p == p.lower() for p in phrases)


def test_extended_appends_without_duplicates():
    """Extending should append new phrases and skip known ones."""
    patterns = DEFAULT_PATTERNS.extended(subscription_keywords=["Receipt", "Standing Order"])
    added = patterns.subscription_keywords[len(DEFAULT_PATTERNS.subscription_keywords):]
    assert added == ("standing order",)


def test_extended_leaves_original_untouched():
    """DEFAULT_PATTERNS should not change when a copy is extended."""
    before = DEFAULT_PATTERNS.exclusion_patterns
    DEFAULT_PATTERNS.extended(exclusion_patterns=["webinar"])
    assert DEFAULT_PATTERNS.exclusion_patterns == before


def test_extended_unknown_list():
    """Unknown list names should be rejected."""
    with pytest.raises(ValueError, match="Unknown pattern lists"):
        DEFAULT_PATTERNS.extended(keywords=["x"])


def test_load_patterns(tmp_path):
    """A JSON file should extend the default lists."""
    path = tmp_path / "patterns.json"
    path.write_text(json.dumps({"exclusion_patterns": ["Webinar"], "trial_indicators": ["test drive"]}))
    patterns = load_patterns(path)
    assert "webinar" in patterns.exclusion_patterns
    assert "test drive" in patterns.trial_indicators
    assert patterns.subscription_keywords == DEFAULT_PATTERNS.subscription_keywords


def test_load_patterns_rejects_non_object(tmp_path):
    """A JSON list is not a valid patterns file."""
    path = tmp_path / "patterns.json"
    path.write_text(json.dumps(["webinar"]))
    with pytest.raises(ValueError):
        load_patterns(path)
