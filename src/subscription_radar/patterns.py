"""Keyword sets used by the classifier, loadable from JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .constants import (
    EXCLUSION_PATTERNS,
    NEWSLETTER_DOMAINS,
    RECURRING_INDICATORS,
    SUBSCRIPTION_KEYWORDS,
    TRIAL_INDICATORS,
)


@dataclass(frozen=True)
class PatternSet:
    """Lower-cased phrase lists the classifier matches as substrings."""

    subscription_keywords: tuple[str, ...]
    recurring_indicators: tuple[str, ...]
    exclusion_patterns: tuple[str, ...]
    newsletter_domains: tuple[str, ...]
    trial_indicators: tuple[str, ...]

    @classmethod
    def from_lists(cls, **lists: list[str]) -> PatternSet:
        return cls(**{name: tuple(p.lower() for p in values) for name, values in lists.items()})

    def extended(self, **extra: list[str]) -> PatternSet:
        """Return a copy with ``extra`` phrases appended to the named lists."""
        known = {f.name for f in fields(self)}
        unknown = set(extra) - known
        if unknown:
            raise ValueError(f"Unknown pattern lists: {', '.join(sorted(unknown))}")
        changes = {}
        for name, values in extra.items():
            current = getattr(self, name)
            added = tuple(v.lower() for v in values if v.lower() not in current)
            changes[name] = current + added
        return replace(self, **changes)


DEFAULT_PATTERNS = PatternSet.from_lists(
    subscription_keywords=SUBSCRIPTION_KEYWORDS,
    recurring_indicators=RECURRING_INDICATORS,
    exclusion_patterns=EXCLUSION_PATTERNS,
    newsletter_domains=NEWSLETTER_DOMAINS,
    trial_indicators=TRIAL_INDICATORS,
)


def load_patterns(path: Path | str, base: PatternSet = DEFAULT_PATTERNS) -> PatternSet:
    """Extend ``base`` with the lists found in a JSON file.

    The file holds an object whose keys are PatternSet field names and whose
    values are lists of phrases, e.g. ``{"exclusion_patterns": ["webinar"]}``.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of phrase lists")
    return base.extended(**data)
