"""Confidence scoring of extracted subscriptions."""

from .constants import (
    CONFIDENCE_BASE,
    CONFIDENCE_HIGH,
    CONFIDENCE_MEDIUM,
    WEIGHT_AMOUNT,
    WEIGHT_KNOWN_MERCHANT,
    WEIGHT_MERCHANT,
    WEIGHT_RECURRING,
    WEIGHT_RENEWAL_DATE,
)


def score_confidence(
    amount_found: bool,
    date_found: bool,
    merchant_found: bool,
    recurring_indicator: bool,
    merchant_is_known: bool,
) -> int:
    """Combine extraction signals into a confidence score.

    Returns an int between 0 and 100.
    """
    total = CONFIDENCE_BASE

    if amount_found:
        total += WEIGHT_AMOUNT

    if date_found:
        total += WEIGHT_RENEWAL_DATE

    if merchant_found:
        total += WEIGHT_MERCHANT

    if recurring_indicator:
        total += WEIGHT_RECURRING

    if merchant_is_known:
        total += WEIGHT_KNOWN_MERCHANT

    return max(0, min(total, 100))


def confidence_label(score: int) -> str:
    """Bucket a confidence score for display."""
    if score >= CONFIDENCE_HIGH:
        return "high"
    if score >= CONFIDENCE_MEDIUM:
        return "medium"
    return "low"
