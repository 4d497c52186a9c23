"""Tests for the export module."""

import csv
import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from subscription_radar.export import export_subscriptions


def test_export_csv(tmp_path, sample_subscription):
    """CSV export should write one row per subscription with a label."""
    output = tmp_path / "subs.csv"
    export_subscriptions([sample_subscription], format="csv", output_path=str(output))

    with open(output, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    assert len(rows) == 1
    assert rows[0]["merchant"] == "Netflix"
    assert rows[0]["amount"] == "44.99"
    assert rows[0]["confidenceLabel"] == "high"
    assert rows[0]["renewalDate"].startswith("2025-02-03")


def test_export_json_sorted_by_renewal(tmp_path, sample_subscription):
    """JSON export should list the soonest renewal first."""
    karzoun = replace(
        sample_subscription,
        name="Karzoun",
        merchant="Karzoun",
        amount=0.0,
        category="other",
        confidence=70,
        renewal_date=datetime(2025, 1, 20, tzinfo=timezone.utc),
    )
    output = tmp_path / "subs.json"
    export_subscriptions([sample_subscription, karzoun], format="json", output_path=str(output))

    rows = json.loads(output.read_text(encoding="utf-8"))
    assert [row["merchant"] for row in rows] == ["Karzoun", "Netflix"]
    assert rows[0]["confidenceLabel"] == "medium"
    assert rows[0]["logoColor"] == sample_subscription.logo_color


def test_export_unknown_format(tmp_path, sample_subscription):
    """Unsupported formats should be rejected."""
    with pytest.raises(ValueError):
        export_subscriptions([sample_subscription], format="xml", output_path=str(tmp_path / "subs.xml"))
