"""Export stored subscriptions to CSV or JSON."""

import csv
import json

from .models import ExtractedSubscription
from .scorer import confidence_label

_FIELDNAMES = [
    "name",
    "merchant",
    "amount",
    "renewalDate",
    "category",
    "confidence",
    "confidenceLabel",
    "isTrial",
    "emailFrom",
    "emailSubject",
]


def export_subscriptions(
    subscriptions: list[ExtractedSubscription], format: str, output_path: str
) -> None:
    """Export subscriptions to a file, soonest renewal first.

    Args:
        subscriptions: The subscriptions to export.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.
    """
    rows = []
    for sub in sorted(subscriptions, key=lambda s: s.renewal_date):
        row = sub.to_dict()
        row["confidenceLabel"] = confidence_label(sub.confidence)
        rows.append(row)

    if format == "csv":
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=_FIELDNAMES, extrasaction="ignore")
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
    elif format == "json":
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)
    else:
        raise ValueError(f"Unsupported export format: {format}")

    print(f"Results saved to {output_path}")
