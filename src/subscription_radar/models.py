"""Data models for Subscription Radar."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Category(str, Enum):
    STREAMING = "streaming"
    SOFTWARE = "software"
    CLOUD = "cloud"
    FINANCE = "finance"
    TELECOM = "telecom"
    FOOD = "food"
    OTHER = "other"


class SyncStatus(str, Enum):
    SYNCING = "syncing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class RawMessage:
    """A fetched email message, reduced to the parts extraction reads."""

    message_id: str
    sender: str  # Full From header value
    subject: str = ""
    snippet: str = ""
    body: str = ""  # Plain text decoded from the payload


@dataclass(frozen=True)
class MerchantEntry:
    """A curated merchant in the registry."""

    key: str  # Canonical lowercase name
    name: str  # Display name
    category: Category
    color: str
    aliases: tuple[str, ...] = ()
    cancel_url: str = ""


@dataclass(frozen=True)
class MerchantMatch:
    """Outcome of merchant extraction.

    ``entry`` is None when the name was derived heuristically from the
    subject or sender rather than resolved through the registry.
    """

    name: str
    entry: MerchantEntry | None = None

    @property
    def is_known(self) -> bool:
        return self.entry is not None


@dataclass(frozen=True)
class ExtractedSubscription:
    """A subscription candidate extracted from a single message."""

    name: str
    merchant: str
    amount: float  # 0 means unknown
    renewal_date: datetime
    category: str
    logo_color: str
    email_from: str
    email_subject: str
    email_snippet: str
    confidence: int
    is_trial: bool = False
    message_id: str = ""

    @property
    def merchant_key(self) -> str:
        return self.merchant.lower()

    def to_dict(self) -> dict:
        """Return the JSON output record for this subscription."""
        return {
            "name": self.name,
            "merchant": self.merchant,
            "amount": self.amount,
            "renewalDate": self.renewal_date.isoformat(),
            "category": self.category,
            "logoColor": self.logo_color,
            "emailFrom": self.email_from,
            "emailSubject": self.email_subject,
            "emailSnippet": self.email_snippet,
            "confidence": self.confidence,
            "isTrial": self.is_trial,
        }

    @classmethod
    def from_dict(cls, data: dict, message_id: str = "") -> ExtractedSubscription:
        renewal = datetime.fromisoformat(data["renewalDate"])
        if renewal.tzinfo is None:
            renewal = renewal.replace(tzinfo=timezone.utc)
        return cls(
            name=data["name"],
            merchant=data["merchant"],
            amount=float(data["amount"]),
            renewal_date=renewal,
            category=data["category"],
            logo_color=data["logoColor"],
            email_from=data.get("emailFrom", ""),
            email_subject=data.get("emailSubject", ""),
            email_snippet=data.get("emailSnippet", ""),
            confidence=int(data["confidence"]),
            is_trial=bool(data.get("isTrial", False)),
            message_id=message_id,
        )


@dataclass
class SyncProgress:
    """Progress of a scan, as reported to pollers."""

    status: SyncStatus
    total_emails: int = 0
    processed_emails: int = 0
    found_subscriptions: int = 0
    progress: int = 0  # percent, 0-100
    error: str | None = None

    def to_dict(self) -> dict:
        data = {
            "status": self.status.value,
            "progress": self.progress,
            "totalEmails": self.total_emails,
            "processedEmails": self.processed_emails,
            "foundSubscriptions": self.found_subscriptions,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> SyncProgress:
        return cls(
            status=SyncStatus(data["status"]),
            total_emails=data.get("totalEmails", 0),
            processed_emails=data.get("processedEmails", 0),
            found_subscriptions=data.get("foundSubscriptions", 0),
            progress=data.get("progress", 0),
            error=data.get("error"),
        )


@dataclass
class ScanResult:
    """Result of a mailbox scan."""

    subscriptions: list[ExtractedSubscription] = field(default_factory=list)
    total_emails: int = 0
    processed_emails: int = 0
    ceiling_reached: bool = False
    query: str = ""
    scan_date: str = field(default_factory=lambda: datetime.now().isoformat())
