"""Field extractors: merchant name, amount and renewal date.

Every extractor is a pure function of its inputs. ``None`` means the field
was not found, which is an expected outcome rather than an error.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from . import merchants
from .constants import (
    AMOUNT_MAX,
    DATE_CONTEXT_WINDOW,
    DEFAULT_RENEWAL_DAYS,
    GENERIC_MAIL_DOMAINS,
    GENERIC_NAME_WORDS,
    GENERIC_SENDER_NAMES,
    RENEWAL_FUTURE_YEARS,
    RENEWAL_PAST_YEARS,
)
from .models import MerchantMatch

_FROM_RE = re.compile(r"^(.*?)\s*<([^>]+)>$")
_DISPLAY_NAME_RE = re.compile(r'^"?([^"<]+?)"?\s*<')
_DOMAIN_RE = re.compile(r"@([a-z0-9.-]+)", re.IGNORECASE)

# Second-level labels that sit under a country code (example.com.sa).
_PUBLIC_SUFFIX_LABELS = {"com", "co", "net", "org", "gov", "edu", "ac"}


def parse_from_header(from_value: str) -> tuple[str, str]:
    """Parse a From header into (display name, email address).

    Handles formats like:
      "John Doe <john@example.com>" -> ("John Doe", "john@example.com")
      "<john@example.com>"          -> ("", "john@example.com")
      "john@example.com"            -> ("", "john@example.com")
    """
    if not from_value:
        return ("", "")
    m = _FROM_RE.match(from_value.strip())
    if m:
        name = m.group(1).strip().strip('"').strip("'")
        return (name, m.group(2).strip())
    email = from_value.strip().strip("<>")
    return ("", email)


# --- Merchant ---

_WORD = r"[A-Za-z][A-Za-z0-9]+"
_NAME = rf"({_WORD}(?:\s+{_WORD}){{0,2}})"
_AR_DOC = r"(?:اشتراك|تجديد|فاتورة|إيصال)"

_SUBJECT_PATTERNS = [
    re.compile(rf"^\[{_NAME}\]\s+(?:payment|receipt|invoice|billing|subscription)", re.IGNORECASE),
    re.compile(
        rf"^{_NAME}\s+(?:payment receipt|receipt for|invoice for|subscription|billing)",
        re.IGNORECASE,
    ),
    re.compile(
        rf"(?:payment receipt for|receipt from|invoice from|subscription to)\s+{_NAME}",
        re.IGNORECASE,
    ),
    re.compile(
        rf"(?:your|the)\s+{_NAME}\s+(?:subscription|membership|plan|receipt|invoice|payment)",
        re.IGNORECASE,
    ),
    re.compile(rf"{_AR_DOC}\s+(.{{2,30}}?)(?:\s+[-–|]|\s*$)"),
    re.compile(rf"(.{{2,30}}?)\s+{_AR_DOC}"),
]


def _strip_generic_words(name: str) -> str:
    """Drop stop-words from both ends of a candidate name."""
    words = name.split()
    while words and words[0].lower() in GENERIC_NAME_WORDS:
        words.pop(0)
    while words and words[-1].lower() in GENERIC_NAME_WORDS:
        words.pop()
    return " ".join(words)


def _name_from_subject(subject: str) -> str | None:
    for pattern in _SUBJECT_PATTERNS:
        m = pattern.search(subject)
        if not m:
            continue
        name = _strip_generic_words(m.group(1).strip())
        if len(name) >= 2:
            return name
    return None


def _title(name: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in name.split())


def _name_from_display(sender: str) -> str | None:
    m = _DISPLAY_NAME_RE.match(sender.strip())
    if not m:
        return None
    display = m.group(1).strip()
    if len(display) < 2 or display.lower() in GENERIC_SENDER_NAMES:
        return None
    return _title(display)


def _second_level_label(domain: str) -> str:
    labels = [label for label in domain.lower().split(".") if label]
    if len(labels) >= 3 and labels[-2] in _PUBLIC_SUFFIX_LABELS:
        return labels[-3]
    if len(labels) >= 2:
        return labels[-2]
    return labels[0] if labels else ""


def _name_from_domain(sender: str) -> str | None:
    _, email = parse_from_header(sender)
    m = _DOMAIN_RE.search(email or sender)
    if not m:
        return None
    label = _second_level_label(m.group(1))
    if len(label) < 3 or label in GENERIC_MAIL_DOMAINS:
        return None
    return label[:1].upper() + label[1:]


def extract_merchant(sender: str, subject: str) -> MerchantMatch | None:
    """Attribute a message to a merchant.

    Tries, in order: the registry against the sender header, the registry
    against the subject, receipt phrasing in the subject, the sender's
    display name and finally the sender's domain.
    """
    entry = merchants.lookup(sender, in_sender=True) or merchants.lookup(subject)
    if entry is not None:
        return MerchantMatch(name=entry.name, entry=entry)

    name = _name_from_subject(subject) or _name_from_display(sender) or _name_from_domain(sender)
    if name:
        return MerchantMatch(name=name)
    return None


# --- Amount ---

_NUM = r"(?<![\d.,])(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:[.,]\d{2})?)(?!\d)"
_SYM = r"[$€£﷼]?"

_AMOUNT_PATTERNS = [
    # Saudi riyal
    re.compile(rf"(?:\bsar|\bsr\b|﷼)\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:sar\b|sr\b|﷼|riyals?\b)"),
    # US dollar
    re.compile(rf"\$\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:usd|dollars?)\b"),
    # Euro
    re.compile(rf"€\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:eur|euros?)\b"),
    # British pound
    re.compile(rf"£\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:gbp|pounds?)\b"),
    # Context
    re.compile(rf"(?:total|amount|price|charge|charged|subscription):\s*{_SYM}\s*{_NUM}"),
    re.compile(rf"(?:you were charged|you paid|payment of)\s*{_SYM}\s*{_NUM}"),
    re.compile(rf"\b(?:pay|paid|paying|billed)\s*{_SYM}\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:per month|/month|monthly|per year|/year|annually)"),
    # Arabic
    re.compile(rf"(?:مبلغ|قيمة|رسوم|خصم|تحصيل)\s*:?\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*(?:ريال|ر\.س)"),
]

_THOUSANDS_RE = re.compile(r"\d{1,3}(?:,\d{3})+")


def _parse_amount(token: str) -> float:
    if "," in token and "." in token:
        token = token.replace(",", "")
    elif _THOUSANDS_RE.fullmatch(token):
        token = token.replace(",", "")
    else:
        token = token.replace(",", ".")
    return float(token)


def extract_amount(text: str) -> float | None:
    """Return the first plausible price in ``text``, or None."""
    text = text.lower()
    for pattern in _AMOUNT_PATTERNS:
        for m in pattern.finditer(text):
            amount = _parse_amount(m.group(1))
            if 0 < amount < AMOUNT_MAX:
                return amount
    return None


# --- Renewal date ---

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
)
_ORD = r"(?:st|nd|rd|th)?"

_DMY = r"(?<!\d)(\d{1,2}[/-]\d{1,2}[/-](?:\d{4}|\d{2}))(?!\d)"
_ISO = r"(?<!\d)(\d{4}-\d{1,2}-\d{1,2})(?!\d)"
_MDY_TEXT = rf"\b({_MONTH}\s+\d{{1,2}}{_ORD},?\s+\d{{4}})"
_DMY_TEXT = rf"(?<!\d)(\d{{1,2}}{_ORD}\s+{_MONTH},?\s+\d{{4}})"

_CONTEXT = (
    r"(?:renew|due|expir|next billing|next charge|next payment|billing date"
    r"|تجديد|يتجدد|استحقاق|ينتهي|الدفع القادم)"
)
_GAP = rf".{{0,{DATE_CONTEXT_WINDOW}}}?"

_DATE_PATTERNS = []
for _token in (_DMY, _ISO, _MDY_TEXT, _DMY_TEXT):
    _DATE_PATTERNS.append(re.compile(_CONTEXT + _GAP + _token, re.IGNORECASE | re.DOTALL))
    _DATE_PATTERNS.append(re.compile(_token + _GAP + _CONTEXT, re.IGNORECASE | re.DOTALL))


def _parse_date_token(token: str) -> datetime | None:
    """Turn a matched date token into a UTC datetime, or None if invalid."""
    token = token.strip().lower()
    try:
        if re.fullmatch(r"\d{4}-\d{1,2}-\d{1,2}", token):
            y, m, d = (int(p) for p in token.split("-"))
            return datetime(y, m, d, tzinfo=timezone.utc)

        if re.fullmatch(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}", token):
            d, m, y = (int(p) for p in re.split(r"[/-]", token))
            if y < 100:
                y += 2000
            try:
                return datetime(y, m, d, tzinfo=timezone.utc)
            except ValueError:
                # Month-first dates (03/25/2025) from US senders
                return datetime(y, d, m, tzinfo=timezone.utc)

        words = re.sub(r"(\d)(?:st|nd|rd|th)\b", r"\1", token).replace(",", " ").replace(".", " ").split()
        if len(words) == 3:
            if words[0].isdigit():
                day, month_word, year = words
            else:
                month_word, day, year = words
            month = _MONTHS.get(month_word[:3])
            if month is not None:
                return datetime(int(year), month, int(day), tzinfo=timezone.utc)
    except ValueError:
        return None
    return None


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return moment.replace(year=moment.year + years, day=28)


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def extract_renewal_date(text: str, now: datetime | None = None) -> datetime | None:
    """Return a renewal date near renewal wording in ``text``, or None.

    Dates must fall strictly between one year before and two years after
    ``now``; anything outside is treated as noise.
    """
    now = _utc(now)
    earliest = _shift_years(now, -RENEWAL_PAST_YEARS)
    latest = _shift_years(now, RENEWAL_FUTURE_YEARS)
    for pattern in _DATE_PATTERNS:
        for m in pattern.finditer(text):
            candidate = _parse_date_token(m.group(1))
            if candidate is not None and earliest < candidate < latest:
                return candidate
    return None


def default_renewal_date(now: datetime | None = None) -> datetime:
    return _utc(now) + timedelta(days=DEFAULT_RENEWAL_DAYS)
