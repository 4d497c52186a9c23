"""Constants for Subscription Radar."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".subscription-radar"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
STORE_DB_PATH = CONFIG_DIR / "subscriptions.db"
LOG_PATH = CONFIG_DIR / "subscription-radar.log"

DEFAULT_USER = "me"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
BATCH_SIZE = 50  # messages fetched together per batch
PAGE_SIZE = 500  # message ids per list page
MAX_PAGES = 10  # hard ceiling on list pages per scan
LOOKBACK_DAYS = 90

# --- Progress budget ---
PAGING_PROGRESS_SHARE = 20  # percent reserved for listing ids

# --- Confidence weights ---
CONFIDENCE_BASE = 50
WEIGHT_AMOUNT = 15
WEIGHT_RENEWAL_DATE = 10
WEIGHT_MERCHANT = 5
WEIGHT_RECURRING = 15
WEIGHT_KNOWN_MERCHANT = 10

# --- Confidence thresholds ---
CONFIDENCE_HIGH = 85
CONFIDENCE_MEDIUM = 65

# --- Extraction bounds ---
AMOUNT_MAX = 10_000
DEFAULT_RENEWAL_DAYS = 30
RENEWAL_PAST_YEARS = 1
RENEWAL_FUTURE_YEARS = 2
DATE_CONTEXT_WINDOW = 80  # chars between a renewal keyword and a date
SNIPPET_LIMIT = 200
MIN_MERCHANT_MATCH = 3

# --- Presentation ---
DEFAULT_COLOR = "#5B6CF8"
NOTIFY_DAYS_BEFORE = 3

# --- Search query ---
SEARCH_GROUPS = [
    '(subscription OR renewal OR recurring OR "monthly charge")',
    "(invoice OR receipt OR billing OR payment)",
    '(notification OR charged OR "auto-renew")',
    '(membership OR premium OR "pro plan" OR "annual plan")',
    "(from:noreply OR from:billing OR from:receipts OR from:support OR from:payments)",
    '("payment confirmation" OR "payment received" OR "successfully charged" OR "transaction")',
    '(اشتراك OR تجديد OR فاتورة OR إيصال OR سداد OR "تم الدفع" OR "تأكيد الدفع" OR تذكير OR "تم خصم" OR رسوم)',
]

TOP_SERVICES = [
    # Streaming
    "Netflix", "Spotify", "Amazon Prime", "Apple", "YouTube Premium", "Disney",
    "Hulu", "HBO", "Peacock", "Paramount", "Shahid", "OSN", "StarzPlay",
    # AI & creative
    "ChatGPT", "Claude", "OpenAI", "Anthropic", "Midjourney", "Canva",
    "Adobe", "Figma", "Notion",
    # Cloud & productivity
    "Microsoft", "GitHub", "Dropbox", "Google One", "iCloud",
    "Slack", "Zoom", "Office 365",
    # Social
    "LinkedIn", "Twitter", "Snapchat", "Telegram", "Discord", "Instagram",
    # Gaming
    "PlayStation", "Xbox", "Steam", "Nintendo", "Epic Games", "EA Play",
    # VPN & security
    "NordVPN", "ExpressVPN", "1Password", "LastPass",
    # Telecom
    "STC", "Mobily", "Zain", "Virgin Mobile",
    # Other
    "Audible", "Kindle", "Peloton", "Headspace", "Calm",
    "Careem", "Uber", "Deliveroo", "Talabat", "Jahez", "HungerStation",
]

# --- Classifier keyword sets ---
SUBSCRIPTION_KEYWORDS = [
    "subscription", "renewal", "recurring", "monthly charge",
    "billing", "invoice", "receipt", "payment", "membership",
    "your plan", "premium", "pro plan", "annual plan",
    "charged", "auto-renew", "payment confirmation", "billing statement",
    "payment received", "payment processed", "thank you for your payment",
    "successfully charged", "transaction",
    # Arabic
    "اشتراك", "تجديد", "فاتورة", "دفع", "عضوية",
    "تم الدفع", "إيصال", "سداد", "تأكيد الدفع", "رسوم", "مبلغ",
    "تجديد تلقائي", "باقة", "اشتراكك", "تجديد الاشتراك",
    "موعد التجديد", "تم خصم", "تم تحصيل",
]

RECURRING_INDICATORS = [
    "recurring", "auto-renew", "automatically renew", "subscription",
    "monthly", "annually", "yearly", "per month", "per year",
    "next billing", "billing cycle", "renewal date",
    "will be charged", "will renew", "charged your",
    "payment processed", "paid successfully",
    "receipt for your", "invoice for your", "your payment of",
    # Arabic
    "تجديد تلقائي", "شهري", "سنوي", "اشتراك", "تجديد الاشتراك",
    "تم خصم", "تم تحصيل", "تم الدفع", "سداد", "رسوم شهرية",
    "موعد التجديد", "تذكير بالتجديد", "اشتراكك",
]

EXCLUSION_PATTERNS = [
    "newsletter", "daily digest", "weekly update", "monthly roundup",
    "promotional", "limited time offer", "flash sale", "clearance",
    "upgrade for free", "claim your discount", "save up to",
    "ends tomorrow", "last chance", "exclusive offer", "special offer",
    "usage alert", "usage notification", "usage summary", "spent on usage",
    "manage your subscription preferences",
    # Arabic
    "تخفيضات", "عرض خاص", "عرض محدود",
]

NEWSLETTER_DOMAINS = [
    "substack.com",
    "beehiiv.com",
    "mailchimp.com",
    "sendgrid.net",
    "convertkit.com",
]

TRIAL_INDICATORS = [
    "trial", "free for", "تجربة", "مجانية",
]

# --- Merchant-name heuristics ---
GENERIC_NAME_WORDS = [
    "payment", "receipt", "invoice", "billing", "notification", "your", "the",
    "this", "that", "new", "free", "trial", "update", "confirm", "confirmation",
    "reminder", "alert", "welcome", "thank", "thanks", "dear", "hi", "hello",
    "subscription", "plan", "monthly", "annual",
    # Arabic
    "تم", "اشتراك", "اشتراكك", "تجديد", "فاتورة", "إيصال", "تذكير", "شكرا",
    "مرحبا", "عزيزي", "الدفع", "تأكيد",
]

GENERIC_SENDER_NAMES = [
    "noreply", "no-reply", "billing", "support", "info", "admin", "help",
    "team", "service", "notification", "notifications", "alert", "alerts",
    "mail", "email", "donotreply", "do-not-reply", "mailer", "postmaster",
    "billing team", "support team", "customer service", "customer support",
    "receipts", "payments",
]

GENERIC_MAIL_DOMAINS = [
    "gmail", "yahoo", "hotmail", "outlook", "mail", "email",
    "googlemail", "icloud", "protonmail", "aol", "live",
]
