"""Curated merchant registry: names, categories, colors and aliases.

Entries are kept in an ordered tuple so that "first match wins" is
reproducible. More specific names sit before names they contain
(``stc pay`` before ``stc``, ``youtube music`` before ``youtube premium``).
"""

from __future__ import annotations

import re
from urllib.parse import quote_plus

from .constants import MIN_MERCHANT_MATCH
from .models import Category, MerchantEntry

_S = Category.STREAMING
_SW = Category.SOFTWARE
_C = Category.CLOUD
_F = Category.FINANCE
_T = Category.TELECOM
_FD = Category.FOOD
_O = Category.OTHER


def _m(key, name, category, color, *aliases, cancel_url=""):
    return MerchantEntry(
        key=key,
        name=name,
        category=category,
        color=color,
        aliases=tuple(a.lower() for a in aliases),
        cancel_url=cancel_url,
    )


REGISTRY: tuple[MerchantEntry, ...] = (
    # Streaming
    _m("netflix", "Netflix", _S, "#E50914", cancel_url="https://www.netflix.com/cancelplan"),
    _m("spotify", "Spotify", _S, "#1DB954", cancel_url="https://www.spotify.com/account/subscription/"),
    _m("apple music", "Apple Music", _S, "#FA243C", "applemusic",
       cancel_url="https://appleid.apple.com/account/manage"),
    _m("youtube music", "YouTube Music", _S, "#FF0000", "youtubemusic"),
    _m("youtube premium", "YouTube Premium", _S, "#FF0000", "youtube", "yt premium",
       cancel_url="https://www.youtube.com/paid_memberships"),
    _m("disney", "Disney+", _S, "#113CCF", "disney+", "disneyplus"),
    _m("hulu", "Hulu", _S, "#1CE783"),
    _m("amazon prime", "Amazon Prime", _S, "#00A8E1", "prime video", "primevideo",
       cancel_url="https://www.amazon.sa/mc/pipelines/memberships"),
    _m("apple tv", "Apple TV+", _S, "#000000", "appletv", "apple tv+"),
    _m("hbo", "HBO Max", _S, "#000000", "hbo max", "hbomax"),
    _m("peacock", "Peacock", _S, "#000000"),
    _m("paramount", "Paramount+", _S, "#0064FF", "paramount+"),
    _m("shahid", "Shahid", _S, "#D50F25", "shahid vip", "شاهد"),
    _m("osn", "OSN+", _S, "#000000", "osn+", "osn streaming"),
    _m("starzplay", "StarzPlay", _S, "#000000", "starz play"),
    _m("anghami", "Anghami", _S, "#1E003B", "أنغامي",
       cancel_url="https://accounts.anghami.com/subscription"),
    _m("webook", "Webook", _S, "#E91E63", "ويبوك"),
    # AI & software
    _m("chatgpt", "ChatGPT", _SW, "#10A37F", "chatgpt plus", "gpt-4"),
    _m("openai", "OpenAI", _SW, "#10A37F"),
    _m("claude", "Claude", _SW, "#D97757", "anthropic", "claude pro"),
    _m("midjourney", "Midjourney", _SW, "#000000"),
    # Social
    _m("x premium", "X Premium", _SW, "#000000", "twitter blue", "twitter premium"),
    _m("twitter", "Twitter", _SW, "#1DA1F2"),
    _m("linkedin", "LinkedIn", _SW, "#0A66C2", "linkedin premium"),
    _m("snapchat", "Snapchat+", _SW, "#FFFC00", "snapchat+", "snap+"),
    _m("telegram", "Telegram Premium", _SW, "#0088CC", "telegram premium"),
    _m("discord", "Discord Nitro", _SW, "#5865F2", "discord nitro", "nitro"),
    _m("instagram", "Instagram", _SW, "#E4405F", "instagram+", "meta verified"),
    # Cloud & storage
    _m("dropbox", "Dropbox", _C, "#0061FF"),
    _m("google one", "Google One", _C, "#4285F4", "googleone"),
    _m("icloud", "iCloud+", _C, "#3693F3", "icloud+"),
    _m("onedrive", "OneDrive", _C, "#0078D4"),
    # Productivity
    _m("adobe", "Adobe", _SW, "#FF0000", "creative cloud", "adobe cc"),
    _m("office 365", "Office 365", _SW, "#D83B01", "office365"),
    _m("microsoft", "Microsoft 365", _SW, "#00A4EF", "microsoft 365", "m365"),
    _m("notion", "Notion", _SW, "#000000"),
    _m("canva", "Canva", _SW, "#00C4CC", "canva pro"),
    _m("figma", "Figma", _SW, "#F24E1E"),
    _m("grammarly", "Grammarly", _SW, "#15C39A", "grammarly premium"),
    # Development
    _m("github", "GitHub", _SW, "#24292E", "github copilot"),
    _m("gitlab", "GitLab", _SW, "#FC6D26"),
    _m("vercel", "Vercel", _SW, "#000000"),
    _m("netlify", "Netlify", _SW, "#00C7B7"),
    _m("replit", "Replit", _SW, "#F26207", "repl.it"),
    # News & media
    _m("audible", "Audible", _S, "#FF9900"),
    _m("kindle", "Kindle Unlimited", _S, "#FF9900", "kindle unlimited"),
    _m("new york times", "New York Times", _S, "#000000", "nytimes"),
    _m("medium", "Medium", _S, "#000000"),
    # Gaming
    _m("playstation", "PlayStation Plus", _S, "#003791", "ps plus", "playstation plus"),
    _m("xbox", "Xbox Game Pass", _S, "#107C10", "xbox live", "game pass"),
    _m("steam", "Steam", _S, "#171A21"),
    _m("nintendo", "Nintendo Switch Online", _S, "#E60012", "switch online"),
    _m("epic games", "Epic Games", _S, "#313131", "epicgames"),
    _m("ea play", "EA Play", _S, "#FF1E3C", "eaplay", "ea access"),
    _m("ubisoft", "Ubisoft+", _S, "#0080FF", "ubisoft+", "uplay"),
    # VPN & security
    _m("nordvpn", "NordVPN", _SW, "#4687FF", "nord vpn"),
    _m("expressvpn", "ExpressVPN", _SW, "#DA3940", "express vpn"),
    _m("1password", "1Password", _SW, "#0094F5"),
    _m("lastpass", "LastPass", _SW, "#D32D27"),
    _m("dashlane", "Dashlane", _SW, "#0E3E51"),
    # Fitness & health
    _m("apple fitness", "Apple Fitness+", _S, "#FA243C", "fitness+"),
    _m("peloton", "Peloton", _S, "#000000"),
    _m("headspace", "Headspace", _S, "#F47D31"),
    _m("calm", "Calm", _S, "#2DCDDF"),
    _m("strava", "Strava", _S, "#FC4C02"),
    # Hosting & domains
    _m("namecheap", "Namecheap", _C, "#FF6C2C"),
    _m("godaddy", "GoDaddy", _C, "#1BDBDB"),
    _m("bluehost", "Bluehost", _C, "#3D5AFE"),
    _m("squarespace", "Squarespace", _C, "#000000"),
    _m("wix", "Wix", _C, "#0C6EFC"),
    _m("wordpress", "WordPress.com", _C, "#21759B"),
    # Communication
    _m("zoom", "Zoom", _SW, "#2D8CFF"),
    _m("slack", "Slack", _SW, "#4A154B"),
    # Learning & creative
    _m("shutterstock", "Shutterstock", _SW, "#EE2B24"),
    _m("skillshare", "Skillshare", _S, "#00C1B2"),
    _m("masterclass", "MasterClass", _S, "#000000"),
    # Payment & finance
    _m("stc pay", "STC Pay", _F, "#6F2C91", "stcpay"),
    _m("paypal", "PayPal", _F, "#003087"),
    _m("quickbooks", "QuickBooks", _F, "#2CA01C"),
    _m("tamara", "Tamara", _F, "#2B2E4A", "تمارا"),
    _m("tabby", "Tabby", _F, "#3DFFC0", "تابي"),
    # Telecom
    _m("verizon", "Verizon", _T, "#CD040B"),
    _m("t-mobile", "T-Mobile", _T, "#E20074", "tmobile"),
    _m("vodafone", "Vodafone", _T, "#E60000"),
    _m("stc", "STC", _T, "#6F2C91", "saudi telecom",
       cancel_url="https://www.stc.com.sa/wps/portal/stcsa/personal/myservices"),
    _m("mobily", "Mobily", _T, "#76BC21", "موبايلي"),
    _m("zain", "Zain", _T, "#6E2C91", "زين"),
    _m("virgin mobile", "Virgin Mobile", _T, "#E10A0A"),
    # Food delivery
    _m("careem", "Careem Plus", _FD, "#00B140", "careem plus"),
    _m("uber", "Uber One", _FD, "#000000", "uber one", "uber eats"),
    _m("deliveroo", "Deliveroo Plus", _FD, "#00CCBC", "deliveroo plus"),
    _m("talabat", "Talabat Pro", _FD, "#FF5A00", "talabat pro", "طلبات"),
    _m("jahez", "Jahez Plus", _FD, "#FF6B00", "jahez plus", "جاهز"),
    _m("hungerstation", "HungerStation", _FD, "#FF2D55", "hunger station", "هنقرستيشن"),
    _m("mrsool", "Mrsool", _FD, "#FFCC00", "مرسول"),
    _m("toyou", "ToYou", _FD, "#FF3366", "تو يو"),
    # Regional services
    _m("noon", "Noon VIP", _O, "#FEEE00", "noon vip", "نون"),
    _m("salla", "Salla", _SW, "#004BFF", "سلة"),
    _m("rewaa", "Rewaa", _SW, "#4CAF50", "رواء"),
    _m("foodics", "Foodics", _SW, "#FF6600", "فودكس"),
    _m("moyasar", "Moyasar", _F, "#1A237E"),
)

_BY_KEY = {entry.key: entry for entry in REGISTRY}

GENERIC_CANCEL_STEPS = [
    "Open the app, then Settings, then Subscription or Account.",
    "On iPhone: Settings, then your name, then Subscriptions.",
    "On Android: Google Play, then Payments & subscriptions.",
    'Search the web for "how to cancel <service> subscription".',
]


def _occurs(name: str, haystack: str) -> bool:
    if len(name) > MIN_MERCHANT_MATCH:
        return name in haystack
    # Three-letter keys must stand alone: "stc" is not part of "costco"
    return re.search(rf"(?<![^\W_]){re.escape(name)}(?![^\W_])", haystack) is not None


def _matches(entry: MerchantEntry, haystack: str, in_sender: bool) -> bool:
    if len(entry.key) < MIN_MERCHANT_MATCH:
        if in_sender and entry.key in haystack:
            return True
    elif _occurs(entry.key, haystack):
        return True
    return any(
        len(alias) >= MIN_MERCHANT_MATCH and alias in haystack
        for alias in entry.aliases
    )


def lookup(text: str, in_sender: bool = False) -> MerchantEntry | None:
    """Return the first registry entry whose key or alias occurs in ``text``.

    Matching is a case-insensitive substring test. Names shorter than
    ``MIN_MERCHANT_MATCH`` only count when ``text`` is a sender header and
    the canonical key appears in it literally. Keys of exactly that length
    must not be glued to other letters or digits.
    """
    if not text:
        return None
    haystack = text.lower()
    for entry in REGISTRY:
        if _matches(entry, haystack, in_sender):
            return entry
    return None


def get(key: str) -> MerchantEntry | None:
    """Return the entry for a canonical key or display name, if any."""
    key = key.lower().strip()
    entry = _BY_KEY.get(key)
    if entry is not None:
        return entry
    for candidate in REGISTRY:
        if candidate.name.lower() == key:
            return candidate
    return None


def cancel_url_for(merchant: str) -> str:
    """Return a cancellation page for a merchant, or a web search for one."""
    entry = get(merchant)
    if entry is not None and entry.cancel_url:
        return entry.cancel_url
    return "https://www.google.com/search?q=" + quote_plus(
        f"how to cancel {merchant} subscription"
    )
