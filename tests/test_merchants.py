"""Tests for the merchants module."""

from subscription_radar import merchants
from subscription_radar.merchants import REGISTRY, cancel_url_for, get, lookup
from subscription_radar.models import Category, MerchantEntry


def test_registry_keys_unique():
    """Every registry key should appear once."""
    keys = [entry.key for entry in REGISTRY]
    assert len(keys) == len(set(keys))


def test_lookup_by_sender_domain():
    """A merchant key in the sender address should resolve to its entry."""
    entry = lookup("billing@spotify.com", in_sender=True)
    assert entry is not None
    assert entry.name == "Spotify"
    assert entry.category is Category.STREAMING
    assert entry.color == "#1DB954"


def test_lookup_is_case_insensitive():
    """Registry matching should ignore case."""
    assert lookup("Your NETFLIX membership").key == "netflix"


def test_lookup_by_alias():
    """Aliases should resolve to the canonical entry."""
    assert lookup("Your Prime Video order").key == "amazon prime"
    assert lookup("اشتراك شاهد").key == "shahid"


def test_specific_name_wins_over_contained_name():
    """'stc pay' should match before 'stc'."""
    assert lookup("Your STC Pay wallet").key == "stc pay"
    assert lookup("STC bill for March").key == "stc"


def test_lookup_no_match():
    """Unknown text should return None."""
    assert lookup("Lunch tomorrow?") is None
    assert lookup("") is None


def test_unknown_merchant_not_in_registry():
    """Karzoun is discovered heuristically, not from the registry."""
    assert get("karzoun") is None
    assert lookup("noreply@karzoun.com", in_sender=True) is None


def test_get_by_key_or_display_name():
    """get() should accept a canonical key or a display name."""
    assert get("spotify").name == "Spotify"
    assert get("Disney+").key == "disney"
    assert get("nothing-like-this") is None


def test_cancel_url_known_merchant():
    """Known merchants should have a direct cancellation page."""
    assert cancel_url_for("Netflix") == "https://www.netflix.com/cancelplan"


def test_cancel_url_unknown_merchant():
    """Unknown merchants should get a web search URL."""
    url = cancel_url_for("Karzoun")
    assert url.startswith("https://www.google.com/search?q=")
    assert "Karzoun" in url


def test_short_key_only_matches_in_sender(monkeypatch):
    """Names under three characters should only match a sender address."""
    short = MerchantEntry(key="x", name="X Premium", category=Category.OTHER, color="#000000", aliases=("xp",))
    monkeypatch.setattr(merchants, "REGISTRY", (short,))

    assert lookup("Your next box ships today") is None
    assert lookup("billing@x.com", in_sender=True) is short
    assert lookup("xp renewal notice") is None


def test_three_letter_key_needs_word_boundary():
    """Three-letter keys should not match inside longer words."""
    assert lookup("orders@costco.com", in_sender=True) is None
    assert lookup("news@bestchoice.com", in_sender=True) is None
    assert lookup("billing@stc.com.sa", in_sender=True).key == "stc"
    assert lookup("Your Wix site renews soon").key == "wix"
