"""Exceptions raised by Subscription Radar."""


class SubscriptionRadarError(Exception):
    """Base class for errors surfaced to callers."""


class TransportError(SubscriptionRadarError):
    """The mail API failed (network error, quota, server error)."""


class AuthError(TransportError):
    """The access token was rejected by the mail API."""


class ScanInProgressError(SubscriptionRadarError):
    """A scan is already running for this user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"A scan is already running for {user_id}")
        self.user_id = user_id
