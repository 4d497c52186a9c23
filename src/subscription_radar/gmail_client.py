"""Mail transport: list and fetch messages through the Gmail API."""

from __future__ import annotations

import base64
import html
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError
from googleapiclient.http import BatchHttpRequest
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from subscription_radar.auth import get_gmail_service
from subscription_radar.constants import PAGE_SIZE
from subscription_radar.errors import AuthError, TransportError
from subscription_radar.models import RawMessage

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class MessagePage:
    """One page of message ids from a search."""

    ids: list[str] = field(default_factory=list)
    next_page_token: str | None = None


class MailTransport:
    """Source of raw messages for a scan.

    Subclasses implement ``list_message_ids`` and ``get_message``. The
    default ``get_messages`` fetches one batch concurrently, one thread per
    message, and returns each result or the exception it raised.
    """

    def list_message_ids(self, query: str, page_token: str | None = None) -> MessagePage:
        raise NotImplementedError

    def get_message(self, message_id: str) -> RawMessage:
        raise NotImplementedError

    def get_messages(self, message_ids: list[str]) -> list[tuple[str, RawMessage | Exception]]:
        if not message_ids:
            return []
        results: list[tuple[str, RawMessage | Exception]] = []
        with ThreadPoolExecutor(max_workers=len(message_ids)) as pool:
            futures = [pool.submit(self.get_message, msg_id) for msg_id in message_ids]
            for msg_id, future in zip(message_ids, futures):
                exc = future.exception()
                results.append((msg_id, exc if exc is not None else future.result()))
        return results


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


def _translate_http_error(exc: HttpError) -> TransportError:
    status = exc.resp.status
    if status in (401, 403):
        return AuthError(f"Gmail rejected the access token (HTTP {status})")
    return TransportError(f"Gmail API error (HTTP {status}): {exc}")


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)
def _execute(request):
    return request.execute()


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)
def _execute_batch(batch: BatchHttpRequest) -> None:
    batch.execute()


def _call(fn, *args):
    """Run a Gmail call, mapping client errors onto our exceptions."""
    try:
        return fn(*args)
    except HttpError as exc:
        raise _translate_http_error(exc) from exc
    except RefreshError as exc:
        raise AuthError(f"Gmail credentials could not be refreshed: {exc}") from exc
    except OSError as exc:
        raise TransportError(f"Gmail request failed: {exc}") from exc


def _decode(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    # Table cells end up on one line so keyword and value stay adjacent
    text = soup.get_text(separator=" ", strip=True)
    return _WHITESPACE_RE.sub(" ", text)


def _collect_parts(part: dict, plain: list[str], rich: list[str]) -> None:
    mime = part.get("mimeType", "")
    data = part.get("body", {}).get("data")
    if data:
        if mime == "text/html":
            rich.append(_decode(data))
        elif mime == "text/plain" or not mime:
            plain.append(_decode(data))
    for child in part.get("parts", []) or []:
        _collect_parts(child, plain, rich)


def extract_body(payload: dict) -> str:
    """Return the plain-text body of a Gmail message payload.

    Walks nested multipart payloads. ``text/plain`` parts are preferred;
    when a message only carries HTML, tags are stripped instead.
    """
    plain: list[str] = []
    rich: list[str] = []
    _collect_parts(payload, plain, rich)
    if plain:
        return "\n".join(plain)
    return "\n".join(_html_to_text(markup) for markup in rich)


def parse_message(response: dict) -> RawMessage:
    """Build a RawMessage from a ``users.messages.get`` (format=full) response."""
    payload = response.get("payload", {}) or {}
    headers = {}
    for h in payload.get("headers", []):
        headers[h["name"].lower()] = h["value"]

    return RawMessage(
        message_id=response.get("id", ""),
        sender=headers.get("from", ""),
        subject=headers.get("subject", ""),
        snippet=html.unescape(response.get("snippet", "")),
        body=extract_body(payload),
    )


class GmailTransport(MailTransport):
    """MailTransport backed by a Gmail API service object."""

    def __init__(self, service) -> None:
        self.service = service

    @classmethod
    def from_access_token(cls, access_token: str) -> GmailTransport:
        return cls(get_gmail_service(access_token))

    def list_message_ids(self, query: str, page_token: str | None = None) -> MessagePage:
        kwargs: dict = {
            "userId": "me",
            "q": query,
            "maxResults": PAGE_SIZE,
            "fields": "messages/id,nextPageToken",
        }
        if page_token:
            kwargs["pageToken"] = page_token

        resp = _call(_execute, self.service.users().messages().list(**kwargs))
        return MessagePage(
            ids=[m["id"] for m in resp.get("messages", [])],
            next_page_token=resp.get("nextPageToken"),
        )

    def get_message(self, message_id: str) -> RawMessage:
        request = self.service.users().messages().get(userId="me", id=message_id, format="full")
        return parse_message(_call(_execute, request))

    def get_messages(self, message_ids: list[str]) -> list[tuple[str, RawMessage | Exception]]:
        """Fetch a batch of messages with a single BatchHttpRequest."""
        if not message_ids:
            return []
        outcomes: dict[str, RawMessage | Exception] = {}
        batch = self.service.new_batch_http_request()

        def _make_callback(msg_id: str):
            def _cb(request_id, response, exception):
                if exception is not None:
                    if isinstance(exception, HttpError):
                        exception = _translate_http_error(exception)
                    outcomes[msg_id] = exception
                    return
                try:
                    outcomes[msg_id] = parse_message(response)
                except (KeyError, TypeError, ValueError) as exc:
                    outcomes[msg_id] = exc

            return _cb

        for msg_id in message_ids:
            batch.add(
                self.service.users().messages().get(userId="me", id=msg_id, format="full"),
                callback=_make_callback(msg_id),
            )

        _call(_execute_batch, batch)

        missing = TransportError("No response in batch")
        return [(msg_id, outcomes.get(msg_id, missing)) for msg_id in message_ids]
