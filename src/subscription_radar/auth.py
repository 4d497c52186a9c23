"""Credentials for the Gmail API: a handed-in access token or the local OAuth flow."""

import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError
from rich.markup import escape

from subscription_radar.constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES, TOKEN_PATH
from subscription_radar.display import console

logger = logging.getLogger(__name__)


def credentials_from_token(access_token: str) -> Credentials:
    """Wrap an opaque OAuth access token obtained elsewhere (e.g. a mobile sign-in)."""
    if not access_token:
        raise ValueError("An access token is required")
    return Credentials(token=access_token, scopes=SCOPES)


def _saved_credentials() -> Credentials | None:
    if not TOKEN_PATH.exists():
        return None
    creds = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)
    if creds.valid:
        return creds
    if creds.expired and creds.refresh_token:
        logger.debug("Refreshing saved Gmail token")
        creds.refresh(Request())
        TOKEN_PATH.write_text(creds.to_json())
        return creds
    return None


def _consent_flow() -> Credentials:
    if not CREDENTIALS_PATH.exists():
        raise FileNotFoundError(
            f"Credentials file not found at {CREDENTIALS_PATH}.\n"
            "Download your OAuth client credentials from the Google Cloud Console "
            "and save them as:\n"
            f"  {CREDENTIALS_PATH}\n"
            "or pass an access token with --token."
        )
    flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
    creds = flow.run_local_server(port=0)
    TOKEN_PATH.write_text(creds.to_json())
    return creds


def get_credentials() -> Credentials:
    """Return read-only Gmail credentials saved on this machine.

    A saved token is reused (and refreshed when expired). Otherwise the
    browser consent flow runs, which needs the OAuth client file at
    CREDENTIALS_PATH.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return _saved_credentials() or _consent_flow()


def get_gmail_service(access_token: str | None = None) -> Resource:
    """Return a Gmail API service, from ``access_token`` when one is given."""
    creds = credentials_from_token(access_token) if access_token else get_credentials()
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def check_auth(access_token: str | None = None) -> bool:
    """Ask Gmail for the signed-in profile and report the result.

    Returns True when the mailbox can be read.
    """
    try:
        service = get_gmail_service(access_token)
        profile = service.users().getProfile(userId="me").execute()
    except (FileNotFoundError, GoogleAuthError, HttpError) as exc:
        logger.warning("Gmail authentication failed: %s", exc)
        console.print(f"[red]Authentication failed:[/red] {escape(str(exc))}")
        return False

    source = "access token" if access_token else "saved credentials"
    console.print(f"[green]Authenticated as {profile['emailAddress']}[/green] ({source})")
    return True
