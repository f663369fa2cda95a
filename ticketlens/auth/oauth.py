"""OAuth 2.0 installed-app flow for read-only Gmail access."""

import logging
import os
from pathlib import Path

import requests
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from .credentials import delete_credentials, load_credentials, refresh_if_needed, save_credentials

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]

REVOKE_URL = "https://oauth2.googleapis.com/revoke"


def get_credentials_path() -> Path:
    """Get the path to the OAuth client secrets file."""
    return Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "./credentials.json"))


def authenticate() -> Credentials:
    """
    Get valid credentials, reusing the stored token when possible.

    Loads the stored token, refreshes it if expired, and otherwise opens
    the browser consent flow and stores the resulting token.

    Raises:
        FileNotFoundError: If the client secrets file is missing.
    """
    creds = load_credentials()

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        try:
            return refresh_if_needed(creds)
        except RefreshError as e:
            logger.info("Token refresh failed, re-authenticating: %s", e)

    credentials_path = get_credentials_path()

    if not credentials_path.exists():
        raise FileNotFoundError(
            f"OAuth credentials file not found at {credentials_path}. "
            "Please download credentials.json from Google Cloud Console "
            "and place it in the project root."
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
    creds = flow.run_local_server(port=0)

    save_credentials(creds)

    return creds


def get_gmail_service() -> Resource:
    """
    Get an authenticated Gmail API service.

    Raises:
        FileNotFoundError: If credentials.json is not found.
    """
    return build("gmail", "v1", credentials=authenticate(), cache_discovery=False)


def revoke_credentials() -> bool:
    """
    Revoke the stored token with Google and delete it locally.

    Returns:
        True if a local token was deleted.
    """
    creds = load_credentials()

    if creds and creds.token:
        try:
            requests.post(
                REVOKE_URL,
                params={"token": creds.token},
                headers={"content-type": "application/x-www-form-urlencoded"},
                timeout=10,
            )
        except requests.RequestException as e:
            # Local deletion still proceeds
            logger.warning("Token revocation failed: %s", e)

    return delete_credentials()
