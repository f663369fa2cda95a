"""Token persistence for the Gmail OAuth flow."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

logger = logging.getLogger(__name__)


def get_token_path() -> Path:
    """Get the path of the stored authorized-user token."""
    path = Path(os.getenv("TOKEN_PATH", "./data/credentials/token.json"))
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def load_credentials() -> Optional[Credentials]:
    """
    Load the stored OAuth token.

    Returns:
        Credentials if a readable token file exists, None otherwise.
    """
    token_path = get_token_path()

    if not token_path.exists():
        return None

    try:
        return Credentials.from_authorized_user_file(str(token_path))
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Ignoring unreadable token file %s: %s", token_path, e)
        return None


def save_credentials(creds: Credentials) -> None:
    """Write credentials (including the refresh token) to the token file."""
    token_path = get_token_path()

    with open(token_path, "w") as f:
        f.write(creds.to_json())

    logger.debug("Saved token to %s", token_path)


def refresh_if_needed(creds: Credentials) -> Credentials:
    """
    Refresh expired credentials and persist the new token.

    Raises:
        google.auth.exceptions.RefreshError: If refresh fails.
    """
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())
        save_credentials(creds)

    return creds


def delete_credentials() -> bool:
    """
    Delete the stored token.

    Returns:
        True if a token was deleted, False if none existed.
    """
    token_path = get_token_path()

    if token_path.exists():
        token_path.unlink()
        return True

    return False
