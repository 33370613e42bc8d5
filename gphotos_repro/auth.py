"""OAuth bootstrap - loads the client secret, reuses a cached token or runs the local consent flow."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/drive.appdata",
    "https://www.googleapis.com/auth/photoslibrary.appendonly",
]
TOKEN_FILE_NAME = "token.json"
DEFAULT_OAUTH_PORT = 8888


class ClientSecretsError(ValueError):
    """The client-secret file is not valid JSON or lacks a usable client section."""


class AuthorizationError(RuntimeError):
    """The OAuth flow finished without producing a refresh token."""


@dataclass(frozen=True)
class CredentialBundle:
    """Long-lived user credential shared by every API client for the life of the process."""

    client_id: str
    client_secret: str
    refresh_token: str
    credentials: Credentials = field(repr=False, compare=False)


def default_token_dir() -> Path:
    return Path(tempfile.gettempdir()) / "google-auth"


def load_client_secrets(path: str | os.PathLike) -> dict:
    """Read a Google client-secret JSON file.

    A missing file raises ``FileNotFoundError``; anything unparseable or
    without an ``installed``/``web`` client raises ``ClientSecretsError``.
    """
    with open(path) as fh:
        try:
            config = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ClientSecretsError(f"{path} is not valid JSON: {exc}") from exc

    section = None
    if isinstance(config, dict):
        section = config.get("installed") or config.get("web")
    if not isinstance(section, dict) or not section.get("client_id") or not section.get("client_secret"):
        raise ClientSecretsError(
            f"{path} has no 'installed' or 'web' client with client_id and client_secret"
        )
    return config


def _client_id(config: dict) -> str:
    return (config.get("installed") or config["web"])["client_id"]


def _load_cached_token(token_file: Path, client_id: str) -> Credentials | None:
    if not token_file.exists():
        return None
    creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    if creds.client_id != client_id:
        logger.info("Cached token in %s belongs to another client, ignoring it.", token_file)
        return None
    return creds


def bootstrap_credentials(
    client_secrets_path: str | os.PathLike,
    token_dir: Path | None = None,
    port: int = DEFAULT_OAUTH_PORT,
) -> CredentialBundle:
    """Return credentials for Drive and Photos, blocking on browser consent if no usable token is cached."""
    config = load_client_secrets(client_secrets_path)

    token_dir = token_dir or default_token_dir()
    token_dir.mkdir(parents=True, exist_ok=True)
    token_file = token_dir / TOKEN_FILE_NAME

    creds = _load_cached_token(token_file, _client_id(config))
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            logger.info("Refreshing cached token from %s", token_file)
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_config(config, SCOPES)
            logger.info("Waiting for OAuth consent on http://localhost:%d/", port)
            creds = flow.run_local_server(port=port, access_type="offline", prompt="consent")
        with open(token_file, "w") as token:
            token.write(creds.to_json())

    if not creds.refresh_token:
        raise AuthorizationError(
            "Authorization did not grant a refresh token; revoke the app's access and retry."
        )

    return CredentialBundle(
        client_id=creds.client_id,
        client_secret=creds.client_secret,
        refresh_token=creds.refresh_token,
        credentials=creds,
    )
