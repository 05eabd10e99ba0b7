"""Google OAuth: state tokens, authorization URL, token exchange and refresh."""

import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass
from urllib.parse import urlencode

from app.config import get_settings
from app.integrations.google.constants import (
    GOOGLE_AUTH_URL,
    GOOGLE_OAUTH_SCOPES,
    GOOGLE_REVOKE_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    STATE_MAX_AGE_SECONDS,
)
from app.integrations.google.errors import GoogleAPIError, GoogleNotConfigured, GoogleTokenExpired
from app.integrations.google.http import google_request

logger = logging.getLogger("cleverkit.google.oauth")


@dataclass(frozen=True)
class GoogleOAuthConfig:
    client_id: str
    client_secret: str
    redirect_uri: str


@dataclass
class GoogleTokens:
    access_token: str
    refresh_token: str
    email: str | None = None


def get_oauth_config() -> GoogleOAuthConfig:
    settings = get_settings()
    if not (settings.google_client_id and settings.google_client_secret and settings.google_redirect_uri):
        logger.error(
            "Missing Google OAuth settings (client_id=%s, client_secret=%s, redirect_uri=%s)",
            bool(settings.google_client_id),
            bool(settings.google_client_secret),
            bool(settings.google_redirect_uri),
        )
        raise GoogleNotConfigured("Google OAuth not configured. Check environment variables.")
    return GoogleOAuthConfig(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
    )


# ── State ────────────────────────────────────────────────────


def encode_state(user_id: str, now_ms: int | None = None) -> str:
    payload = {"userId": str(user_id), "timestamp": now_ms if now_ms is not None else int(time.time() * 1000)}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def decode_state(state: str) -> dict | None:
    """Return ``{"userId", "timestamp"}`` or None if the state is malformed."""
    try:
        padded = state + "=" * (-len(state) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict) or not data.get("userId") or not isinstance(data.get("timestamp"), (int, float)):
        return None
    return data


def is_state_expired(timestamp_ms: float, now: float | None = None) -> bool:
    """True when the state is more than ten minutes old. ``now`` is in seconds."""
    now = time.time() if now is None else now
    return now - timestamp_ms / 1000 > STATE_MAX_AGE_SECONDS


def build_auth_url(state: str) -> str:
    config = get_oauth_config()
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
        "scope": " ".join(GOOGLE_OAUTH_SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


# ── Tokens ───────────────────────────────────────────────────


async def fetch_user_email(access_token: str) -> str | None:
    response = await google_request(
        "GET", GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"},
    )
    if not response.is_success:
        logger.warning("Could not fetch Google user info: %s", response.status_code)
        return None
    return response.json().get("email")


async def exchange_code_for_tokens(code: str) -> GoogleTokens:
    """Trade an authorization code for tokens and look up the account email."""
    config = get_oauth_config()
    response = await google_request("POST", GOOGLE_TOKEN_URL, data={
        "code": code,
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "redirect_uri": config.redirect_uri,
        "grant_type": "authorization_code",
    })
    if not response.is_success:
        logger.error("Google token exchange failed: %s %s", response.status_code, response.text)
        raise GoogleAPIError("Failed to exchange authorization code")

    data = response.json()
    access_token = data.get("access_token")
    refresh_token = data.get("refresh_token")
    if not access_token or not refresh_token:
        raise GoogleAPIError("Google did not return the expected tokens")

    email = await fetch_user_email(access_token)
    logger.info("Google tokens obtained for %s", email or "unknown account")
    return GoogleTokens(access_token=access_token, refresh_token=refresh_token, email=email)


async def refresh_access_token(refresh_token: str) -> str:
    config = get_oauth_config()
    response = await google_request("POST", GOOGLE_TOKEN_URL, data={
        "refresh_token": refresh_token,
        "client_id": config.client_id,
        "client_secret": config.client_secret,
        "grant_type": "refresh_token",
    })
    if response.status_code in (400, 401):
        logger.warning("Google refresh token rejected: %s", response.text)
        raise GoogleTokenExpired("Google connection expired. Please reconnect.")
    if not response.is_success:
        raise GoogleAPIError(f"Token refresh failed: {response.status_code}")

    access_token = response.json().get("access_token")
    if not access_token:
        raise GoogleTokenExpired("Google connection expired. Please reconnect.")
    return access_token


async def revoke_token(token: str) -> bool:
    """Best-effort revoke; returns False instead of raising."""
    try:
        response = await google_request(
            "POST",
            GOOGLE_REVOKE_URL,
            params={"token": token},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except GoogleAPIError as e:
        logger.warning("Google token revoke failed: %s", e)
        return False
    # 400 means the token was already invalid
    if not response.is_success and response.status_code != 400:
        logger.warning("Google token revoke returned %s", response.status_code)
        return False
    return True
