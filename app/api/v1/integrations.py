"""Google account linking: OAuth start, callback, status, disconnect."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import OAUTH_SESSION_COOKIE, OAUTH_SESSION_PATH, get_current_user, get_optional_user
from app.config import get_settings
from app.core.audit import AuditAction, audit_google_event
from app.core.encryption import get_vault
from app.core.errors import AppError
from app.core.security import create_access_token
from app.db.session import get_db
from app.integrations.google.constants import STATE_MAX_AGE_SECONDS
from app.integrations.google.errors import GoogleAPIError
from app.integrations.google.oauth import (
    build_auth_url,
    decode_state,
    encode_state,
    exchange_code_for_tokens,
    is_state_expired,
    revoke_token,
)
from app.models.user import User
from app.schemas.integration import GoogleAuthUrlResponse, GoogleStatusResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_oauth_session(response: Response, user_id: str) -> None:
    """Short-lived HttpOnly cookie identifying the user when Google redirects back."""
    token = create_access_token({"sub": user_id}, expires_delta=timedelta(seconds=STATE_MAX_AGE_SECONDS))
    response.set_cookie(
        OAUTH_SESSION_COOKIE,
        token,
        max_age=STATE_MAX_AGE_SECONDS,
        path=OAUTH_SESSION_PATH,
        httponly=True,
        secure=get_settings().cookie_secure,
        samesite="lax",
    )


def _redirect(path: str) -> RedirectResponse:
    response = RedirectResponse(f"{get_settings().frontend_url}/integrations/google/{path}", status_code=302)
    response.delete_cookie(OAUTH_SESSION_COOKIE, path=OAUTH_SESSION_PATH)
    return response


def _redirect_success() -> RedirectResponse:
    return _redirect("success")


def _redirect_error(code: str, user_id=None) -> RedirectResponse:
    audit_google_event(AuditAction.GOOGLE_CONNECT_FAILED, str(user_id) if user_id else None, reason=code)
    return _redirect(f"error?code={code}")


@router.post("/google/auth", response_model=GoogleAuthUrlResponse, summary="Start Google OAuth")
async def google_auth(response: Response, user: User = Depends(get_current_user)):
    try:
        auth_url = build_auth_url(encode_state(str(user.id)))
    except GoogleAPIError as e:
        logger.error("Google OAuth: failed to initiate: %s", e)
        raise AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to initiate Google OAuth")
    _set_oauth_session(response, str(user.id))
    logger.info("Google OAuth: initiating for user %s", user.id)
    return GoogleAuthUrlResponse(auth_url=auth_url)


@router.get("/google/callback", summary="Google OAuth redirect target")
async def google_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    logger.info("Google OAuth: callback received (code=%s, state=%s, error=%s)",
                bool(code), bool(state), error or "none")

    if error:
        logger.warning("Google OAuth: user denied or error occurred: %s", error)
        return _redirect_error("access_denied")
    if not code or not state:
        return _redirect_error("invalid_request")

    state_data = decode_state(state)
    if state_data is None:
        logger.error("Google OAuth: invalid state parameter")
        return _redirect_error("invalid_state")
    if is_state_expired(state_data["timestamp"]):
        logger.error("Google OAuth: state expired")
        return _redirect_error("state_expired")

    if user is None:
        logger.error("Google OAuth: user not authenticated")
        return _redirect_error("unauthorized")
    if str(user.id) != state_data["userId"]:
        logger.error("Google OAuth: user mismatch (expected %s, got %s)", state_data["userId"], user.id)
        return _redirect_error("user_mismatch", user.id)

    try:
        tokens = await exchange_code_for_tokens(code)
    except GoogleAPIError as e:
        logger.error("Google OAuth: token exchange failed: %s", e)
        return _redirect_error("server_error", user.id)

    try:
        user.google_refresh_token = get_vault().encrypt(tokens.refresh_token)
        user.google_email = tokens.email
        user.google_connected_at = datetime.now(timezone.utc)
        await db.commit()
    except (SQLAlchemyError, RuntimeError) as e:
        logger.error("Google OAuth: failed to store tokens: %s", e)
        await db.rollback()
        return _redirect_error("storage_failed", user.id)

    audit_google_event(AuditAction.GOOGLE_CONNECTED, str(user.id), google_email=tokens.email)
    logger.info("Google OAuth: connection successful for user %s", user.id)
    return _redirect_success()


@router.get("/google/status", response_model=GoogleStatusResponse, summary="Google connection status")
async def google_status(user: User = Depends(get_current_user)):
    return GoogleStatusResponse(
        is_connected=bool(user.google_refresh_token),
        connected_email=user.google_email,
        connected_at=user.google_connected_at,
    )


@router.post("/google/disconnect", response_model=SuccessResponse, summary="Disconnect Google")
async def google_disconnect(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    if not user.google_refresh_token:
        raise AppError(status.HTTP_400_BAD_REQUEST, "Google is not connected")

    try:
        await revoke_token(get_vault().decrypt(user.google_refresh_token))
    except Exception as e:
        logger.warning("Google disconnect: revoke skipped for user %s: %s", user.id, e)

    user.google_refresh_token = None
    user.google_email = None
    user.google_connected_at = None
    await db.flush()

    audit_google_event(AuditAction.GOOGLE_DISCONNECTED, str(user.id))
    logger.info("Google disconnected for user %s", user.id)
    return SuccessResponse(success=True)
