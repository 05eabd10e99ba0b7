import logging
import uuid
from datetime import datetime, timezone

from cryptography.fernet import InvalidToken
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_optional_user
from app.core.audit import audit_doc_exported
from app.core.encryption import get_vault
from app.core.errors import AppError
from app.core.metrics import GOOGLE_EXPORTS_TOTAL
from app.db.session import get_db
from app.integrations.google.docs import create_google_doc
from app.integrations.google.errors import GoogleAPIError, GoogleTokenExpired
from app.integrations.google.oauth import refresh_access_token
from app.models.user import User
from app.schemas.integration import ExportRequest, ExportResponse
from app.services.doc_service import get_doc_for_user, record_export

logger = logging.getLogger(__name__)

router = APIRouter()

TOKEN_EXPIRED_MESSAGE = "Google connection expired. Please reconnect."


@router.post("/google-docs", response_model=ExportResponse, summary="Export a generated doc to Google Docs")
async def export_to_google_docs(
    req: ExportRequest,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if not req.doc_id:
        raise AppError(status.HTTP_400_BAD_REQUEST, "docId is required")
    if user is None:
        raise AppError(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    if not user.google_refresh_token:
        logger.warning("Google Docs export: Google not connected for user %s", user.id)
        raise AppError(status.HTTP_400_BAD_REQUEST, "Google account not connected", code="GOOGLE_NOT_CONNECTED")

    try:
        doc_id = uuid.UUID(req.doc_id)
    except ValueError:
        raise AppError(status.HTTP_404_NOT_FOUND, "Document not found") from None

    # Someone else's doc is reported exactly like a missing one.
    doc = await get_doc_for_user(db, user.id, doc_id)
    if doc is None:
        logger.warning("Google Docs export: doc %s not found for user %s", doc_id, user.id)
        raise AppError(status.HTTP_404_NOT_FOUND, "Document not found")

    if not doc.content_markdown:
        raise AppError(status.HTTP_400_BAD_REQUEST, "Document has no content to export")

    try:
        refresh_token = get_vault().decrypt(user.google_refresh_token)
        access_token = await refresh_access_token(refresh_token)
    except (GoogleTokenExpired, InvalidToken) as e:
        logger.error("Google Docs export: token refresh failed for user %s: %s", user.id, e)
        GOOGLE_EXPORTS_TOTAL.labels(status="token_expired").inc()
        raise AppError(status.HTTP_401_UNAUTHORIZED, TOKEN_EXPIRED_MESSAGE, code="GOOGLE_TOKEN_EXPIRED")
    except GoogleAPIError as e:
        logger.error("Google Docs export: token refresh error for user %s: %s", user.id, e)
        GOOGLE_EXPORTS_TOTAL.labels(status="error").inc()
        raise AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to export to Google Docs")

    try:
        created = await create_google_doc(access_token, doc.title, doc.content_markdown)
    except GoogleTokenExpired:
        GOOGLE_EXPORTS_TOTAL.labels(status="token_expired").inc()
        raise AppError(status.HTTP_401_UNAUTHORIZED, TOKEN_EXPIRED_MESSAGE, code="GOOGLE_TOKEN_EXPIRED")
    except GoogleAPIError as e:
        logger.error("Google Docs export failed for doc %s: %s", doc.id, e)
        GOOGLE_EXPORTS_TOTAL.labels(status="error").inc()
        raise AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to export to Google Docs")

    # The Google doc exists either way; a failed bookkeeping write is only logged.
    try:
        await record_export(db, doc, created.document_id, created.document_url, datetime.now(timezone.utc))
        await db.commit()
    except SQLAlchemyError as e:
        logger.warning("Google Docs export: failed to update doc record %s: %s", doc.id, e)
        await db.rollback()

    GOOGLE_EXPORTS_TOTAL.labels(status="success").inc()
    audit_doc_exported(str(user.id), str(doc.id), created.document_id)
    return ExportResponse(success=True, google_doc_id=created.document_id, google_doc_url=created.document_url)
