"""Generated document records: create, finish, export bookkeeping, queries."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.brand import Brand
from app.models.generated_doc import GeneratedDoc

logger = logging.getLogger(__name__)


class DocAlreadyFinished(Exception):
    """A doc that left ``generating`` cannot transition again."""


async def create_doc(
    db: AsyncSession,
    brand_id: uuid.UUID,
    template_id: str,
    title: str,
    source_data: dict,
) -> GeneratedDoc:
    doc = GeneratedDoc(
        id=uuid.uuid4(),
        brand_id=brand_id,
        template_id=template_id,
        title=title,
        source_data=source_data,
        status="generating",
    )
    db.add(doc)
    await db.flush()
    logger.info("Doc record created: %s (%s)", doc.id, template_id)
    return doc


def _ensure_generating(doc: GeneratedDoc) -> None:
    if doc.status != "generating":
        raise DocAlreadyFinished(f"Doc {doc.id} is already {doc.status}")


async def complete_doc(db: AsyncSession, doc: GeneratedDoc, content: dict, markdown: str) -> GeneratedDoc:
    _ensure_generating(doc)
    doc.content = content
    doc.content_markdown = markdown
    doc.status = "complete"
    await db.flush()
    return doc


async def fail_doc(db: AsyncSession, doc: GeneratedDoc, error_message: str) -> GeneratedDoc:
    _ensure_generating(doc)
    doc.status = "error"
    doc.error_message = error_message
    await db.flush()
    return doc


async def record_export(
    db: AsyncSession,
    doc: GeneratedDoc,
    google_doc_id: str,
    google_doc_url: str,
    exported_at: datetime,
) -> GeneratedDoc:
    doc.google_doc_id = google_doc_id
    doc.google_doc_url = google_doc_url
    doc.google_exported_at = exported_at
    await db.flush()
    return doc


async def get_doc_for_user(db: AsyncSession, user_id: uuid.UUID, doc_id: uuid.UUID) -> GeneratedDoc | None:
    """Return the doc only if its brand belongs to ``user_id``."""
    result = await db.execute(
        select(GeneratedDoc)
        .join(Brand, GeneratedDoc.brand_id == Brand.id)
        .where(GeneratedDoc.id == doc_id, Brand.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_docs_for_brand(db: AsyncSession, brand_id: uuid.UUID) -> list[GeneratedDoc]:
    result = await db.execute(
        select(GeneratedDoc)
        .where(GeneratedDoc.brand_id == brand_id)
        .order_by(GeneratedDoc.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_doc(db: AsyncSession, user_id: uuid.UUID, doc_id: uuid.UUID) -> bool:
    doc = await get_doc_for_user(db, user_id, doc_id)
    if doc is None:
        return False
    await db.delete(doc)
    await db.flush()
    logger.info("Doc deleted: %s", doc_id)
    return True
