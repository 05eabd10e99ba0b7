"""Brand Record Manager: create, read, and update Brand rows."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.brand import Brand, SCRAPE_STATUSES
from app.services.context import TrustedContext

logger = logging.getLogger(__name__)

# Columns the trusted write path may set. Ownership and identity never change.
ADMIN_WRITABLE_FIELDS = frozenset({
    "name",
    "scrape_status",
    "scraped_content",
    "scraped_at",
    "scrape_error",
    "is_own_brand",
})


async def create_brand(db: AsyncSession, user_id: uuid.UUID, source_url: str, is_own_brand: bool = False) -> Brand:
    """Insert a new Brand. Repeated URLs create new rows; there is no dedup."""
    brand = Brand(
        id=uuid.uuid4(),
        user_id=user_id,
        source_url=source_url,
        is_own_brand=is_own_brand,
        scrape_status="idle",
    )
    db.add(brand)
    await db.flush()
    logger.info("Brand created: %s (%s)", brand.id, source_url)
    return brand


async def update_brand_admin(ctx: TrustedContext, brand_id: uuid.UUID, fields: dict) -> None:
    """Write brand fields from a trusted server-side context."""
    unknown = set(fields) - ADMIN_WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not writable on brand: {', '.join(sorted(unknown))}")
    status = fields.get("scrape_status")
    if status is not None and status not in SCRAPE_STATUSES:
        raise ValueError(f"Invalid scrape status: {status}")

    brand = await ctx.session.get(Brand, brand_id)
    if brand is None:
        raise LookupError(f"Brand {brand_id} not found")
    for key, value in fields.items():
        setattr(brand, key, value)
    await ctx.session.flush()


async def get_brand(db: AsyncSession, user_id: uuid.UUID, brand_id: uuid.UUID) -> Brand | None:
    """Return the brand if it exists and belongs to ``user_id``."""
    result = await db.execute(
        select(Brand).where(Brand.id == brand_id, Brand.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_brands(db: AsyncSession, user_id: uuid.UUID) -> list[Brand]:
    result = await db.execute(
        select(Brand).where(Brand.user_id == user_id).order_by(Brand.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_brand(db: AsyncSession, user_id: uuid.UUID, brand_id: uuid.UUID) -> bool:
    brand = await get_brand(db, user_id, brand_id)
    if brand is None:
        return False
    await db.delete(brand)
    await db.flush()
    logger.info("Brand deleted: %s", brand_id)
    return True
