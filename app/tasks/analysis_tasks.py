"""Celery task wrapping the analyzer fan-out for durable dispatch."""

import asyncio
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


async def _run_with_fresh_engine(brand_id: uuid.UUID, scraped_content: str) -> dict:
    from app.analyzers.runner import run_all_analyzers

    # Each task runs on its own event loop; asyncpg connections can't cross loops.
    engine = create_async_engine(get_settings().database_url)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        results = await run_all_analyzers(brand_id, scraped_content, session_factory=factory)
    finally:
        await engine.dispose()
    return {analyzer_type: result.success for analyzer_type, result in results.items()}


@celery_app.task(bind=True, name="tasks.run_brand_analysis")
def run_brand_analysis(self, brand_id: str, scraped_content: str):
    """Run all analyzers for a brand. No automatic retry."""
    self.update_state(state="PROGRESS", meta={"brand_id": brand_id})
    outcome = asyncio.run(_run_with_fresh_engine(uuid.UUID(brand_id), scraped_content))
    logger.info("Brand %s analysis finished: %s", brand_id, outcome)
    return {"status": "completed", "brand_id": brand_id, "analyzers": outcome}
