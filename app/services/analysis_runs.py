"""Analysis Run Registry and the status read model built on it."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.analyzers.registry import analyzer_ids
from app.models.analysis_run import AnalysisRun, ACTIVE_RUN_STATUSES, RUN_STATUSES
from app.services.context import TrustedContext

logger = logging.getLogger(__name__)

RUN_WRITABLE_FIELDS = frozenset({
    "status",
    "raw_analysis",
    "parsed_data",
    "error_message",
    "started_at",
    "completed_at",
})


@dataclass
class AnalysisStatus:
    runs: list[AnalysisRun]
    is_analyzing: bool


def is_analyzing(runs) -> bool:
    """True while any run is still queued, analyzing, or parsing."""
    return any(run.status in ACTIVE_RUN_STATUSES for run in runs)


async def create_analysis_runs(db: AsyncSession, brand_id: uuid.UUID) -> list[AnalysisRun]:
    """Create one queued run per registered analyzer."""
    # Rows share one transaction timestamp; offset created_at to keep insertion order.
    base = datetime.now(timezone.utc)
    runs = [
        AnalysisRun(
            id=uuid.uuid4(),
            brand_id=brand_id,
            analyzer_type=analyzer_type,
            status="queued",
            retry_count=0,
            created_at=base + timedelta(microseconds=i),
        )
        for i, analyzer_type in enumerate(analyzer_ids())
    ]
    db.add_all(runs)
    await db.flush()
    logger.info("Analysis runs created for brand %s: %s", brand_id, [r.analyzer_type for r in runs])
    return runs


async def get_analysis_runs(db: AsyncSession, brand_id: uuid.UUID) -> list[AnalysisRun]:
    result = await db.execute(
        select(AnalysisRun)
        .where(AnalysisRun.brand_id == brand_id)
        .order_by(AnalysisRun.created_at.asc())
    )
    return list(result.scalars().all())


async def get_analysis_status(db: AsyncSession, brand_id: uuid.UUID) -> AnalysisStatus:
    runs = await get_analysis_runs(db, brand_id)
    return AnalysisStatus(runs=runs, is_analyzing=is_analyzing(runs))


async def update_analysis_run_by_type(
    ctx: TrustedContext,
    brand_id: uuid.UUID,
    analyzer_type: str,
    **fields,
) -> AnalysisRun:
    """Update the single run for (brand, analyzer_type)."""
    unknown = set(fields) - RUN_WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not writable on analysis run: {', '.join(sorted(unknown))}")
    if "status" in fields and fields["status"] not in RUN_STATUSES:
        raise ValueError(f"Invalid run status: {fields['status']}")

    result = await ctx.session.execute(
        select(AnalysisRun).where(
            AnalysisRun.brand_id == brand_id,
            AnalysisRun.analyzer_type == analyzer_type,
        )
    )
    run = result.scalar_one_or_none()
    if run is None:
        raise LookupError(f"No {analyzer_type} run for brand {brand_id}")
    for key, value in fields.items():
        setattr(run, key, value)
    await ctx.session.flush()
    return run
