"""Analyzer execution fan-out.

Every analyzer moves its own run through
queued → analyzing → parsing → complete, or to error from any step.
Each state change is committed in its own short transaction so pollers see
progress, then pushed to the owner's websocket. A failing analyzer never
touches, aborts, or delays its siblings.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.analyzers.registry import ANALYZERS, get_analyzer
from app.analyzers.base import Analyzer
from app.core.metrics import ANALYZER_RUN_DURATION, ANALYZER_RUNS_TOTAL
from app.db.session import async_session_factory, session_scope
from app.models.brand import Brand
from app.services import ai_client
from app.services.analysis_runs import update_analysis_run_by_type
from app.services.context import TrustedContext
from app.services.status_publisher import publish_run_update

logger = logging.getLogger("cleverkit.analyzers")


@dataclass
class AnalyzerResult:
    success: bool
    raw_analysis: str | None = None
    parsed_data: dict | None = None
    error: str | None = None
    duration_ms: int = 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _transition(
    session_factory: async_sessionmaker,
    owner_id: uuid.UUID | None,
    brand_id: uuid.UUID,
    analyzer_type: str,
    **fields,
) -> None:
    async with session_scope(session_factory) as session:
        run = await update_analysis_run_by_type(TrustedContext(session, actor="analyzer"), brand_id, analyzer_type, **fields)
    if owner_id is not None:
        await publish_run_update(owner_id, brand_id, run)


async def run_analyzer(
    brand_id: uuid.UUID,
    analyzer_type: str,
    scraped_content: str,
    prior_results: dict | None = None,
    *,
    owner_id: uuid.UUID | None = None,
    session_factory: async_sessionmaker = async_session_factory,
) -> AnalyzerResult:
    """Run one analyzer against ``scraped_content``; never raises."""
    start = time.monotonic()
    logger.info("Analyzer %s starting for brand %s", analyzer_type, brand_id)

    try:
        analyzer = get_analyzer(analyzer_type)

        # Step 1: natural-language analysis
        await _transition(session_factory, owner_id, brand_id, analyzer_type,
                          status="analyzing", started_at=_now())
        prompt = analyzer.build_prompt(scraped_content, prior_results or {})
        raw_analysis = await ai_client.analyze(prompt)

        # Step 2: structured extraction
        await _transition(session_factory, owner_id, brand_id, analyzer_type,
                          status="parsing", raw_analysis=raw_analysis)
        parsed = await ai_client.parse(
            raw_analysis,
            analyzer.parser.system_prompt,
            analyzer.parser.function_name,
            analyzer.parser.function_description,
            analyzer.parser.schema,
        )
        parsed_data = analyzer.parser.apply(parsed)

        await _transition(session_factory, owner_id, brand_id, analyzer_type,
                          status="complete", parsed_data=parsed_data,
                          error_message=None, completed_at=_now())
    except Exception as e:
        message = str(e) or e.__class__.__name__
        duration = time.monotonic() - start
        logger.error("Analyzer %s failed for brand %s: %s", analyzer_type, brand_id, message)
        try:
            await _transition(session_factory, owner_id, brand_id, analyzer_type,
                              status="error", error_message=message, completed_at=_now())
        except Exception:
            logger.error("Could not record error for %s run of brand %s", analyzer_type, brand_id, exc_info=True)
        ANALYZER_RUNS_TOTAL.labels(analyzer_type=analyzer_type, status="error").inc()
        ANALYZER_RUN_DURATION.labels(analyzer_type=analyzer_type).observe(duration)
        return AnalyzerResult(success=False, error=message, duration_ms=int(duration * 1000))

    duration = time.monotonic() - start
    ANALYZER_RUNS_TOTAL.labels(analyzer_type=analyzer_type, status="complete").inc()
    ANALYZER_RUN_DURATION.labels(analyzer_type=analyzer_type).observe(duration)
    logger.info("Analyzer %s complete for brand %s in %.2fs", analyzer_type, brand_id, duration)
    return AnalyzerResult(
        success=True,
        raw_analysis=raw_analysis,
        parsed_data=parsed_data,
        duration_ms=int(duration * 1000),
    )


def build_execution_plan(analyzers: dict[str, Analyzer] | None = None) -> list[list[str]]:
    """Group analyzer ids into waves whose dependencies ran in earlier waves."""
    analyzers = ANALYZERS if analyzers is None else analyzers
    waves: list[list[str]] = []
    scheduled: set[str] = set()

    while len(scheduled) < len(analyzers):
        wave = [
            analyzer_id for analyzer_id, analyzer in analyzers.items()
            if analyzer_id not in scheduled
            and all(dep in scheduled for dep in analyzer.depends_on)
        ]
        if not wave:
            pending = sorted(set(analyzers) - scheduled)
            logger.error("Could not build execution plan, circular or missing dependency among: %s", pending)
            break
        waves.append(wave)
        scheduled.update(wave)

    return waves


def build_prior_results(results: dict[str, AnalyzerResult]) -> dict[str, dict]:
    return {
        analyzer_type: result.parsed_data
        for analyzer_type, result in results.items()
        if result.success and result.parsed_data
    }


async def _get_owner_id(session_factory: async_sessionmaker, brand_id: uuid.UUID) -> uuid.UUID | None:
    try:
        async with session_scope(session_factory) as session:
            brand = await session.get(Brand, brand_id)
            return brand.user_id if brand else None
    except Exception:
        logger.warning("Could not resolve owner of brand %s; realtime push disabled", brand_id, exc_info=True)
        return None


async def run_all_analyzers(
    brand_id: uuid.UUID,
    scraped_content: str,
    *,
    session_factory: async_sessionmaker = async_session_factory,
) -> dict[str, AnalyzerResult]:
    """Run every registered analyzer for a brand, wave by wave."""
    start = time.monotonic()
    owner_id = await _get_owner_id(session_factory, brand_id)
    results: dict[str, AnalyzerResult] = {}

    for wave in build_execution_plan():
        logger.info("Executing analyzer wave for brand %s: %s", brand_id, ", ".join(wave))
        prior = build_prior_results(results)
        wave_results = await asyncio.gather(*[
            run_analyzer(
                brand_id, analyzer_type, scraped_content, prior,
                owner_id=owner_id, session_factory=session_factory,
            )
            for analyzer_type in wave
        ])
        results.update(zip(wave, wave_results))

    succeeded = sum(1 for r in results.values() if r.success)
    logger.info(
        "All analyzers finished for brand %s: %d ok, %d failed in %.2fs",
        brand_id, succeeded, len(results) - succeeded, time.monotonic() - start,
    )
    return results


# ── Dispatch ─────────────────────────────────────────────────

_background_tasks: set[asyncio.Task] = set()


def dispatch_analysis(brand_id: uuid.UUID, scraped_content: str) -> None:
    """Start the fan-out without waiting for it.

    ``inline`` schedules an asyncio task in this process; ``celery`` enqueues
    a task with late acknowledgement so a worker crash leads to redelivery.
    """
    from app.config import get_settings

    if get_settings().analysis_dispatch == "celery":
        from app.tasks.analysis_tasks import run_brand_analysis
        run_brand_analysis.delay(str(brand_id), scraped_content)
        logger.info("Analysis for brand %s enqueued", brand_id)
        return

    async def _run():
        try:
            await run_all_analyzers(brand_id, scraped_content)
        except Exception as e:
            logger.error("Background analysis failed for brand %s: %s", brand_id, e, exc_info=True)

    task = asyncio.create_task(_run())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
