"""Brand routes: start an analysis, list and inspect brands, poll progress."""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.analyzers.runner import dispatch_analysis
from app.api.v1.deps import get_current_user, get_optional_user
from app.core.errors import AppError
from app.core.metrics import BRANDS_ANALYZED
from app.db.session import get_db
from app.documents.readiness import check_all_templates_readiness
from app.models.user import User
from app.schemas.brand import (
    AnalysisRunResponse,
    AnalysisStatusResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    BrandDetailResponse,
    BrandResponse,
)
from app.schemas.doc import MissingFieldResponse, ReadinessResponse
from app.services.analysis_runs import create_analysis_runs, get_analysis_runs, get_analysis_status
from app.services.brand_service import create_brand, delete_brand, get_brand, list_brands, update_brand_admin
from app.services.context import TrustedContext
from app.services.scraper import ensure_protocol, is_valid_url, scrape_homepage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True,
             summary="Scrape a homepage and start the analyzers")
async def analyze_brand(
    req: AnalyzeRequest,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if not req.url or not req.url.strip():
        raise AppError(status.HTTP_400_BAD_REQUEST, "URL is required")

    normalized_url = ensure_protocol(req.url)
    if not is_valid_url(normalized_url):
        logger.warning("Invalid URL provided: %s", req.url)
        raise AppError(status.HTTP_400_BAD_REQUEST, "Please enter a valid URL")

    if user is None:
        raise AppError(status.HTTP_401_UNAUTHORIZED, "Please log in to analyze a brand")

    brand = await create_brand(db, user.id, normalized_url, is_own_brand=req.is_own_brand)
    ctx = TrustedContext(db)
    await update_brand_admin(ctx, brand.id, {"scrape_status": "scraping"})
    await db.commit()

    result = await scrape_homepage(normalized_url)
    if not result.success or not result.content:
        error = result.error or "Failed to scrape website"
        await update_brand_admin(ctx, brand.id, {"scrape_status": "failed", "scrape_error": error})
        await db.commit()
        BRANDS_ANALYZED.labels(outcome="scrape_failed").inc()
        raise AppError(status.HTTP_422_UNPROCESSABLE_ENTITY, error, brandId=str(brand.id))

    await update_brand_admin(ctx, brand.id, {
        "name": result.metadata.title if result.metadata else None,
        "scraped_content": result.content,
        "scraped_at": datetime.now(timezone.utc),
        "scrape_status": "complete",
        "scrape_error": None,
    })
    await db.commit()

    try:
        await create_analysis_runs(db, brand.id)
        await db.commit()
    except Exception:
        logger.error("Failed to create analysis runs for brand %s", brand.id, exc_info=True)
        await db.rollback()
        BRANDS_ANALYZED.labels(outcome="error").inc()
        raise AppError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to start analysis", brandId=str(brand.id))

    # Rows are committed; the fan-out reads them from its own sessions.
    dispatch_analysis(brand.id, result.content)
    BRANDS_ANALYZED.labels(outcome="started").inc()
    logger.info("Analysis started for brand %s", brand.id)

    return AnalyzeResponse(
        success=True,
        brand_id=str(brand.id),
        message="Analysis started! Results will appear as they complete.",
    )


@router.get("", response_model=list[BrandResponse], summary="List the user's brands")
async def get_brands(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await list_brands(db, user.id)


async def _owned_brand(db: AsyncSession, user: User, brand_id: uuid.UUID):
    brand = await get_brand(db, user.id, brand_id)
    if brand is None:
        raise AppError(status.HTTP_404_NOT_FOUND, "Brand not found")
    return brand


@router.get("/{brand_id}", response_model=BrandDetailResponse)
async def get_brand_detail(
    brand_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _owned_brand(db, user, brand_id)


@router.delete("/{brand_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_brand(
    brand_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await delete_brand(db, user.id, brand_id):
        raise AppError(status.HTTP_404_NOT_FOUND, "Brand not found")


@router.get("/{brand_id}/analysis", response_model=AnalysisStatusResponse,
            summary="Analysis progress (poll every pollIntervalMs)")
async def get_brand_analysis(
    brand_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _owned_brand(db, user, brand_id)
    status_model = await get_analysis_status(db, brand_id)
    return AnalysisStatusResponse(
        brand_id=brand_id,
        runs=[AnalysisRunResponse.model_validate(run) for run in status_model.runs],
        is_analyzing=status_model.is_analyzing,
    )


@router.get("/{brand_id}/readiness", response_model=list[ReadinessResponse],
            summary="Which document templates can be generated")
async def get_brand_readiness(
    brand_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _owned_brand(db, user, brand_id)
    runs = await get_analysis_runs(db, brand_id)
    return [
        ReadinessResponse(
            template_id=template_id,
            is_ready=result.is_ready,
            completed_analyzers=result.completed_analyzers,
            missing_analyzers=result.missing_analyzers,
            missing_fields=[MissingFieldResponse(**vars(f)) for f in result.missing_fields],
        )
        for template_id, result in check_all_templates_readiness(runs).items()
    ]
