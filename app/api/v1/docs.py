"""Document routes: readiness-gated generation and generated doc queries."""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_user, get_optional_user
from app.core.errors import AppError
from app.db.session import get_db
from app.documents import (
    build_brand_data_from_runs,
    check_doc_readiness,
    generate_doc,
    generate_doc_title,
    get_doc_state,
    is_implemented_template_id,
    is_valid_template_id,
    templates_by_category,
)
from app.documents.readiness import describe_missing
from app.models.user import User
from app.schemas.doc import (
    DocStateResponse,
    GenerateDocRequest,
    GenerateDocResponse,
    GeneratedDocResponse,
    GeneratedDocSummary,
    TemplateResponse,
)
from app.services.analysis_runs import get_analysis_runs
from app.services.brand_service import get_brand
from app.services.doc_service import (
    complete_doc,
    create_doc,
    delete_doc,
    fail_doc,
    get_doc_for_user,
    list_docs_for_brand,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_uuid(value: str, not_found_message: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise AppError(status.HTTP_404_NOT_FOUND, not_found_message) from None


@router.post("/generate", response_model=GenerateDocResponse, response_model_exclude_none=True,
             summary="Generate a document from a brand's analysis")
async def generate(
    req: GenerateDocRequest,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    if not req.brand_id:
        raise AppError(status.HTTP_400_BAD_REQUEST, "Brand ID is required")
    if not req.template_id:
        raise AppError(status.HTTP_400_BAD_REQUEST, "Template ID is required")
    if not is_valid_template_id(req.template_id):
        logger.warning("Invalid template ID: %s", req.template_id)
        raise AppError(status.HTTP_400_BAD_REQUEST, f"Unknown template: {req.template_id}")
    if not is_implemented_template_id(req.template_id):
        raise AppError(status.HTTP_400_BAD_REQUEST, f"Template is not available yet: {req.template_id}")

    if user is None:
        raise AppError(status.HTTP_401_UNAUTHORIZED, "Please log in to generate documents")

    brand_id = _parse_uuid(req.brand_id, "Brand not found")
    brand = await get_brand(db, user.id, brand_id)
    if brand is None:
        logger.warning("Brand %s not found for user %s", brand_id, user.id)
        raise AppError(status.HTTP_404_NOT_FOUND, "Brand not found")

    runs = await get_analysis_runs(db, brand_id)
    readiness = check_doc_readiness(runs, req.template_id)
    if not readiness.is_ready:
        logger.warning(
            "Brand %s not ready for %s: analyzers=%s fields=%s",
            brand_id, req.template_id, readiness.missing_analyzers,
            [f.field for f in readiness.missing_fields],
        )
        raise AppError(status.HTTP_422_UNPROCESSABLE_ENTITY, describe_missing(readiness))

    basics = next((r.parsed_data for r in runs if r.analyzer_type == "basics" and r.parsed_data), None) or {}
    brand_name = brand.name or basics.get("business_name") or "Unknown Brand"
    brand_data = build_brand_data_from_runs(brand_name, brand.source_url, runs)

    doc = await create_doc(
        db,
        brand_id=brand_id,
        template_id=req.template_id,
        title=generate_doc_title(req.template_id, brand_data),
        source_data=brand_data,
    )
    await db.commit()

    result = await generate_doc(brand_id, req.template_id, brand_data)
    if not result.success:
        await fail_doc(db, doc, result.error or "Generation failed")
        await db.commit()
        raise AppError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            result.error or "Failed to generate document",
            docId=str(doc.id),
        )

    await complete_doc(db, doc, result.parsed_content, result.markdown)
    logger.info("Doc %s generated for brand %s in %dms", doc.id, brand_id, result.duration_ms)
    return GenerateDocResponse(success=True, doc_id=str(doc.id), message="Document generated successfully!")


@router.get("/templates", response_model=dict[str, list[TemplateResponse]],
            summary="Document templates grouped by category")
async def list_templates():
    return {
        category: [
            TemplateResponse(
                id=c.id,
                name=c.name,
                description=c.description,
                short_description=c.short_description,
                category=c.category,
                status=c.status,
                required_analyzers=list(c.required_analyzers),
            )
            for c in configs
        ]
        for category, configs in templates_by_category().items()
    }


async def _owned_brand(db: AsyncSession, user: User, brand_id: uuid.UUID):
    brand = await get_brand(db, user.id, brand_id)
    if brand is None:
        raise AppError(status.HTTP_404_NOT_FOUND, "Brand not found")
    return brand


@router.get("", response_model=list[GeneratedDocSummary], summary="Documents generated for a brand")
async def list_docs(
    brand_id: uuid.UUID = Query(alias="brandId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _owned_brand(db, user, brand_id)
    return await list_docs_for_brand(db, brand_id)


@router.get("/state", response_model=list[DocStateResponse],
            summary="Generation and export state per implemented template")
async def get_docs_state(
    brand_id: uuid.UUID = Query(alias="brandId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    brand = await _owned_brand(db, user, brand_id)
    docs = await list_docs_for_brand(db, brand_id)

    states = []
    for configs in templates_by_category().values():
        for config in configs:
            if not is_implemented_template_id(config.id):
                continue
            state = get_doc_state(docs, brand, config.id)
            states.append(DocStateResponse(
                template_id=config.id,
                exists=state.exists,
                latest_doc=GeneratedDocSummary.model_validate(state.latest_doc) if state.latest_doc else None,
                generation_count=state.generation_count,
                generation_state=state.generation_state,
                export_state=state.export_state,
                is_stale=state.is_stale,
                is_exported=state.is_exported,
                is_export_stale=state.is_export_stale,
                status_message=state.status_message,
                primary_action=state.primary_action,
            ))
    return states


@router.get("/{doc_id}", response_model=GeneratedDocResponse)
async def get_doc(
    doc_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await get_doc_for_user(db, user.id, doc_id)
    if doc is None:
        raise AppError(status.HTTP_404_NOT_FOUND, "Document not found")
    return doc


@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_doc(
    doc_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await delete_doc(db, user.id, doc_id):
        raise AppError(status.HTTP_404_NOT_FOUND, "Document not found")
