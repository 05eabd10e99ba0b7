"""Two-stage document generation: prose, then structure, then markdown."""

import logging
import time
import uuid
from dataclasses import dataclass

from app.core.metrics import DOC_GENERATION_DURATION, DOC_GENERATIONS_TOTAL
from app.documents.registry import get_doc_template
from app.services import ai_client

logger = logging.getLogger("cleverkit.documents")

GENERATE_MAX_TOKENS = 2500
GENERATE_TEMPERATURE = 0.7


@dataclass
class DocGenerationResult:
    success: bool
    raw_content: str | None = None
    parsed_content: dict | None = None
    markdown: str | None = None
    error: str | None = None
    duration_ms: int = 0


async def generate_doc(brand_id: uuid.UUID, template_id: str, brand_data: dict) -> DocGenerationResult:
    """Generate a document for a brand. Failures come back as an error result."""
    start = time.monotonic()
    logger.info("Doc generation starting: %s for brand %s", template_id, brand_id)

    try:
        template = get_doc_template(template_id)

        prompt = template.build_prompt(brand_data)
        raw_content = await ai_client.analyze(
            prompt,
            max_tokens=GENERATE_MAX_TOKENS,
            temperature=GENERATE_TEMPERATURE,
        )

        parsed = await ai_client.parse(
            raw_content,
            template.parser.system_prompt,
            template.parser.function_name,
            template.parser.function_description,
            template.parser.schema,
        )
        parsed_content = template.parser.apply(parsed)

        markdown = template.render_markdown(parsed_content, brand_data.get("brand_name") or "Unknown Brand")
    except Exception as e:
        duration = time.monotonic() - start
        message = str(e) or e.__class__.__name__
        logger.error("Doc generation failed: %s for brand %s: %s", template_id, brand_id, message)
        DOC_GENERATIONS_TOTAL.labels(template_id=template_id, status="error").inc()
        DOC_GENERATION_DURATION.labels(template_id=template_id).observe(duration)
        return DocGenerationResult(success=False, error=message, duration_ms=int(duration * 1000))

    duration = time.monotonic() - start
    DOC_GENERATIONS_TOTAL.labels(template_id=template_id, status="complete").inc()
    DOC_GENERATION_DURATION.labels(template_id=template_id).observe(duration)
    logger.info("Doc generated: %s in %.2fs", template_id, duration)
    return DocGenerationResult(
        success=True,
        raw_content=raw_content,
        parsed_content=parsed_content,
        markdown=markdown,
        duration_ms=int(duration * 1000),
    )


def generate_doc_title(template_id: str, brand_data: dict) -> str:
    return get_doc_template(template_id).generate_title(brand_data)
