from app.documents.generator import DocGenerationResult, generate_doc, generate_doc_title
from app.documents.readiness import (
    FIELD_DESCRIPTIONS,
    ReadinessResult,
    build_brand_data_from_runs,
    check_all_templates_readiness,
    check_doc_readiness,
)
from app.documents.registry import (
    get_doc_template,
    is_implemented_template_id,
    is_valid_template_id,
    templates_by_category,
)
from app.documents.state import DocState, get_all_doc_states, get_doc_state

__all__ = [
    "DocGenerationResult",
    "DocState",
    "FIELD_DESCRIPTIONS",
    "ReadinessResult",
    "build_brand_data_from_runs",
    "check_all_templates_readiness",
    "check_doc_readiness",
    "generate_doc",
    "generate_doc_title",
    "get_all_doc_states",
    "get_doc_state",
    "get_doc_template",
    "is_implemented_template_id",
    "is_valid_template_id",
    "templates_by_category",
]
