"""Readiness gate: can a template be generated from a brand's analysis runs?

Pure functions over run rows; nothing here touches the database.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from app.documents.registry import DOC_TEMPLATES, get_doc_template

logger = logging.getLogger(__name__)

FIELD_DESCRIPTIONS = {
    # basics
    "business_name": "Business name",
    "business_description": "Business description",
    "business_model": "Business model type",
    "industry": "Industry",
    "founder_name": "Founder name",
    "founded_year": "Year founded",
    # customer
    "primary_problem": "Primary customer problem",
    "secondary_problems": "Secondary problems",
    "buying_motivation": "Buying motivation",
    "customer_sophistication": "Customer sophistication level",
    "subcultures": "Target subcultures",
    # products
    "offerings": "Product/service offerings",
    "offering_type": "Offering type",
    "primary_offer": "Primary offer",
    "price_positioning": "Price positioning",
}


class RunLike(Protocol):
    analyzer_type: str
    status: str
    parsed_data: dict | None


@dataclass
class MissingField:
    analyzer: str
    field: str
    description: str


@dataclass
class ReadinessResult:
    is_ready: bool
    completed_analyzers: list[str] = field(default_factory=list)
    missing_analyzers: list[str] = field(default_factory=list)
    missing_fields: list[MissingField] = field(default_factory=list)


def _find_complete_run(runs: Iterable[RunLike], analyzer_type: str) -> RunLike | None:
    for run in runs:
        if run.analyzer_type == analyzer_type and run.status == "complete" and run.parsed_data:
            return run
    return None


def check_doc_readiness(runs: list[RunLike], template_id: str) -> ReadinessResult:
    """Report which required analyzers and fields are missing for ``template_id``.

    An analyzer counts as completed only when its run is ``complete`` and has
    parsed data. A required field is missing when it is None or an empty
    string. Raises ValueError for an unknown or unimplemented template.
    """
    config = get_doc_template(template_id).config
    result = ReadinessResult(is_ready=False)

    for analyzer_type in config.required_analyzers:
        run = _find_complete_run(runs, analyzer_type)
        if run is None:
            result.missing_analyzers.append(analyzer_type)
            continue

        result.completed_analyzers.append(analyzer_type)
        for field_name in config.required_fields.get(analyzer_type, ()):
            value = run.parsed_data.get(field_name)
            if value is None or value == "":
                result.missing_fields.append(MissingField(
                    analyzer=analyzer_type,
                    field=field_name,
                    description=FIELD_DESCRIPTIONS.get(field_name, field_name),
                ))

    result.is_ready = not result.missing_analyzers and not result.missing_fields
    logger.debug(
        "Readiness for %s: ready=%s missing_analyzers=%s missing_fields=%d",
        template_id, result.is_ready, result.missing_analyzers, len(result.missing_fields),
    )
    return result


def check_all_templates_readiness(runs: list[RunLike]) -> dict[str, ReadinessResult]:
    return {template_id: check_doc_readiness(runs, template_id) for template_id in DOC_TEMPLATES}


def build_brand_data_from_runs(brand_name: str, source_url: str, runs: list[RunLike]) -> dict:
    """Flatten completed run output into the input a template prompt expects."""
    data = {"brand_name": brand_name, "source_url": source_url}
    for analyzer_type in ("basics", "customer", "products"):
        run = next(
            (r for r in runs if r.analyzer_type == analyzer_type and r.status == "complete"),
            None,
        )
        data[analyzer_type] = run.parsed_data if run else None
    return data


def describe_missing(result: ReadinessResult) -> str:
    """User-facing explanation for a not-ready template."""
    if result.missing_analyzers:
        return (
            "Not enough data to generate this document. "
            f"Missing analyzers: {', '.join(result.missing_analyzers)}"
        )
    return (
        "Not enough data to generate this document. "
        f"Missing fields: {', '.join(f.description for f in result.missing_fields)}"
    )
