"""Generation and export state of a template's documents for one brand.

    never_generated → generated_fresh → (brand updated) → generated_stale
                                     ↘ (exported) → exported_current
                                                  ↘ (regenerated) → exported_stale
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class DocState:
    exists: bool
    latest_doc: Any
    generation_count: int
    generation_state: str
    export_state: str
    is_stale: bool
    is_exported: bool
    is_export_stale: bool
    status_message: str
    primary_action: str


def _completed(docs: list, template_id: str | None) -> list:
    matching = [
        d for d in docs
        if d.status == "complete" and (template_id is None or d.template_id == template_id)
    ]
    return sorted(matching, key=lambda d: d.created_at, reverse=True)


def get_latest_doc_for_template(docs: list, template_id: str):
    completed = _completed(docs, template_id)
    return completed[0] if completed else None


def count_docs_for_template(docs: list, template_id: str) -> int:
    return len(_completed(docs, template_id))


def is_doc_stale(doc, brand) -> bool:
    return brand.updated_at > doc.created_at


def is_export_stale(doc) -> bool:
    if not doc.google_doc_url or not doc.google_exported_at:
        return False
    return doc.created_at > doc.google_exported_at


def _generation_state(doc, brand) -> str:
    if doc is None:
        return "never_generated"
    return "generated_stale" if is_doc_stale(doc, brand) else "generated_fresh"


def _export_state(doc) -> str:
    if doc is None or not doc.google_doc_url:
        return "not_exported"
    # No timestamp on an exported doc: treat as current
    if not doc.google_exported_at:
        return "exported_current"
    return "exported_stale" if is_export_stale(doc) else "exported_current"


def _primary_action(generation_state: str, export_state: str) -> str:
    if generation_state == "never_generated":
        return "generate"
    if generation_state == "generated_stale":
        return "view_and_regenerate"
    if export_state != "not_exported":
        return "open_in_docs"
    return "view"


def _short_date(value: datetime) -> str:
    return f"{value.strftime('%b')} {value.day}"


def _status_message(doc, generation_state: str, export_state: str) -> str:
    if doc is None:
        return "Not yet generated"

    parts = [f"Generated {_short_date(doc.created_at)}"]
    if generation_state == "generated_stale":
        parts.append("• Data updated")
    if export_state == "exported_current":
        parts.append("• In Google Docs")
    elif export_state == "exported_stale":
        parts.append("• Docs outdated")
    return " ".join(parts)


def get_doc_state(docs: list, brand, template_id: str | None = None) -> DocState:
    """Compute the state of the latest completed doc (optionally for one template)."""
    completed = _completed(docs, template_id)
    latest = completed[0] if completed else None

    generation_state = _generation_state(latest, brand)
    export_state = _export_state(latest)

    return DocState(
        exists=latest is not None,
        latest_doc=latest,
        generation_count=len(completed),
        generation_state=generation_state,
        export_state=export_state,
        is_stale=generation_state == "generated_stale",
        is_exported=bool(latest is not None and latest.google_doc_url),
        is_export_stale=export_state == "exported_stale",
        status_message=_status_message(latest, generation_state, export_state),
        primary_action=_primary_action(generation_state, export_state),
    )


def get_all_doc_states(docs: list, brand) -> dict[str, DocState]:
    """State per template id, for every template that has at least one doc."""
    template_ids = dict.fromkeys(d.template_id for d in docs)
    return {tid: get_doc_state(docs, brand, tid) for tid in template_ids}
