import uuid
from datetime import datetime

from pydantic import BaseModel

from app.schemas.base import CamelModel


class GenerateDocRequest(CamelModel):
    brand_id: str | None = None
    template_id: str | None = None


class GenerateDocResponse(CamelModel):
    success: bool
    doc_id: str | None = None
    message: str | None = None
    error: str | None = None


class GeneratedDocSummary(BaseModel):
    id: uuid.UUID
    brand_id: uuid.UUID
    template_id: str
    title: str
    status: str
    error_message: str | None
    google_doc_id: str | None
    google_doc_url: str | None
    google_exported_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GeneratedDocResponse(GeneratedDocSummary):
    content: dict | None
    content_markdown: str | None
    source_data: dict


class MissingFieldResponse(BaseModel):
    analyzer: str
    field: str
    description: str


class ReadinessResponse(CamelModel):
    template_id: str
    is_ready: bool
    completed_analyzers: list[str]
    missing_analyzers: list[str]
    missing_fields: list[MissingFieldResponse]


class TemplateResponse(CamelModel):
    id: str
    name: str
    description: str
    short_description: str
    category: str
    status: str
    required_analyzers: list[str]


class DocStateResponse(CamelModel):
    template_id: str
    exists: bool
    latest_doc: GeneratedDocSummary | None
    generation_count: int
    generation_state: str
    export_state: str
    is_stale: bool
    is_exported: bool
    is_export_stale: bool
    status_message: str
    primary_action: str
