from datetime import datetime

from app.schemas.base import CamelModel


class ExportRequest(CamelModel):
    doc_id: str | None = None


class ExportResponse(CamelModel):
    success: bool
    google_doc_id: str
    google_doc_url: str


class GoogleAuthUrlResponse(CamelModel):
    auth_url: str


class GoogleStatusResponse(CamelModel):
    is_connected: bool
    connected_email: str | None = None
    connected_at: datetime | None = None


class SuccessResponse(CamelModel):
    success: bool = True
