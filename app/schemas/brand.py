import uuid
from datetime import datetime

from pydantic import BaseModel

from app.schemas.base import CamelModel


class AnalyzeRequest(CamelModel):
    url: str | None = None
    is_own_brand: bool = False


class AnalyzeResponse(CamelModel):
    success: bool
    brand_id: str | None = None
    message: str | None = None
    error: str | None = None


class BrandResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    source_url: str
    name: str | None
    scrape_status: str
    scraped_at: datetime | None
    scrape_error: str | None
    is_own_brand: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BrandDetailResponse(BrandResponse):
    scraped_content: str | None


class AnalysisRunResponse(BaseModel):
    id: uuid.UUID
    brand_id: uuid.UUID
    analyzer_type: str
    status: str
    parsed_data: dict | None
    error_message: str | None
    started_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AnalysisStatusResponse(CamelModel):
    brand_id: uuid.UUID
    runs: list[AnalysisRunResponse]
    is_analyzing: bool
    poll_interval_ms: int = 3000
