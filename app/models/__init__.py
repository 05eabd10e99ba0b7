from app.models.base import Base
from app.models.user import User
from app.models.brand import Brand
from app.models.analysis_run import AnalysisRun
from app.models.generated_doc import GeneratedDoc

__all__ = [
    "Base", "User", "Brand", "AnalysisRun", "GeneratedDoc",
]
