from app.analyzers.base import Analyzer, ParserDefinition
from app.analyzers.registry import ANALYZERS, analyzer_ids, get_analyzer

__all__ = ["Analyzer", "ParserDefinition", "ANALYZERS", "analyzer_ids", "get_analyzer"]
