"""Registry of analyzers run for every brand, in creation order."""

from app.analyzers import basics, customer, products
from app.analyzers.base import Analyzer

ANALYZERS: dict[str, Analyzer] = {
    a.id: a for a in (basics.analyzer, customer.analyzer, products.analyzer)
}


def analyzer_ids() -> list[str]:
    return list(ANALYZERS)


def get_analyzer(analyzer_type: str) -> Analyzer:
    try:
        return ANALYZERS[analyzer_type]
    except KeyError:
        raise ValueError(f"Unknown analyzer: {analyzer_type}") from None
