from dataclasses import dataclass, field
from typing import Callable

from app.analyzers.base import ParserDefinition

TEMPLATE_CATEGORIES = ("strategy", "audience", "content", "sales")


@dataclass(frozen=True)
class DocTemplateConfig:
    id: str
    name: str
    description: str
    short_description: str
    category: str
    status: str  # "available" | "coming_soon"
    required_analyzers: tuple[str, ...]
    required_fields: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class DocTemplate:
    config: DocTemplateConfig
    build_prompt: Callable[[dict], str]
    parser: ParserDefinition
    render_markdown: Callable[[dict, str], str]
    generate_title: Callable[[dict], str]
