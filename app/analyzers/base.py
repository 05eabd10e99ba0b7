"""Shared definitions for analyzers and document templates.

Both follow the same two-step shape: a prompt produces prose, then a
ParserDefinition turns that prose into structured fields.
"""

from dataclasses import dataclass, field
from typing import Callable

PromptBuilder = Callable[[str, dict], str]


@dataclass(frozen=True)
class ParserDefinition:
    system_prompt: str
    function_name: str
    function_description: str
    schema: dict
    post_process: Callable[[dict], dict] | None = None

    def apply(self, raw: dict) -> dict:
        return self.post_process(raw) if self.post_process else raw


@dataclass(frozen=True)
class Analyzer:
    id: str
    name: str
    description: str
    build_prompt: PromptBuilder
    parser: ParserDefinition
    depends_on: tuple[str, ...] = field(default_factory=tuple)
