"""Document template catalogue."""

from app.documents.base import DocTemplate, DocTemplateConfig, TEMPLATE_CATEGORIES
from app.documents.templates import golden_circle

DOC_TEMPLATES: dict[str, DocTemplate] = {
    golden_circle.template.config.id: golden_circle.template,
}

COMING_SOON: list[DocTemplateConfig] = [
    DocTemplateConfig(
        id="brand-brief",
        name="Brand Brief",
        description="Complete brand overview document for stakeholders",
        short_description="One-page brand overview for sharing",
        category="strategy",
        status="coming_soon",
        required_analyzers=("basics", "customer", "products"),
    ),
    DocTemplateConfig(
        id="customer-persona",
        name="Customer Persona",
        description="Detailed ideal customer profile with demographics and psychographics",
        short_description="Bring your target audience to life",
        category="audience",
        status="coming_soon",
        required_analyzers=("customer",),
    ),
]


def all_template_configs() -> list[DocTemplateConfig]:
    return [t.config for t in DOC_TEMPLATES.values()] + COMING_SOON


def templates_by_category() -> dict[str, list[DocTemplateConfig]]:
    """Configs grouped by category; available first, then by name."""
    grouped: dict[str, list[DocTemplateConfig]] = {c: [] for c in TEMPLATE_CATEGORIES}
    for config in all_template_configs():
        grouped[config.category].append(config)
    for configs in grouped.values():
        configs.sort(key=lambda c: (c.status != "available", c.name))
    return grouped


def is_valid_template_id(template_id: str) -> bool:
    return any(c.id == template_id for c in all_template_configs())


def is_implemented_template_id(template_id: str) -> bool:
    return template_id in DOC_TEMPLATES


def get_doc_template(template_id: str) -> DocTemplate:
    try:
        return DOC_TEMPLATES[template_id]
    except KeyError:
        raise ValueError(f"Unknown doc template: {template_id}") from None
