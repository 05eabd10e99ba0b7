"""Basics analyzer: business identity (name, industry, model)."""

from html import unescape

from app.analyzers.base import Analyzer, ParserDefinition

BUSINESS_MODELS = [
    "B2B Services",
    "B2C Services",
    "B2B Products",
    "B2C Products",
    "B2B SaaS",
    "B2C SaaS",
    "Marketplace",
    "Agency",
    "Consultancy",
    "Other",
]


def build_prompt(scraped_content: str, prior_results: dict) -> str:
    return f"""You are a sharp brand strategist doing intake research on a new client.
You've just reviewed their website content (provided below).

Write a brief, natural summary covering:
- What the business is called and who founded it (if apparent)
- Roughly when they seem to have started (if mentioned or inferable)
- What industry or space they operate in
- What this business actually does, explained like you're telling a colleague
- What their primary business model seems to be (products, services, SaaS, agency, etc.)

Be conversational and observant. Note if anything is unclear or missing from the website.
Don't use bullet points or structured formatting; just write naturally as if you're jotting
notes after reviewing their site.

If you can't find certain information (like founder name or founding year), just mention
that it wasn't apparent from the website. Don't make things up.

---
WEBSITE CONTENT:
{scraped_content}"""


def _clean(value) -> str:
    return unescape(value.strip()) if isinstance(value, str) else ""


def post_process(raw: dict) -> dict:
    founder = _clean(raw.get("founder_name"))
    founded = raw.get("founded_year")
    founded = founded.strip() if isinstance(founded, str) else None
    return {
        **raw,
        "business_name": _clean(raw.get("business_name")) or "Unknown Business",
        "industry": _clean(raw.get("industry")) or "Unknown",
        "business_description": _clean(raw.get("business_description")),
        "founder_name": founder or None,
        "founded_year": founded or None,
    }


parser = ParserDefinition(
    system_prompt="""You are a precise data extraction assistant.
Read the brand analysis below and extract the requested fields into the function call.
If something wasn't mentioned or is genuinely unclear, use null for optional fields.
For required fields, make your best inference from context.""",
    function_name="extract_basics",
    function_description="Extract basic business information from the analysis",
    schema={
        "type": "object",
        "properties": {
            "business_name": {
                "type": "string",
                "description": "The name of the business",
            },
            "founder_name": {
                "type": ["string", "null"],
                "description": "Name of founder if mentioned, null if not found",
            },
            "founded_year": {
                "type": ["string", "null"],
                "description": 'Year founded, or approximate like "circa 2021", null if not found',
            },
            "industry": {
                "type": "string",
                "description": 'The industry or space they operate in (e.g., "Marketing Technology", "E-commerce")',
            },
            "business_description": {
                "type": "string",
                "description": "A 1-2 sentence description of what the business does",
            },
            "business_model": {
                "type": "string",
                "enum": BUSINESS_MODELS,
                "description": "The primary business model",
            },
        },
        "required": ["business_name", "industry", "business_description", "business_model"],
    },
    post_process=post_process,
)

analyzer = Analyzer(
    id="basics",
    name="Basics",
    description="Core business information like name, industry, and what they do",
    build_prompt=build_prompt,
    parser=parser,
)
