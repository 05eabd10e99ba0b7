"""Products analyzer: offerings, pricing model, and market positioning."""

from app.analyzers.base import Analyzer, ParserDefinition

OFFERING_TYPES = ["Products", "Services", "Both", "Unclear"]
PRICING_MODELS = [
    "One-time",
    "Subscription",
    "Retainer",
    "Project-based",
    "Custom/Contact",
    "Free",
    "Freemium",
    "Unknown",
]
PRICE_POSITIONS = ["Budget", "Mid-market", "Premium", "Luxury", "Unclear"]

PLACEHOLDER_OFFERING = {
    "name": "Primary offering",
    "description": "Details not found on website",
    "price": None,
    "pricing_model": "Unknown",
}


def build_prompt(scraped_content: str, prior_results: dict) -> str:
    return f"""You are a competitive analyst examining a business's product and pricing strategy based on their website.

Analyze the website content below and write observations about:

1. **What they offer**: Do they sell products, services, or both?
   List the specific offerings you can identify (courses, consulting, software, physical products, etc.)

2. **Pricing**: What prices can you see on the website?
   What pricing model do they use? (one-time, subscription, retainer, project-based, etc.)
   If pricing isn't shown, note that.

3. **Primary offer**: What's the main thing they want you to buy?
   This is usually the most prominently featured product or service.

4. **Price positioning**: Based on the language, design, and any visible prices,
   where do they position themselves in the market?
   - Budget: Emphasizes affordability, discounts, value
   - Mid-market: Balanced value proposition
   - Premium: Higher prices, emphasizes quality and exclusivity
   - Luxury: Top-tier pricing, aspirational positioning

Write conversationally. Include specific product names and prices if you find them.
Note when information is unclear or not shown on the website.

---
WEBSITE CONTENT:
{scraped_content}"""


def _strip(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_offering(offering: dict) -> dict:
    return {
        **offering,
        "name": _strip(offering.get("name")) or "Unknown offering",
        "description": _strip(offering.get("description")),
        "price": _strip(offering.get("price")) or None,
        "pricing_model": offering.get("pricing_model") or "Unknown",
    }


def post_process(raw: dict) -> dict:
    offerings = [o for o in raw.get("offerings") or [] if isinstance(o, dict)]
    return {
        **raw,
        "offerings": [_clean_offering(o) for o in offerings] or [dict(PLACEHOLDER_OFFERING)],
        "primary_offer": _strip(raw.get("primary_offer")) or "Not clearly defined",
    }


parser = ParserDefinition(
    system_prompt="""You are a precise data extraction assistant.
Read the products analysis below and extract the requested fields.
Be specific about product names and prices when they're mentioned.
If prices aren't shown, use null for the price field.""",
    function_name="extract_products",
    function_description="Extract product and pricing information from the analysis",
    schema={
        "type": "object",
        "properties": {
            "offering_type": {
                "type": "string",
                "enum": OFFERING_TYPES,
                "description": "Whether the business primarily sells products, services, or both",
            },
            "offerings": {
                "type": "array",
                "description": "List of specific products or services offered",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "description": "Name of the product or service"},
                        "description": {"type": "string", "description": "Brief description of what it is"},
                        "price": {
                            "type": ["string", "null"],
                            "description": 'Price if shown (e.g., "$99", "$49/mo"), null if not visible',
                        },
                        "pricing_model": {
                            "type": "string",
                            "enum": PRICING_MODELS,
                            "description": "How the product/service is priced",
                        },
                    },
                    "required": ["name", "description", "pricing_model"],
                },
            },
            "primary_offer": {
                "type": "string",
                "description": "The main product or service they want customers to buy",
            },
            "price_positioning": {
                "type": "string",
                "enum": PRICE_POSITIONS,
                "description": "Where they position themselves in the market price-wise",
            },
        },
        "required": ["offering_type", "offerings", "primary_offer", "price_positioning"],
    },
    post_process=post_process,
)

analyzer = Analyzer(
    id="products",
    name="Products",
    description="What they sell, how it's priced, and where it sits in the market",
    build_prompt=build_prompt,
    parser=parser,
)
