"""Golden Circle (Why / How / What) document template."""

from datetime import date

from app.analyzers.base import ParserDefinition
from app.documents.base import DocTemplate, DocTemplateConfig

config = DocTemplateConfig(
    id="golden-circle",
    name="Golden Circle",
    description="Simon Sinek's Why, How, What framework applied to the brand",
    short_description="Find the purpose behind the brand",
    category="strategy",
    status="available",
    required_analyzers=("basics", "customer"),
    required_fields={
        "basics": ("business_description", "business_model"),
        "customer": ("primary_problem", "buying_motivation"),
    },
)


def _lines(*items: str | None) -> str:
    return "\n".join(item for item in items if item)


def build_prompt(brand_data: dict) -> str:
    brand_name = brand_data.get("brand_name") or "Unknown Brand"
    basics = brand_data.get("basics")
    customer = brand_data.get("customer")
    products = brand_data.get("products")

    sections = []
    if basics:
        sections.append(_lines(
            "BUSINESS OVERVIEW:",
            f"- Name: {basics.get('business_name')}",
            f"- Industry: {basics.get('industry')}",
            f"- Description: {basics.get('business_description')}",
            f"- Business Model: {basics.get('business_model')}",
            f"- Founded: {basics['founded_year']}" if basics.get("founded_year") else None,
            f"- Founder: {basics['founder_name']}" if basics.get("founder_name") else None,
        ))
    if customer:
        secondary = customer.get("secondary_problems") or []
        sections.append(_lines(
            "CUSTOMER INSIGHTS:",
            f"- Primary Problem: {customer.get('primary_problem')}",
            f"- Buying Motivation: {customer.get('buying_motivation')}",
            f"- Customer Sophistication: {customer.get('customer_sophistication')}",
            f"- Subcultures: {', '.join(customer.get('subcultures') or [])}",
            f"- Secondary Problems: {'; '.join(secondary)}" if secondary else None,
        ))
    if products:
        offerings = "\n".join(
            f"  - {o.get('name')}: {o.get('description')}"
            for o in (products.get("offerings") or [])[:5]
        )
        sections.append(_lines(
            "OFFERINGS:",
            f"- Type: {products.get('offering_type')}",
            f"- Primary Offer: {products.get('primary_offer')}",
            f"- Price Positioning: {products.get('price_positioning')}",
            "- Key Offerings:",
            offerings,
        ))

    brand_context = "\n\n".join(sections)

    return f"""You are a senior brand strategist applying Simon Sinek's Golden Circle framework.

Review the following brand intelligence about "{brand_name}" and write a compelling Golden Circle analysis.

FRAMEWORK REMINDER:
- WHY: The purpose, cause, or belief. Why does this company exist beyond making money?
- HOW: The differentiating value proposition. How do they bring their why to life?
- WHAT: The products or services. What tangible things do they offer?

{brand_context}

---

INSTRUCTIONS:

Write a thoughtful Golden Circle analysis for this brand. For each section:

1. **WHY**: Look at the customer's primary problem and buying motivation to infer the deeper purpose.
What change does this brand believe in?

2. **HOW**: Look at their business model and approach. What makes their method distinctive?

3. **WHAT**: Summarize their offerings clearly. What can customers actually buy or engage with?

Then write a brief summary paragraph that ties all three together into a cohesive brand story.

Write conversationally, as if explaining this brand to a colleague. Be insightful and specific;
avoid generic statements that could apply to any company. Draw directly from the data provided.

Don't use bullet points or headers in your response. Write naturally, clearly separating the
Why, How, What, and Summary sections."""


def _section(raw: dict, key: str, default_headline: str) -> dict:
    section = raw.get(key) if isinstance(raw.get(key), dict) else {}
    headline = section.get("headline")
    explanation = section.get("explanation")
    return {
        "headline": (headline.strip() if isinstance(headline, str) else "") or default_headline,
        "explanation": explanation.strip() if isinstance(explanation, str) else "",
    }


def post_process(raw: dict) -> dict:
    summary = raw.get("summary")
    return {
        "why": _section(raw, "why", "Purpose to be defined"),
        "how": _section(raw, "how", "Approach to be defined"),
        "what": _section(raw, "what", "Offerings to be defined"),
        "summary": summary.strip() if isinstance(summary, str) else "",
    }


def _section_schema(description: str, headline: str, explanation: str) -> dict:
    return {
        "type": "object",
        "description": description,
        "properties": {
            "headline": {"type": "string", "description": headline},
            "explanation": {"type": "string", "description": explanation},
        },
        "required": ["headline", "explanation"],
    }


parser = ParserDefinition(
    system_prompt="""You are a precise content extraction assistant.
Read the Golden Circle analysis below and extract each section into the function call.
For each section (why, how, what), create:
- headline: A single, punchy sentence capturing the core idea
- explanation: 2-3 sentences expanding on the headline with supporting detail

The summary should be one cohesive paragraph (3-4 sentences) that ties why, how, and what together.

Preserve the writer's voice and specific insights. Don't genericize the content.""",
    function_name="extract_golden_circle",
    function_description="Extract the Why, How, What, and Summary sections from a Golden Circle analysis",
    schema={
        "type": "object",
        "properties": {
            "why": _section_schema(
                "The brand's purpose, cause, or belief (Why they exist)",
                "One sentence capturing the core purpose",
                "2-3 sentences expanding on the purpose with specifics",
            ),
            "how": _section_schema(
                "The brand's differentiating approach (How they deliver value)",
                "One sentence capturing their unique approach",
                "2-3 sentences explaining their method or process",
            ),
            "what": _section_schema(
                "The brand's products or services (What they offer)",
                "One sentence summarizing their offerings",
                "2-3 sentences detailing their products/services",
            ),
            "summary": {
                "type": "string",
                "description": "One paragraph (3-4 sentences) tying why, how, and what together",
            },
        },
        "required": ["why", "how", "what", "summary"],
    },
    post_process=post_process,
)


def format_long_date(value: date) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def render_markdown(content: dict, brand_name: str, generated_on: date | None = None) -> str:
    generated_on = generated_on or date.today()
    lines = [f"# Golden Circle: {brand_name}", ""]
    for key, title in (("why", "Why"), ("how", "How"), ("what", "What")):
        section = content[key]
        lines += [f"## {title}", f"**{section['headline']}**", "", section["explanation"], ""]
    lines += [
        "---",
        "",
        f"*{content['summary']}*",
        "",
        "---",
        "",
        f"*Generated with The Clever Kit on {format_long_date(generated_on)}*",
    ]
    return "\n".join(lines)


def generate_title(brand_data: dict) -> str:
    return f"Golden Circle: {brand_data.get('brand_name') or 'Unknown Brand'}"


template = DocTemplate(
    config=config,
    build_prompt=build_prompt,
    parser=parser,
    render_markdown=render_markdown,
    generate_title=generate_title,
)
