"""Customer analyzer: who the business sells to and why they buy."""

from app.analyzers.base import Analyzer, ParserDefinition

SOPHISTICATION_LEVELS = ["Beginner", "Informed", "Expert"]
BUYING_MOTIVATIONS = ["Pain relief", "Aspiration", "Necessity", "Curiosity", "Status"]


def build_prompt(scraped_content: str, prior_results: dict) -> str:
    return f"""You are a customer research specialist analyzing a business's website to understand their target audience.

Based on the website content below, write natural observations about:

1. **Who they're talking to**: What type of person or business are they trying to reach?
   What subcultures, communities, or identities might their customers belong to?
   (e.g., "startup founders", "busy parents", "fitness enthusiasts", "SaaS companies")

2. **The core problem**: What's the main problem or pain point they're solving for customers?

3. **Secondary problems**: What other related problems might their customer be dealing with?

4. **Customer sophistication**: How knowledgeable does their ideal customer seem to be?
   Beginners who need hand-holding, informed buyers who know what they want,
   or experts who need advanced solutions?

5. **Why they buy**: What's driving the purchase decision?
   - Pain relief (solving an urgent problem)
   - Aspiration (achieving a goal or dream)
   - Necessity (required for work/life)
   - Curiosity (exploring something new)
   - Status (appearing successful or sophisticated)

Write conversationally, like you're explaining your observations to a colleague.
Read between the lines: what the website says and how it says it reveals a lot
about who they're targeting.

---
WEBSITE CONTENT:
{scraped_content}"""


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def post_process(raw: dict) -> dict:
    primary = raw.get("primary_problem")
    return {
        **raw,
        "subcultures": _string_list(raw.get("subcultures")) or ["General consumers"],
        "secondary_problems": _string_list(raw.get("secondary_problems")) or ["Other related challenges"],
        "primary_problem": (primary.strip() if isinstance(primary, str) else "") or "Not clearly defined",
    }


parser = ParserDefinition(
    system_prompt="""You are a precise data extraction assistant.
Read the customer analysis below and extract the requested fields.
Be specific and concrete with your extractions.
For arrays, include 2-5 relevant items.""",
    function_name="extract_customer_profile",
    function_description="Extract customer profile information from the analysis",
    schema={
        "type": "object",
        "properties": {
            "subcultures": {
                "type": "array",
                "description": "List of 2-5 subcultures, communities, or identities the target customers belong to",
                "items": {"type": "string"},
            },
            "primary_problem": {
                "type": "string",
                "description": "The main problem or pain point the business solves for customers (1-2 sentences)",
            },
            "secondary_problems": {
                "type": "array",
                "description": "List of 2-4 related secondary problems customers face",
                "items": {"type": "string"},
            },
            "customer_sophistication": {
                "type": "string",
                "enum": SOPHISTICATION_LEVELS,
                "description": "How knowledgeable the target customer is about the problem/solution space",
            },
            "buying_motivation": {
                "type": "string",
                "enum": BUYING_MOTIVATIONS,
                "description": "The primary motivation driving purchase decisions",
            },
        },
        "required": [
            "subcultures",
            "primary_problem",
            "secondary_problems",
            "customer_sophistication",
            "buying_motivation",
        ],
    },
    post_process=post_process,
)

analyzer = Analyzer(
    id="customer",
    name="Customer",
    description="Target audience, their problems, and why they buy",
    build_prompt=build_prompt,
    parser=parser,
)
