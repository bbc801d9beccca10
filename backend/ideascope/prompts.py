"""
IdeaScope Backend — LLM Prompt Templates

All synthesis prompts are defined here. The competitor Q&A system prompt lives
next to its adapter in providers.py; the Q&A user question is built in queries.py.
"""

from ideascope.models import Competitor


# -----------------------------------------------------------------------------
# Gap / positioning synthesis
# -----------------------------------------------------------------------------

SYNTHESIS_SYSTEM_PROMPT = (
    "You are an API that returns only valid JSON. No markdown, no code fences, no text "
    "before or after the JSON object. Return exactly the JSON object requested by the user, "
    "in exactly the format specified."
)

SYNTHESIS_PROMPT = """
# Role
You are a market analyst helping a founder validate a business idea.

# Business idea
"{idea}"

# Direct competitors in this market
{competitor_lines}

# Task
Based on these competitors and the business idea:
1. Identify 3 gaps in the market that these competitors do not address.
2. Recommend 3 specific features or positioning elements that would differentiate this idea.

# Output format
Respond with a single JSON object with this exact structure:
{{
  "marketGaps": [
    "First gap — a specific opportunity not addressed by the competitors",
    "Second gap — another specific opportunity",
    "Third gap — another specific opportunity"
  ],
  "positioningSuggestions": [
    "First positioning suggestion with a concrete feature or approach",
    "Second positioning suggestion with a concrete feature or approach",
    "Third positioning suggestion with a concrete feature or approach"
  ]
}}

Keep each entry actionable and under 50 words.
Do not include any text, markdown, or explanation outside the JSON object.
"""

NO_COMPETITORS_LINE = "- (no direct competitors were found)"


def format_competitor_lines(competitors: list[Competitor]) -> str:
    """One '- name: description (Website: url)' line per competitor."""
    if not competitors:
        return NO_COMPETITORS_LINE
    lines = []
    for c in competitors:
        line = f"- {c.name}: {c.description or 'No description available'}"
        if c.website and c.website != "#":
            line += f" (Website: {c.website})"
        lines.append(line)
    return "\n".join(lines)


def build_synthesis_prompt(idea: str, competitors: list[Competitor]) -> list[dict]:
    """
    Build the system + user messages for gap/positioning synthesis.

    Args:
        idea: The idea text, embedded verbatim (quotes escaped).
        competitors: Real or fallback competitors.

    Returns:
        [{"role": "system", ...}, {"role": "user", ...}]
    """
    user_content = SYNTHESIS_PROMPT.format(
        idea=idea.replace('"', '\\"'),
        competitor_lines=format_competitor_lines(competitors),
    ).strip()
    return [
        {"role": "system", "content": SYNTHESIS_SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]
