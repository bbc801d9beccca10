"""
IdeaScope Backend — Keyword Extraction

Deterministic keyword + industry extraction from free-text idea descriptions.
No LLM calls, no randomness, no network: same input → same output.
"""

import re

# Stop-words dropped before ranking. Tokens of length ≤ 3 are dropped anyway,
# so only longer function words need to be listed.
STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "that", "with", "for", "this", "from", "these", "those",
    "they", "them", "their", "there", "then", "than", "what", "when", "where",
    "which", "while", "who", "whom", "whose", "will", "would", "should",
    "could", "have", "been", "were", "into", "onto", "about", "over", "under",
    "after", "before", "between", "through", "during", "without", "against",
    "among", "around", "like", "just", "only", "very", "also", "some", "such",
    "each", "every", "more", "most", "other", "your", "yours", "ours",
    "based", "using", "want", "wants", "help", "helps", "make", "makes",
})

# Domain nouns that outrank everything else when present in the idea.
BUSINESS_TERMS: frozenset[str] = frozenset({
    "tracking", "validating", "business", "ideas", "apis", "assistant",
    "automation", "platform", "analytics", "management", "fitness", "workout",
    "workouts", "exercise", "form", "feedback", "training", "posture",
    "marketplace", "subscription", "booking", "scheduling", "delivery",
    "payments", "budgeting", "invoicing", "learning", "tutoring", "recipes",
    "meal", "travel", "rental", "telehealth", "therapy", "wellness",
    "coaching", "hiring", "recruiting", "inventory", "ecommerce", "crm",
})

MAX_KEYWORDS = 5
DEFAULT_KEYWORDS = 3

_EDGE_PUNCTUATION = "\"'`.,;:!?()[]{}<>*_#"

# Ordered: first matching row wins.
INDUSTRY_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("fitness and wellness", re.compile(r"fitness|gym|workout|exercise|health|wellness|yoga|posture")),
    ("food service", re.compile(r"food|restaurant|delivery|meal|recipe|cook|chef|dining")),
    ("education", re.compile(r"learn|education|course|teach|student|school|university|knowledge|skill")),
    ("financial technology", re.compile(r"financ|money|banking|invest|stock|crypto|payment|wallet|loan|credit")),
    ("travel and hospitality", re.compile(r"travel|hotel|flight|booking|vacation|trip|tourism|adventure")),
    ("real estate", re.compile(r"real estate|property|apartment|\brent|lease|house")),
    ("healthcare", re.compile(r"heal|doctor|medical|patient|hospital|clinic|therapy|diagnos")),
    ("retail and e-commerce", re.compile(r"retail|shop|store|ecommerce|e-commerce|customer|purchase")),
    ("entertainment and media", re.compile(r"game|gaming|entertain|social|media|content|video|stream")),
    ("technology", re.compile(r"\bai\b|machine learning|tech|software|\bapp\b|platform|data|algorithm|automat")),
]

DEFAULT_INDUSTRY = "business"


def _tokenize(text: str) -> list[str]:
    tokens = []
    for raw in text.lower().split():
        token = raw.strip(_EDGE_PUNCTUATION)
        if token:
            tokens.append(token)
    return tokens


def extract_keywords(idea: str, limit: int = DEFAULT_KEYWORDS) -> list[str]:
    """Ranked salient terms from an idea description.

    Tokens longer than 3 characters that are not stop-words survive. When any
    survivor is a business term, only business terms are kept (in original
    order); otherwise all survivors are kept. Duplicates keep their first
    occurrence. Truncated to `limit` (clamped to 1..MAX_KEYWORDS).

    Returns an empty list for empty or all-stop-word input; callers substitute
    generic wording in that case.
    """
    limit = max(1, min(limit, MAX_KEYWORDS))
    survivors: list[str] = []
    for token in _tokenize(idea or ""):
        if len(token) <= 3 or token in STOP_WORDS or token in survivors:
            continue
        survivors.append(token)

    prioritized = [t for t in survivors if t in BUSINESS_TERMS]
    ranked = prioritized if prioritized else survivors
    return ranked[:limit]


def detect_industry(idea: str) -> str:
    """Map an idea to a coarse industry label via the ordered pattern table."""
    idea_lower = (idea or "").lower()
    for label, pattern in INDUSTRY_PATTERNS:
        if pattern.search(idea_lower):
            return label
    return DEFAULT_INDUSTRY
