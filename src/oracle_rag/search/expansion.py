# src/oracle_rag/search/expansion.py
"""Query expansion with business terminology and framework synonyms."""

from oracle_rag.models.taxonomy import FRAMEWORK_PATTERNS

BUSINESS_TERM_EXPANSIONS: dict[str, tuple[str, ...]] = {
    "ltv": ("lifetime value", "customer lifetime value"),
    "cac": ("customer acquisition cost", "acquisition cost"),
    "roi": ("return on investment",),
    "roas": ("return on ad spend",),
    "aov": ("average order value",),
    "churn": ("retention", "cancellations"),
    "leads": ("lead generation", "prospects"),
    "offer": ("value proposition",),
    "pricing": ("price", "premium pricing"),
    "conversion": ("close rate", "sales conversion"),
    "margin": ("gross margin", "profitability"),
}

FRAMEWORK_SYNONYMS: dict[str, tuple[str, ...]] = {
    "grand_slam_offers": ("irresistible offer", "value stacking", "guarantee"),
    "value_equation": (
        "dream outcome",
        "perceived likelihood",
        "time delay",
        "effort and sacrifice",
    ),
    "core_four": ("warm outreach", "cold outreach", "content", "paid ads"),
    "closer_framework": ("clarify", "label", "overview", "sell", "explain", "reinforce"),
    "ltv_cac_optimization": ("unit economics", "payback period"),
    "pricing_psychology": ("price anchoring", "premium pricing"),
    "lead_magnets": ("free value", "opt-in offer"),
    "cash_flow_management": ("cash conversion", "runway"),
    "team_building": ("hiring", "delegation", "management"),
    "operational_excellence": ("systems", "standard operating procedures"),
    "acquisition_strategy": ("buying businesses", "deal structure"),
}


def business_term_expansions(query: str) -> list[str]:
    query_lower = query.lower()
    words = set(query_lower.replace("?", " ").replace(",", " ").split())
    expansions: list[str] = []
    for term, synonyms in BUSINESS_TERM_EXPANSIONS.items():
        if term in words:
            expansions.extend(s for s in synonyms if s not in query_lower)
    return expansions


def framework_synonyms(query: str) -> list[str]:
    query_lower = query.lower()
    synonyms: list[str] = []
    for framework, patterns in FRAMEWORK_PATTERNS.items():
        if any(pattern in query_lower for pattern in patterns):
            synonyms.extend(
                s for s in FRAMEWORK_SYNONYMS.get(framework, ()) if s not in query_lower
            )
    return synonyms


def expand_query(query: str) -> str:
    """Append business terminology and framework synonyms to a query.

    Terms already present in the query are not repeated. Returns the query
    unchanged when nothing applies.
    """
    extra: list[str] = []
    for term in business_term_expansions(query) + framework_synonyms(query):
        if term not in extra:
            extra.append(term)
    if not extra:
        return query
    return f"{query} {' '.join(extra)}"
