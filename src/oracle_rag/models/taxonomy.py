# src/oracle_rag/models/taxonomy.py
"""Business taxonomy shared by every pipeline stage.

The vocabularies are closed sets expressed as ``Literal`` aliases so they can
be used directly as pydantic field types. Keyword tables live next to the
vocabulary they describe; they drive the keyword classifier and the adaptive
search heuristics.
"""

from typing import Literal, get_args

UserIntent = Literal[
    "learning",
    "implementation",
    "troubleshooting",
    "benchmarking",
    "validation",
    "optimization",
    "research",
    "planning",
]

BusinessStage = Literal[
    "ideation",
    "startup",
    "early_scaling",
    "scaling",
    "growth",
    "enterprise",
    "exit_prep",
]

# Coarser phase tag carried by corpus passages. "all" marks phase-agnostic content.
BusinessPhase = Literal["startup", "scaling", "optimization", "all"]

Framework = Literal[
    "grand_slam_offers",
    "core_four",
    "value_equation",
    "closer_framework",
    "ltv_cac_optimization",
    "lead_magnets",
    "pricing_psychology",
    "cash_flow_management",
    "team_building",
    "operational_excellence",
    "acquisition_strategy",
]

BusinessScenario = Literal[
    "launching_new_product",
    "scaling_team",
    "improving_conversion",
    "raising_capital",
    "expanding_markets",
    "optimizing_costs",
    "building_systems",
    "crisis_management",
    "competitive_response",
    "exit_preparation",
]

ComplexityLevel = Literal["beginner", "intermediate", "advanced"]

UrgencyLevel = Literal["low", "medium", "high", "critical"]

AuthorityLevel = Literal[
    "primary_hormozi",
    "hormozi_team",
    "verified_case_study",
    "expert_interpretation",
    "community_validated",
    "unverified",
]

VerificationStatus = Literal["verified", "pending", "conflicting", "outdated", "unverified"]

SourceType = Literal[
    "book",
    "video",
    "podcast",
    "interview",
    "case_study",
    "framework",
    "social_media",
    "webinar",
    "course",
]

USER_INTENTS: tuple[str, ...] = get_args(UserIntent)
BUSINESS_STAGES: tuple[str, ...] = get_args(BusinessStage)
FRAMEWORKS: tuple[str, ...] = get_args(Framework)
BUSINESS_SCENARIOS: tuple[str, ...] = get_args(BusinessScenario)
COMPLEXITY_LEVELS: tuple[str, ...] = get_args(ComplexityLevel)

INTENT_PATTERNS: dict[str, list[str]] = {
    "learning": [
        "what is",
        "explain",
        "understand",
        "definition",
        "concept",
        "how does",
        "why is",
        "meaning of",
        "learn about",
    ],
    "implementation": [
        "how to",
        "how do i",
        "implement",
        "execute",
        "apply",
        "deploy",
        "set up",
        "create",
        "build",
        "start",
    ],
    "troubleshooting": [
        "fix",
        "problem",
        "issue",
        "not working",
        "failing",
        "broken",
        "error",
        "wrong",
        "stuck",
    ],
    "benchmarking": [
        "benchmark",
        "average",
        "typical",
        "normal",
        "standard",
        "compare",
        "industry average",
        "what should",
    ],
    "validation": [
        "correct",
        "right way",
        "validate",
        "confirm",
        "verify",
        "am i doing",
        "is this right",
        "should i",
    ],
    "optimization": [
        "improve",
        "optimize",
        "better",
        "increase",
        "boost",
        "enhance",
        "maximize",
        "scale up",
    ],
    "research": [
        "examples",
        "case studies",
        "data",
        "research",
        "studies",
        "evidence",
        "proof",
        "results",
    ],
    "planning": [
        "plan",
        "strategy",
        "roadmap",
        "timeline",
        "schedule",
        "next steps",
        "approach",
        "preparation",
    ],
}

FRAMEWORK_PATTERNS: dict[str, list[str]] = {
    "grand_slam_offers": ["grand slam", "offers", "irresistible"],
    "value_equation": ["value equation", "dream outcome", "perceived likelihood"],
    "core_four": ["core four", "lead generation", "outreach", "paid ads"],
    "closer_framework": ["closer", "sales process", "closing"],
    "ltv_cac_optimization": ["ltv", "cac", "unit economics", "customer lifetime"],
    "pricing_psychology": ["pricing", "anchoring", "price increase"],
    "lead_magnets": ["lead magnet", "free offer", "opt-in"],
    "cash_flow_management": ["cash flow", "runway", "cash"],
    "team_building": ["hiring", "team building", "delegation"],
    "operational_excellence": ["systems", "processes", "sops", "operations"],
    "acquisition_strategy": ["acquisition", "acquire", "buy a business"],
}

STAGE_KEYWORDS: dict[str, list[str]] = {
    "startup": ["startup", "new business", "just starting", "beginning", "first"],
    "early_scaling": ["growing", "expanding", "more customers"],
    "scaling": ["scale", "scaling", "team building", "systems"],
    "growth": ["large scale", "multiple locations", "acquisition"],
    "enterprise": ["corporation", "enterprise", "fortune", "multinational"],
    "exit_prep": ["exit", "sell my business", "valuation"],
}

SCENARIO_KEYWORDS: dict[str, list[str]] = {
    "launching_new_product": ["product launch", "go-to-market", "launch", "positioning"],
    "scaling_team": ["hiring", "team building", "management", "culture", "delegation"],
    "improving_conversion": ["conversion", "sales", "funnel", "closing"],
    "raising_capital": ["funding", "investors", "pitch", "raise"],
    "expanding_markets": ["expansion", "new market", "replication"],
    "optimizing_costs": ["cost reduction", "efficiency", "margins", "profitability"],
    "building_systems": ["systems", "processes", "automation", "documentation"],
    "crisis_management": ["crisis", "emergency", "turnaround", "survival"],
    "competitive_response": ["competitor", "competition", "undercut"],
    "exit_preparation": ["exit", "sell the business", "acquirer"],
}

INDUSTRY_KEYWORDS: dict[str, list[str]] = {
    "fitness_gyms": ["gym", "fitness", "workout", "wellness"],
    "software_saas": ["software", "saas", "app", "platform"],
    "ecommerce": ["ecommerce", "online store", "shopify", "retail"],
    "professional_services": ["consulting", "agency", "coaching", "advisory"],
    "real_estate": ["real estate", "property", "rental"],
    "restaurants": ["restaurant", "dining", "menu"],
    "healthcare": ["healthcare", "medical", "clinic"],
    "education": ["education", "school", "course"],
}

FUNCTIONAL_AREA_KEYWORDS: dict[str, list[str]] = {
    "marketing": ["marketing", "advertising", "brand", "content", "seo"],
    "sales": ["sales", "selling", "closing", "conversion", "leads", "prospects"],
    "operations": ["operations", "process", "systems", "efficiency", "workflow"],
    "finance": ["finance", "revenue", "profit", "cost", "budget", "metrics"],
    "leadership": ["leadership", "team", "management", "culture", "hiring"],
    "strategy": ["strategy", "planning", "competitive", "positioning"],
    "product": ["product", "features", "user experience"],
    "customer_success": ["retention", "customer success", "churn", "satisfaction"],
}

URGENCY_KEYWORDS: dict[str, list[str]] = {
    "critical": ["crisis", "emergency", "losing money", "urgent help"],
    "high": ["urgent", "asap", "immediately", "quickly", "failing"],
    "medium": ["soon", "this quarter", "next quarter"],
}

BUSINESS_METRIC_TERMS: list[str] = [
    "ltv",
    "cac",
    "roi",
    "roas",
    "lifetime value",
    "customer acquisition cost",
    "conversion rate",
    "revenue",
    "profit",
    "margin",
    "churn",
    "retention",
    "aov",
]

# Signals that a query asks for concrete execution steps.
IMPLEMENTATION_SIGNALS: tuple[str, ...] = ("implement", "how to", "execute")

# Vocabulary used to estimate how business-oriented a piece of text is.
BUSINESS_VOCABULARY: tuple[str, ...] = (
    "business",
    "strategy",
    "growth",
    "marketing",
    "sales",
    "revenue",
)

FRAMEWORK_DISPLAY_NAMES: dict[str, str] = {
    "general": "General Business Principles",
    "grand_slam_offers": "Grand Slam Offers",
    "core_four": "Core Four Lead Generation",
    "value_equation": "Value Equation",
    "closer_framework": "CLOSER Sales Framework",
    "ltv_cac_optimization": "LTV/CAC Optimization",
    "lead_magnets": "Lead Magnets",
    "pricing_psychology": "Pricing Psychology",
    "cash_flow_management": "Cash Flow Management",
    "team_building": "Team Building",
    "operational_excellence": "Operational Excellence",
    "acquisition_strategy": "Acquisition Strategy",
}


def framework_phrase(framework: str) -> str:
    """Return the framework identifier as it would appear in prose."""
    return framework.replace("_", " ").lower()


def framework_display_name(framework: str) -> str:
    return FRAMEWORK_DISPLAY_NAMES.get(framework, framework_phrase(framework).title())


# Lifecycle stage -> the coarser phase tag carried by passages
STAGE_TO_PHASE: dict[str, str] = {
    "ideation": "startup",
    "startup": "startup",
    "early_scaling": "scaling",
    "scaling": "scaling",
    "growth": "scaling",
    "enterprise": "optimization",
    "exit_prep": "optimization",
}


def phase_for_stage(stage: str) -> str:
    """Map a lifecycle stage (or a phase tag) to a passage phase tag."""
    return STAGE_TO_PHASE.get(stage, stage)
