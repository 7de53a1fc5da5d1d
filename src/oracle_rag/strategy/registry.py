# src/oracle_rag/strategy/registry.py
"""Framework search strategies, keyed by framework."""

from oracle_rag.models.strategy import (
    FilteringCriteria,
    FrameworkSearchStrategy,
    OptimizationParameters,
    QueryExpansion,
    RankingAdjustments,
    SearchApproach,
    SearchContext,
)

GSO_COMPONENT_MASTERY = FrameworkSearchStrategy(
    strategy_id="gso_component_mastery",
    framework="grand_slam_offers",
    search_context=SearchContext(
        primary_intent="learning",
        business_stage="startup",
        implementation_level="deep_dive",
        urgency_level="medium",
        complexity_preference="intermediate",
    ),
    approaches=(
        SearchApproach(
            approach_name="value_equation_focus",
            kind="component_based",
            query_expansion=QueryExpansion(
                framework_terminology=("grand slam offer", "value equation", "irresistible offer"),
                component_keywords={
                    "dream outcome": ("desired result", "transformation"),
                    "perceived likelihood": ("guarantee", "proof", "testimonials"),
                    "time delay": ("speed", "fast results"),
                    "effort and sacrifice": ("done for you", "ease"),
                },
                implementation_terms=("offer creation", "value proposition", "offer enhancement"),
                business_context_terms=("conversion", "sales", "revenue"),
                success_indicators=("higher conversion", "increased sales", "better offers"),
            ),
            filtering_criteria=FilteringCriteria(
                complexity_levels=("intermediate", "advanced"),
                business_phases=("startup", "scaling"),
                content_types=("framework", "implementation_guide", "case_study"),
            ),
            ranking_adjustments=RankingAdjustments(component_boost=1.5),
            weight=0.8,
        ),
        SearchApproach(
            approach_name="offer_stage_application",
            kind="scenario_driven",
            query_expansion=QueryExpansion(
                framework_terminology=("grand slam offer",),
                business_context_terms=("pricing", "guarantee", "bonuses"),
            ),
            ranking_adjustments=RankingAdjustments(framework_boost=1.2),
            weight=0.6,
        ),
    ),
    optimization_parameters=OptimizationParameters(
        semantic_search_weight=0.25,
        framework_component_weight=0.35,
        implementation_context_weight=0.2,
        business_alignment_weight=0.15,
        success_pattern_weight=0.05,
        diversity_factor=0.3,
    ),
    expected_outcomes=("Deep mastery of Grand Slam Offers components",),
)

CORE_FOUR_CHANNEL_OPTIMIZATION = FrameworkSearchStrategy(
    strategy_id="core_four_channel_optimization",
    framework="core_four",
    search_context=SearchContext(
        primary_intent="implementation",
        business_stage="scaling",
        implementation_level="application",
        urgency_level="high",
        complexity_preference="advanced",
    ),
    approaches=(
        SearchApproach(
            approach_name="channel_specific_implementation",
            kind="component_based",
            query_expansion=QueryExpansion(
                framework_terminology=("core four", "lead generation", "customer acquisition"),
                component_keywords={
                    "warm outreach": ("existing contacts", "referrals"),
                    "cold outreach": ("cold email", "cold calling"),
                    "warm content": ("audience", "free content"),
                    "cold content": ("paid ads", "advertising"),
                },
                implementation_terms=(
                    "channel setup",
                    "lead generation system",
                    "acquisition process",
                ),
                business_context_terms=("leads", "customers", "growth", "scaling"),
                success_indicators=("lead volume", "conversion rates", "acquisition cost"),
            ),
            filtering_criteria=FilteringCriteria(
                complexity_levels=("intermediate", "advanced"),
                business_phases=("scaling",),
                content_types=("implementation_guide", "case_study", "optimization_strategy"),
            ),
            ranking_adjustments=RankingAdjustments(implementation_boost=1.4),
            weight=0.9,
        ),
        SearchApproach(
            approach_name="channel_progression",
            kind="progression_aware",
            query_expansion=QueryExpansion(
                framework_terminology=("core four",),
                progression_steps=(
                    "first channel fundamentals",
                    "scaling one channel",
                    "adding channels and lead getters",
                ),
            ),
            weight=0.6,
        ),
    ),
    optimization_parameters=OptimizationParameters(
        semantic_search_weight=0.2,
        framework_component_weight=0.3,
        implementation_context_weight=0.3,
        business_alignment_weight=0.15,
        success_pattern_weight=0.05,
        diversity_factor=0.4,
    ),
    expected_outcomes=("Actionable Core Four implementation for lead generation scaling",),
)

CLOSER_SALES_MASTERY = FrameworkSearchStrategy(
    strategy_id="closer_sales_mastery",
    framework="closer_framework",
    search_context=SearchContext(
        primary_intent="implementation",
        business_stage="early_scaling",
        implementation_level="application",
        complexity_preference="intermediate",
    ),
    approaches=(
        SearchApproach(
            approach_name="closer_steps",
            kind="component_based",
            query_expansion=QueryExpansion(
                framework_terminology=("closer framework", "sales process"),
                component_keywords={
                    "clarify": ("why they are here",),
                    "label": ("problem", "pain"),
                    "overview": ("past experience",),
                    "sell the vacation": ("outcome", "destination"),
                    "explain away concerns": ("objections",),
                    "reinforce": ("decision", "follow up"),
                },
                implementation_terms=("sales script", "sales call"),
                business_context_terms=("close rate", "sales team"),
            ),
            ranking_adjustments=RankingAdjustments(component_boost=1.3, implementation_boost=1.2),
            weight=0.9,
        ),
    ),
    expected_outcomes=("Step-by-step sales conversation structure",),
)

LTV_CAC_UNIT_ECONOMICS = FrameworkSearchStrategy(
    strategy_id="ltv_cac_unit_economics",
    framework="ltv_cac_optimization",
    search_context=SearchContext(
        primary_intent="optimization",
        business_stage="scaling",
        implementation_level="deep_dive",
        complexity_preference="advanced",
    ),
    approaches=(
        SearchApproach(
            approach_name="unit_economics_levers",
            kind="component_based",
            query_expansion=QueryExpansion(
                framework_terminology=("ltv to cac", "unit economics"),
                component_keywords={
                    "lifetime value": ("retention", "upsells", "churn"),
                    "acquisition cost": ("ad spend", "cost per lead"),
                    "payback period": ("cash collected", "front end"),
                },
                business_context_terms=("profit", "margins"),
            ),
            ranking_adjustments=RankingAdjustments(component_boost=1.3),
            weight=0.8,
        ),
        SearchApproach(
            approach_name="growth_integration",
            kind="integration_focused",
            query_expansion=QueryExpansion(
                framework_terminology=("ltv cac",),
                business_context_terms=("scaling", "acquisition channels"),
            ),
            ranking_adjustments=RankingAdjustments(framework_boost=1.2),
            weight=0.5,
        ),
    ),
    expected_outcomes=("Clear levers for improving LTV to CAC ratio",),
)

PRICING_VALUE_CAPTURE = FrameworkSearchStrategy(
    strategy_id="pricing_value_capture",
    framework="pricing_psychology",
    search_context=SearchContext(
        primary_intent="optimization",
        business_stage="startup",
        implementation_level="application",
        complexity_preference="intermediate",
    ),
    approaches=(
        SearchApproach(
            approach_name="pricing_stage_fit",
            kind="scenario_driven",
            query_expansion=QueryExpansion(
                framework_terminology=("pricing", "premium pricing", "price anchoring"),
                business_context_terms=("margins", "positioning"),
            ),
            ranking_adjustments=RankingAdjustments(framework_boost=1.3),
            weight=0.8,
        ),
        SearchApproach(
            approach_name="pricing_offer_integration",
            kind="integration_focused",
            query_expansion=QueryExpansion(
                framework_terminology=("pricing",),
                business_context_terms=("offer value", "guarantee"),
            ),
            weight=0.5,
        ),
    ),
    expected_outcomes=("Price increases customers accept",),
)

STRATEGY_REGISTRY: dict[str, tuple[FrameworkSearchStrategy, ...]] = {
    "grand_slam_offers": (GSO_COMPONENT_MASTERY,),
    "core_four": (CORE_FOUR_CHANNEL_OPTIMIZATION,),
    "closer_framework": (CLOSER_SALES_MASTERY,),
    "ltv_cac_optimization": (LTV_CAC_UNIT_ECONOMICS,),
    "pricing_psychology": (PRICING_VALUE_CAPTURE,),
}
