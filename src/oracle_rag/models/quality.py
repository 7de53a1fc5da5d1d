# src/oracle_rag/models/quality.py
"""Six-dimension quality assessment models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

QualityDimension = Literal[
    "relevance",
    "accuracy",
    "completeness",
    "actionability",
    "clarity",
    "authority",
]

BenchmarkCategory = Literal[
    "exceeds",
    "meets",
    "approaches",
    "below",
    "significantly_below",
]


class CriterionScore(BaseModel):
    criterion: str
    score: float
    explanation: str = ""


class BenchmarkComparison(BaseModel):
    benchmark_score: float
    difference: float
    category: BenchmarkCategory


class DimensionScore(BaseModel):
    dimension: QualityDimension
    score: float
    weight: float
    criteria: list[CriterionScore] = Field(default_factory=list)
    benchmark: BenchmarkComparison


class QualityRecommendation(BaseModel):
    recommendation_type: Literal[
        "content_enhancement",
        "source_diversification",
        "framework_integration",
        "implementation_detail",
    ]
    dimension: QualityDimension | None = None
    priority: Literal["high", "medium", "low"]
    recommendation: str
    difficulty: Literal["easy", "moderate", "difficult", "very_difficult"]


class QualityAssessment(BaseModel):
    response_id: str
    assessed_at: datetime
    dimension_scores: list[DimensionScore]
    weighted_dimension_score: float
    business_intelligence_score: float
    framework_integration_score: float
    implementation_readiness: float
    source_credibility: float
    user_experience: float
    overall_score: float
    recommendations: list[QualityRecommendation] = Field(default_factory=list)

    def dimension(self, name: QualityDimension) -> DimensionScore:
        for score in self.dimension_scores:
            if score.dimension == name:
                return score
        raise KeyError(name)
