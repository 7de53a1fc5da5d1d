# tests/test_classifier.py
"""Tests for the keyword query classifier."""

import pytest

from oracle_rag.classifier import KeywordQueryClassifier
from oracle_rag.exceptions import MalformedRequestError


@pytest.fixture
def classifier():
    return KeywordQueryClassifier()


class TestKeywordQueryClassifier:
    def test_implementation_query(self, classifier):
        result = classifier.classify("How do I implement a grand slam offer for my startup?")
        assert result.primary_intent == "implementation"
        assert result.framework_names == ["grand_slam_offers"]
        assert result.frameworks[0].relevance_score == 0.75
        assert result.primary_stage == "startup"
        assert result.is_implementation_focused

    def test_more_pattern_hits_raise_relevance(self, classifier):
        result = classifier.classify("Make my grand slam offers irresistible")
        assert result.frameworks[0].relevance_score == 1.0

    def test_frameworks_sorted_by_relevance(self, classifier):
        result = classifier.classify("Fix my ltv and cac while using the closer script")
        assert result.framework_names[0] == "ltv_cac_optimization"
        assert "closer_framework" in result.framework_names
        assert result.primary_intent == "troubleshooting"

    def test_defaults_without_signals(self, classifier):
        result = classifier.classify("hello there")
        assert result.primary_intent == "learning"
        assert result.confidence == 0.4
        assert result.frameworks == ()
        assert result.primary_stage is None
        assert result.urgency_level == "low"
        assert result.complexity_preference is None

    def test_urgency_levels(self, classifier):
        assert classifier.classify("we are in a crisis").urgency_level == "critical"
        assert classifier.classify("need leads asap").urgency_level == "high"
        assert classifier.classify("launch this quarter").urgency_level == "medium"

    def test_complexity_preference(self, classifier):
        assert classifier.classify("pricing basics").complexity_preference == "beginner"
        assert classifier.classify("advanced pricing").complexity_preference == "advanced"

    def test_context_hints(self, classifier):
        result = classifier.classify("Improve conversion for my saas sales team")
        assert "improving_conversion" in result.scenarios
        assert "software_saas" in result.industry_hints
        assert "sales" in result.functional_areas
        assert result.primary_intent == "optimization"

    def test_query_text_is_stripped(self, classifier):
        assert classifier.classify("  what is cac  ").original_query == "what is cac"

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_query_rejected(self, classifier, text):
        with pytest.raises(MalformedRequestError):
            classifier.classify(text)
