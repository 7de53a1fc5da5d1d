# tests/assembly/test_conflicts.py
"""Tests for source preparation and conflict resolution."""

import pytest

from oracle_rag.assembly import build_context, prepare_sources, resolve_conflicts
from oracle_rag.assembly.sources import first_sentence, normalize_framework


@pytest.fixture
def prepare(make_classification):
    def _prepare(*chunks):
        return prepare_sources(build_context(make_classification(), list(chunks)))

    return _prepare


class TestPrepareSources:
    def test_ordered_by_integration_potential(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("low", final_relevance_score=0.2, authority_score=0.3),
            make_enhanced("high", final_relevance_score=0.95, authority_score=0.95),
        )
        assert [p.source_id for p in prepared] == ["high", "low"]

    def test_requested_frameworks_lead(self, prepare, make_enhanced):
        (source,) = prepare(make_enhanced(framework_tags=["core_four", "grand_slam_offers"]))
        assert source.framework_mappings == ["grand_slam_offers", "core_four"]
        assert source.primary_framework == "grand_slam_offers"

    def test_untagged_source_is_general(self, prepare, make_enhanced):
        (source,) = prepare(make_enhanced(framework_tags=[]))
        assert source.primary_framework == "general"

    def test_signals_bounded(self, prepare, make_enhanced):
        (source,) = prepare(make_enhanced(implementation_complexity="advanced"))
        for value in (
            source.immediacy,
            source.strategic_value,
            source.long_term_value,
            source.business_alignment,
        ):
            assert 0.0 <= value <= 1.0

    def test_normalize_framework(self):
        assert normalize_framework("framework:grand_slam_offers") == "grand_slam_offers"
        assert normalize_framework("Core Four") == "core_four"
        assert normalize_framework("closer-framework") == "closer_framework"
        assert normalize_framework("astrology") is None

    def test_first_sentence_truncates(self):
        assert first_sentence("One. Two.") == "One."
        assert first_sentence("x" * 300, limit=20) == "x" * 17 + "..."
        assert first_sentence("") == ""


class TestResolveConflicts:
    def test_prefer_authority_drops_weaker_source(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("strong", metadata={"stance": "raise"}, authority_score=0.9),
            make_enhanced("weak", metadata={"stance": "lower"}, authority_score=0.4),
        )
        resolution = resolve_conflicts(prepared, "prefer_authority")

        assert [s.source_id for s in resolution.sources] == ["strong"]
        assert resolution.conflicting_ids == ["weak"]
        assert resolution.warnings == [
            "Conflicting sources on Grand Slam Offers: kept 'Passage strong' over "
            "'Passage weak' (higher authority)"
        ]
        assert resolution.has_conflicts

    def test_flag_both_keeps_both(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("a", metadata={"stance": "raise"}),
            make_enhanced("b", metadata={"stance": "lower"}),
        )
        resolution = resolve_conflicts(prepared, "flag_both")

        assert {s.source_id for s in resolution.sources} == {"a", "b"}
        assert resolution.conflicting_ids == ["a", "b"]
        assert len(resolution.warnings) == 1
        assert resolution.warnings[0].startswith("Contradiction on Grand Slam Offers:")
        assert resolution.warnings[0].endswith("both retained")

    def test_conflicting_verification_status(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("a"),
            make_enhanced("b", verification_status="conflicting", authority_score=0.2),
        )
        resolution = resolve_conflicts(prepared, "prefer_authority")
        assert [s.source_id for s in resolution.sources] == ["a"]
        assert len(resolution.warnings) == 1

    def test_matching_stances_do_not_conflict(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("a", metadata={"stance": "raise"}),
            make_enhanced("b", metadata={"stance": "raise"}),
        )
        resolution = resolve_conflicts(prepared, "prefer_authority")
        assert not resolution.has_conflicts
        assert len(resolution.sources) == 2

    def test_different_frameworks_never_conflict(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("a", metadata={"stance": "raise"}),
            make_enhanced("b", metadata={"stance": "lower"}, framework_tags=["core_four"]),
        )
        resolution = resolve_conflicts(prepared, "prefer_authority")
        assert resolution.warnings == []
        assert resolution.cross_references == []

    def test_agreeing_sources_support_each_other(self, prepare, make_enhanced):
        prepared = prepare(make_enhanced("a"), make_enhanced("b"))
        resolution = resolve_conflicts(prepared, "prefer_authority")

        (ref,) = resolution.cross_references
        assert ref.relationship == "supporting"
        assert ref.shared_concepts == ["grand_slam_offers"]

    def test_secondary_framework_overlap_is_complementary(self, prepare, make_enhanced):
        prepared = prepare(
            make_enhanced("a", framework_tags=["grand_slam_offers", "value_equation"]),
            make_enhanced("b", framework_tags=["value_equation"]),
        )
        resolution = resolve_conflicts(prepared, "prefer_authority")
        (ref,) = resolution.cross_references
        assert ref.relationship == "complementary"
        assert ref.shared_concepts == ["value_equation"]

    def test_no_sources(self):
        resolution = resolve_conflicts([], "flag_both")
        assert resolution.sources == []
        assert not resolution.has_conflicts
