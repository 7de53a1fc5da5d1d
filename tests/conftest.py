"""Shared pytest fixtures."""

import contextlib
import hashlib
import tempfile

import pytest

from oracle_rag.embedder import Embedder
from oracle_rag.models import (
    AssembledResponse,
    CandidateResponse,
    EnhancedSearchResult,
    FrameworkRelevance,
    QueryClassification,
    SearchResult,
    StageSignal,
)
from oracle_rag.settings import Settings
from oracle_rag.stores import InMemoryPassageStore
from oracle_rag.stores.base import query_terms

EMBEDDING_DIMS = 64


@pytest.fixture
def temp_dir():
    """Create a temporary directory for stores."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir

        # Cleanup ChromaDB's shared system cache to release file handles
        # This is necessary to avoid "too many open files" errors in test suites
        # See: https://github.com/chroma-core/chroma/issues/5868
        try:
            from chromadb.api.shared_system_client import SharedSystemClient

            # Guard against ChromaDB internal API changes
            if hasattr(SharedSystemClient, "_identifier_to_system"):
                identifiers_to_remove = [
                    identifier
                    for identifier in list(SharedSystemClient._identifier_to_system.keys())
                    if tmpdir in str(identifier)
                ]
                for identifier in identifiers_to_remove:
                    if identifier in SharedSystemClient._identifier_to_system:
                        system = SharedSystemClient._identifier_to_system.pop(identifier)
                        with contextlib.suppress(Exception):
                            system.stop()
        except Exception:
            pass  # Best effort cleanup - ChromaDB internals may change


class KeywordEmbedder(Embedder):
    """Deterministic hashed bag-of-words embedder.

    Texts that share keywords get similar vectors, which is enough to make
    retrieval order meaningful without a model. The last dimension is a
    constant bias so no vector is ever zero.
    """

    def embed_text(self, text: str) -> list[float]:
        vector = [0.0] * (EMBEDDING_DIMS + 1)
        for term in query_terms(text):
            bucket = int(hashlib.md5(term.encode("utf-8")).hexdigest(), 16) % EMBEDDING_DIMS
            vector[bucket] += 1.0
        vector[EMBEDDING_DIMS] = 0.5
        return vector

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_text(t) for t in texts]


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder()


@pytest.fixture
def sample_passages():
    """A small corpus spanning several frameworks, phases and source types."""
    return [
        SearchResult(
            id="gso-1",
            title="Building a Grand Slam Offer",
            content=(
                "A grand slam offer stacks so much value that prospects feel stupid saying no. "
                "Start by listing every obstacle your customer faces, then turn each one "
                "into a solution you deliver."
            ),
            similarity_score=0.0,
            framework_tags=["grand_slam_offers", "value_equation"],
            business_phase="startup",
            complexity_level="beginner",
            source_type="book",
            authority_level="primary_hormozi",
            verification_status="verified",
        ),
        SearchResult(
            id="gso-2",
            title="Pricing a grand slam offer",
            content=(
                "Price your offer on value, not cost. Anchoring against the total value "
                "of the stack makes a premium price feel like a bargain."
            ),
            similarity_score=0.0,
            framework_tags=["grand_slam_offers", "pricing_psychology"],
            business_phase="all",
            complexity_level="intermediate",
            source_type="video",
        ),
        SearchResult(
            id="core4-1",
            title="The Core Four lead channels",
            content=(
                "Warm outreach, cold outreach, content and paid ads are the core four ways "
                "to get leads. Scale one channel before adding the next."
            ),
            similarity_score=0.0,
            framework_tags=["core_four"],
            business_phase="scaling",
            complexity_level="intermediate",
            source_type="podcast",
        ),
        SearchResult(
            id="ltv-1",
            title="LTV to CAC ratio targets",
            content=(
                "Healthy businesses keep customer lifetime value at least three times the "
                "customer acquisition cost. Track ltv and cac by channel every month."
            ),
            similarity_score=0.0,
            framework_tags=["ltv_cac_optimization"],
            business_phase="optimization",
            complexity_level="advanced",
            source_type="case_study",
        ),
        SearchResult(
            id="closer-1",
            title="Running a CLOSER sales call",
            content=(
                "Clarify why the prospect is on the call, label the problem, overview past "
                "attempts, sell the vacation, explain away concerns and reinforce the decision."
            ),
            similarity_score=0.0,
            framework_tags=["closer_framework"],
            business_phase="all",
            complexity_level="beginner",
            source_type="course",
        ),
        SearchResult(
            id="team-1",
            title="Hiring your first operators",
            content=(
                "Delegation starts with documenting the task. Hire for the role you are "
                "worst at and give the new hire a written system to follow."
            ),
            similarity_score=0.0,
            framework_tags=["team_building"],
            business_phase="scaling",
            complexity_level="intermediate",
            source_type="interview",
        ),
    ]


@pytest.fixture
def memory_store(sample_passages, keyword_embedder):
    """In-memory store loaded with the sample corpus."""
    store = InMemoryPassageStore()
    store.add(
        sample_passages,
        keyword_embedder.embed_texts([f"{p.title} {p.content}" for p in sample_passages]),
    )
    return store


@pytest.fixture
def test_settings():
    """Settings that accept every match and never cache."""
    return Settings(similarity_threshold=0.0, cache_ttl_minutes=0, max_results=5)


@pytest.fixture
def oracle(memory_store, keyword_embedder, test_settings):
    from oracle_rag import Oracle

    instance = Oracle.from_store(
        store=memory_store, embedder=keyword_embedder, settings=test_settings
    )
    yield instance
    instance.close()


@pytest.fixture
def make_enhanced():
    """Factory for ranked passages with sensible defaults."""

    def _make(source_id: str = "p-1", **overrides) -> EnhancedSearchResult:
        fields = {
            "id": source_id,
            "title": f"Passage {source_id}",
            "content": (
                "Build a grand slam offer by stacking value for your startup customers. "
                "Test the offer with ten prospects this week."
            ),
            "similarity_score": 0.85,
            "framework_tags": ["grand_slam_offers"],
            "business_phase": "startup",
            "complexity_level": "beginner",
            "implementation_complexity": "beginner",
            "source_type": "book",
            "semantic_score": 0.85,
            "business_context_score": 0.7,
            "framework_alignment_score": 0.25,
            "implementation_score": 0.9,
            "authority_score": 0.9,
            "recency_score": 0.7,
            "final_relevance_score": 0.8,
            "key_concepts": ["grand_slam_offers"],
        }
        fields.update(overrides)
        return EnhancedSearchResult(**fields)

    return _make


@pytest.fixture
def make_classification():
    """Factory for query classifications about grand slam offers."""

    def _make(**overrides) -> QueryClassification:
        fields = {
            "original_query": "How do I implement a grand slam offer for my startup?",
            "primary_intent": "implementation",
            "confidence": 0.8,
            "frameworks": (
                FrameworkRelevance(framework="grand_slam_offers", relevance_score=0.9),
            ),
            "stage_signals": (StageSignal(stage="startup", confidence=0.6),),
            "complexity_preference": "beginner",
        }
        fields.update(overrides)
        return QueryClassification(**fields)

    return _make


@pytest.fixture
def make_candidate():
    """Factory wrapping an assembled response as a ranking candidate."""

    def _make(
        response: AssembledResponse,
        sources: list[EnhancedSearchResult],
        candidate_id: str | None = None,
    ) -> CandidateResponse:
        fields = {"assembled_response": response, "source_results": tuple(sources)}
        if candidate_id is not None:
            fields["candidate_id"] = candidate_id
        return CandidateResponse(**fields)

    return _make
