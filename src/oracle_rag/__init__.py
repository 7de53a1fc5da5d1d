"""Oracle - business-advice retrieval, ranking and context assembly.

Answers business questions from a curated corpus: framework-aware search,
business-context ranking of passages, structured answer assembly, then
ranking and quality assessment of the assembled candidates.

Quick Start (LiteLLM + Local Storage):
    from oracle_rag import LiteLLMProvider, LocalStorage, Oracle

    oracle = Oracle(
        provider=LiteLLMProvider(embedding="openai/text-embedding-3-small"),
        storage=LocalStorage("./oracle_data"),
    )
    result = oracle.pipeline().ask("How do I price my first offer?")
    print(result.text)

Explicit store and embedder:
    from oracle_rag import Oracle
    from oracle_rag.stores import InMemoryPassageStore

    oracle = Oracle.from_store(store=InMemoryPassageStore(), embedder=my_embedder)
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("oracle-rag")
except PackageNotFoundError:
    # Source-tree fallback (e.g. running tests without installing the wheel).
    try:
        import tomllib
        from pathlib import Path

        def _read_version_from_pyproject() -> str | None:
            for parent in Path(__file__).resolve().parents:
                pyproject = parent / "pyproject.toml"
                if pyproject.exists():
                    data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
                    version = data.get("project", {}).get("version")
                    return str(version) if version is not None else None
            return None

        __version__ = _read_version_from_pyproject() or "unknown"
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"

# Stages
from oracle_rag.assembly import ContextAssemblyEngine
from oracle_rag.classifier import KeywordQueryClassifier, QueryClassifier

# Configuration objects
from oracle_rag.configuration import (
    InMemoryStorage,
    LiteLLMProvider,
    LocalStorage,
    ProviderConfig,
    StorageConfig,
)
from oracle_rag.embedder import ClientEmbedder, Embedder
from oracle_rag.evaluation import QualityAssessor, ResponseRanker

# Errors
from oracle_rag.exceptions import (
    ConfigurationError,
    MalformedRequestError,
    OracleError,
    SearchFanOutError,
    UpstreamError,
)

# Models
from oracle_rag.models import (
    AssembledResponse,
    AssemblyContext,
    CandidateResponse,
    EnhancedSearchResult,
    QualityAssessment,
    QueryClassification,
    RankingRequest,
    RankingResult,
    SearchResult,
    SemanticSearchQuery,
)

# Central configuration
from oracle_rag.oracle import Oracle
from oracle_rag.pipeline import AdvicePipeline, PipelineResult

# Provider ABCs
from oracle_rag.providers import EmbeddingClient, LLMClient
from oracle_rag.ranking import BusinessContextRanker
from oracle_rag.search import VectorSearchEngine

# Configuration
from oracle_rag.settings import Settings
from oracle_rag.strategy import QueryStrategySelector, StrategyExecutor

__all__ = [
    # Version
    "__version__",
    # Central configuration
    "Oracle",
    "Settings",
    "LiteLLMProvider",
    "LocalStorage",
    "InMemoryStorage",
    "ProviderConfig",
    "StorageConfig",
    # Pipeline
    "AdvicePipeline",
    "PipelineResult",
    # Stages
    "KeywordQueryClassifier",
    "QueryClassifier",
    "VectorSearchEngine",
    "QueryStrategySelector",
    "StrategyExecutor",
    "BusinessContextRanker",
    "ContextAssemblyEngine",
    "ResponseRanker",
    "QualityAssessor",
    # Providers
    "Embedder",
    "ClientEmbedder",
    "LLMClient",
    "EmbeddingClient",
    # Models
    "QueryClassification",
    "SearchResult",
    "EnhancedSearchResult",
    "SemanticSearchQuery",
    "AssemblyContext",
    "AssembledResponse",
    "CandidateResponse",
    "RankingRequest",
    "RankingResult",
    "QualityAssessment",
    # Errors
    "OracleError",
    "MalformedRequestError",
    "UpstreamError",
    "SearchFanOutError",
    "ConfigurationError",
]
