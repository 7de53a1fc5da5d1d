# src/oracle_rag/oracle.py
"""Central configuration class for Oracle."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oracle_rag.configuration import ProviderConfig, StorageConfig
    from oracle_rag.embedder import Embedder
    from oracle_rag.pipeline import AdvicePipeline
    from oracle_rag.providers import LLMClient
    from oracle_rag.stores import PassageStore

from oracle_rag.assembly import ContextAssemblyEngine
from oracle_rag.classifier import KeywordQueryClassifier
from oracle_rag.evaluation import QualityAssessor, ResponseRanker
from oracle_rag.ranking import BusinessContextRanker
from oracle_rag.search import VectorSearchEngine
from oracle_rag.settings import Settings
from oracle_rag.stores import SearchCache
from oracle_rag.strategy import QueryStrategySelector


class Oracle:
    """Central configuration for Oracle stores and components.

    Oracle bundles the passage store, the query embedder and every pipeline
    stage so you can configure once and create pipelines from it.

    There are two ways to create an Oracle instance:

    1. With a storage bundle:

        from oracle_rag import LiteLLMProvider, LocalStorage, Oracle

        oracle = Oracle(
            provider=LiteLLMProvider(embedding="openai/text-embedding-3-small"),
            storage=LocalStorage("./data"),
        )
        result = oracle.pipeline().ask("How do I build a grand slam offer?")

    2. With an explicit store (and optionally an explicit embedder):

        from oracle_rag.stores import InMemoryPassageStore

        oracle = Oracle.from_store(store=InMemoryPassageStore(), embedder=my_embedder)
    """

    def __init__(
        self,
        *,
        provider: ProviderConfig | None = None,
        # EITHER storage bundle...
        storage: StorageConfig | None = None,
        # ...OR an explicit store
        store: PassageStore | None = None,
        embedder: Embedder | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Create an Oracle instance.

        Args:
            provider: Provider configuration (builds the embedder and the LLM client).
            storage: Storage bundle. Mutually exclusive with ``store``.
            store: Explicit passage store.
            embedder: Explicit embedder. Overrides the provider's embedder.
            settings: Behavioral settings.

        Raises:
            ValueError: If neither or both of ``storage`` and ``store`` are
                given, or if there is no way to build an embedder.
        """
        self._settings = settings if settings is not None else Settings()
        self._provider = provider

        if storage is not None:
            if store is not None:
                raise ValueError("Cannot mix 'storage' bundle with an explicit store")
            self.store = storage.build_store()
        elif store is not None:
            self.store = store
        else:
            raise ValueError("Must provide either 'storage' bundle or an explicit 'store'")

        if embedder is not None:
            self.embedder = embedder
        elif provider is not None:
            self.embedder = provider.build_embedder(self._settings)
        else:
            raise ValueError("Must provide either 'provider' or an explicit 'embedder'")

        self.cache = SearchCache(max_entries=self._settings.cache_max_entries)
        self.engine = VectorSearchEngine(
            self.store,
            self.embedder,
            cache=self.cache,
            max_concurrent=self._settings.max_concurrent_searches,
        )
        self.selector = QueryStrategySelector(
            relevance_gate=self._settings.strategy_relevance_gate,
            max_strategies=self._settings.max_strategies,
        )
        self.passage_ranker = BusinessContextRanker()
        self.assembler = ContextAssemblyEngine(conflict_policy=self._settings.conflict_policy)
        self.response_ranker = ResponseRanker()
        self.quality_assessor = QualityAssessor()
        self.classifier = KeywordQueryClassifier()

    @classmethod
    def from_store(
        cls,
        *,
        store: PassageStore,
        provider: ProviderConfig | None = None,
        embedder: Embedder | None = None,
        settings: Settings | None = None,
    ) -> Oracle:
        """Create Oracle around an already-built passage store."""
        return cls(provider=provider, store=store, embedder=embedder, settings=settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    def pipeline(
        self,
        *,
        llm_client: LLMClient | None = None,
        llm_model: str | None = None,
        synthesize: bool = False,
    ) -> AdvicePipeline:
        """Create an AdvicePipeline over this instance's components.

        Args:
            llm_client: LLM client for answer synthesis.
            llm_model: Convenience option: build a LiteLLMClient for this model.
            synthesize: Build the LLM client from the provider when neither
                of the above is given.

        Returns:
            Configured AdvicePipeline. Without an LLM client, answers are the
            assembled structured responses only.
        """
        from oracle_rag.pipeline import AdvicePipeline

        if llm_client is None and llm_model is not None:
            from oracle_rag.providers.litellm import LiteLLMClient

            llm_client = LiteLLMClient(model=llm_model, num_retries=self._settings.num_retries)
        elif llm_client is None and synthesize and self._provider is not None:
            llm_client = self._provider.build_llm_client(self._settings)

        return AdvicePipeline(
            self.engine,
            settings=self._settings,
            selector=self.selector,
            passage_ranker=self.passage_ranker,
            assembler=self.assembler,
            response_ranker=self.response_ranker,
            quality_assessor=self.quality_assessor,
            classifier=self.classifier,
            llm_client=llm_client,
        )

    def close(self) -> None:
        """Release store resources and drop cached searches."""
        self.cache.clear()
        self.store.close()
