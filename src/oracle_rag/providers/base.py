# src/oracle_rag/providers/base.py
"""Abstract base classes for LLM and embedding providers."""

from abc import ABC, abstractmethod


class LLMClient(ABC):
    """Abstract base class for LLM completion providers.

    Only used for optional answer synthesis on top of an assembled response.

    Example:
        class MyLLMClient(LLMClient):
            def complete(self, messages, temperature=None):
                return my_api.chat(messages, temp=temperature)
    """

    @abstractmethod
    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion for the given messages.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            temperature: Optional temperature for generation (0.0-1.0).
                         If None, use provider default.

        Returns:
            The generated text response.
        """
        ...

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion for the given messages (async).

        Default implementation calls sync complete().
        """
        return self.complete(messages, temperature)


class EmbeddingClient(ABC):
    """Abstract base class for embedding providers.

    Raw text in, fixed-length vectors out. Failures are fatal for the
    search call that triggered them.
    """

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts.

        Returns:
            List of embedding vectors, one per input text, in input order.
        """
        ...
