# src/oracle_rag/providers/litellm/client.py
"""LiteLLM client implementations for LLM and embedding APIs."""

from typing import Any

import litellm

from oracle_rag.providers.base import EmbeddingClient, LLMClient

DEFAULT_CHAT_MODEL = "openai/gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "openai/text-embedding-3-small"


class LiteLLMClient(LLMClient):
    """LiteLLM-based LLM client for answer synthesis.

    Example:
        client = LiteLLMClient(model="anthropic/claude-3-5-sonnet-20241022")
        text = client.complete([{"role": "user", "content": "Hello"}])
    """

    def __init__(
        self,
        model: str = DEFAULT_CHAT_MODEL,
        num_retries: int = 3,
        api_key: str | None = None,
    ) -> None:
        """Initialize the LiteLLM client.

        Args:
            model: LiteLLM model identifier.
            num_retries: Retries on rate limit errors. LiteLLM handles
                        exponential backoff itself.
            api_key: Optional API key; otherwise LiteLLM reads provider env vars.
        """
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key

    def _completion_kwargs(self, messages: list[dict], temperature: float | None) -> dict[str, Any]:
        completion_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "drop_params": True,
            "num_retries": self.num_retries,
        }
        if temperature is not None:
            completion_kwargs["temperature"] = temperature
        if self.api_key:
            completion_kwargs["api_key"] = self.api_key
        return completion_kwargs

    def _extract_content(self, response: Any) -> str:
        if not response.choices:
            raise ValueError(f"LLM returned no choices for model {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise ValueError(f"LLM returned None content for model {self.model}")
        return str(content)

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion using LiteLLM."""
        response = litellm.completion(**self._completion_kwargs(messages, temperature))
        return self._extract_content(response)

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion using LiteLLM (async)."""
        response = await litellm.acompletion(**self._completion_kwargs(messages, temperature))
        return self._extract_content(response)


class LiteLLMEmbeddingClient(EmbeddingClient):
    """LiteLLM-based embedding client.

    Example:
        client = LiteLLMEmbeddingClient(model="openai/text-embedding-3-small")
        vectors = client.embed(["How do I price my offer?"])
    """

    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        num_retries: int = 3,
        api_key: str | None = None,
    ) -> None:
        self.model = model
        self.num_retries = num_retries
        self.api_key = api_key

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM."""
        if not texts:
            return []

        embedding_kwargs: dict[str, Any] = {
            "model": self.model,
            "input": texts,
            "num_retries": self.num_retries,
        }
        if self.api_key:
            embedding_kwargs["api_key"] = self.api_key

        response = litellm.embedding(**embedding_kwargs)
        # Sort by index to maintain order
        sorted_data = sorted(response.data, key=lambda x: x["index"])
        return [item["embedding"] for item in sorted_data]
