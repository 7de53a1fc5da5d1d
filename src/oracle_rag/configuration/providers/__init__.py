"""Provider configurations for Oracle."""

from oracle_rag.configuration.providers.litellm import LiteLLMProvider

__all__ = ["LiteLLMProvider"]
