# src/oracle_rag/configuration/storage/local.py
"""Storage configurations: persistent Chroma and in-process memory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oracle_rag.stores import PassageStore


@dataclass(frozen=True)
class LocalStorage:
    """Local filesystem storage backed by ChromaDB.

    Passages live in ``<data_dir>/chroma``.

    Args:
        data_dir: Base directory. Created if it doesn't exist.
        collection_name: Chroma collection holding the corpus.

    Example:
        oracle = Oracle(provider=LiteLLMProvider(), storage=LocalStorage("./data"))
    """

    data_dir: str
    collection_name: str = "oracle"

    def build_store(self) -> PassageStore:
        from oracle_rag.stores import ChromaPassageStore

        Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        return ChromaPassageStore(
            os.path.join(self.data_dir, "chroma"),
            collection_name=self.collection_name,
        )


@dataclass(frozen=True)
class InMemoryStorage:
    """Process-local storage for tests and small pre-embedded corpora."""

    def build_store(self) -> PassageStore:
        from oracle_rag.stores import InMemoryPassageStore

        return InMemoryPassageStore()
