"""
FinNova - Knowledge Retriever
===============================
Adapts ``FinNovaVectorStore`` rows to the plain-text passages the
dialogue router consumes: ``search(query, k) -> list[str]``, most
relevant first, at most *k* items.
"""

from __future__ import annotations

from finnova.src.database.vector_store import FinNovaVectorStore


class KnowledgeRetriever:
    """Return the text of the *k* nearest knowledge-base chunks."""

    __slots__ = ("_store",)

    def __init__(self, vector_store: FinNovaVectorStore) -> None:
        self._store = vector_store


    def search(self, query: str, k: int) -> list[str]:
        rows = self._store.search(query_text=query, limit=k)
        return [str(row.get("text", "")) for row in rows[:k]]
