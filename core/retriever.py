"""
Retriever module.
Handles query cleaning, query embedding, exhaustive similarity search, and confidence gating.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from core.chunking import Chunk
from core.embeddings import EmbeddingBackend
from core.text_cleaner import clean_for_embedding
from core.vectorstore import VectorStore


@dataclass
class RetrievalResult:
    """Top-k hits (best first) and whether they are too weak to answer from."""
    hits: List[Tuple[Chunk, float]] = field(default_factory=list)
    gated: bool = True

    @property
    def top_score(self) -> float:
        return self.hits[0][1] if self.hits else 0.0

    def citations(self) -> List[dict]:
        return [{"idx": i, "score": score} for i, (_, score) in enumerate(self.hits, 1)]


class Retriever:
    """Retrieves the most similar chunks for a query and gates weak matches."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_backend: EmbeddingBackend,
        top_k: int = 6,
        min_score: float = 0.25,
    ):
        self._store = vector_store
        self._backend = embedding_backend
        self._top_k = top_k
        self._min_score = min_score

    @property
    def top_k(self) -> int:
        return self._top_k

    @property
    def min_score(self) -> float:
        return self._min_score

    def retrieve(self, query: str) -> RetrievalResult:
        """
        Embed the cleaned query and rank every indexed chunk by cosine similarity.
        Backend errors propagate to the caller.
        """
        query_emb = self._backend.encode_query(clean_for_embedding(query))
        hits = self._store.search(query_emb, top_k=self._top_k)
        gated = not hits or hits[0][1] < self._min_score
        return RetrievalResult(hits=hits, gated=gated)
