"""
Vector store module.
Handles saving and loading the JSON index and exhaustive cosine-similarity search over it.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from core.chunking import Chunk
from core.errors import IndexLoadError

logger = logging.getLogger(__name__)


@dataclass
class Index:
    """A persisted set of embedded chunks plus build metadata."""
    model: str
    stopword_config: str
    chunks: List[Chunk] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def dimension(self) -> int:
        return len(self.chunks[0].embedding) if self.chunks else 0

    def validate(self) -> None:
        """Check id uniqueness and that every embedding has the same length."""
        ids = [c.id for c in self.chunks]
        if len(ids) != len(set(ids)):
            raise ValueError("Chunk ids must be unique within an index")
        dims = {len(c.embedding) for c in self.chunks}
        if len(dims) > 1:
            raise ValueError(f"Inconsistent embedding dimensions in index: {sorted(dims)}")
        if 0 in dims:
            raise ValueError("Chunk with empty embedding in index")

    def to_dict(self) -> dict:
        return {
            "createdAt": self.created_at,
            "model": self.model,
            "stopwords": self.stopword_config,
            "vectors": [c.to_dict() for c in self.chunks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Index":
        return cls(
            model=data.get("model", ""),
            stopword_config=data.get("stopwords", ""),
            chunks=[Chunk.from_dict(v) for v in data.get("vectors") or []],
            created_at=data.get("createdAt", ""),
        )


def save_index(index: Index, path: Path) -> None:
    """
    Persist the index as JSON.
    Written to a temporary file in the target directory, then swapped in with os.replace.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=".index-", suffix=".json.tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(index.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.info("Saved %d vectors to %s", len(index.chunks), path)


def load_index(path: Path) -> Index:
    """Load a persisted index. Raises IndexLoadError when missing, unreadable or empty."""
    path = Path(path)
    if not path.exists():
        raise IndexLoadError(f'Embeddings not found at {path}. Run "python app.py --build-index" first.')

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        index = Index.from_dict(data)
        index.validate()
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise IndexLoadError(f"Failed to read embeddings file {path}: {e}") from e

    if not index.chunks:
        raise IndexLoadError("Embeddings file has no vectors.")
    return index


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; a zero-norm denominator is treated as 1."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b)) or 1.0
    return float(np.clip(np.dot(a, b) / denom, -1.0, 1.0))


class VectorStore:
    """In-memory store over a loaded Index; every search scans all chunks."""

    def __init__(self, index: Optional[Index] = None):
        self._index: Optional[Index] = None
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None
        if index is not None:
            self.set_index(index)

    def set_index(self, index: Index) -> None:
        """Swap in a new index. The previous one is replaced as a whole."""
        matrix = np.asarray([c.embedding for c in index.chunks], dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1) if len(index.chunks) else np.zeros(0)
        self._index, self._matrix, self._norms = index, matrix, norms

    def load(self, path: Path) -> bool:
        """Load the index from disk. Returns False (and logs a warning) when it is unusable."""
        try:
            index = load_index(path)
        except IndexLoadError as e:
            logger.warning("%s", e)
            return False
        self.set_index(index)
        logger.info("Loaded %d vectors (stopwords: %s)", len(index.chunks), index.stopword_config)
        return True

    def search(self, query_embedding: Sequence[float], top_k: int = 6) -> List[Tuple[Chunk, float]]:
        """Score the query against every chunk and return the top_k (chunk, score) pairs, best first."""
        if not self.is_loaded or top_k <= 0:
            return []

        query = np.asarray(query_embedding, dtype=np.float64).reshape(-1)
        if query.shape[0] != self._matrix.shape[1]:
            raise ValueError(
                f"Query embedding has dimension {query.shape[0]}, index has {self._matrix.shape[1]}"
            )

        denom = self._norms * np.linalg.norm(query)
        denom[denom == 0] = 1.0
        scores = np.clip(self._matrix @ query / denom, -1.0, 1.0)

        order = np.argsort(-scores, kind="stable")[:top_k]
        chunks = self._index.chunks
        return [(chunks[i], float(scores[i])) for i in order]

    @property
    def is_loaded(self) -> bool:
        return self._index is not None and len(self._index.chunks) > 0

    @property
    def chunk_count(self) -> int:
        return len(self._index.chunks) if self._index else 0

    @property
    def index(self) -> Optional[Index]:
        return self._index
