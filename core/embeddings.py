"""
Embedding module with pluggable backends.
Provides a unified interface for generating text embeddings.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class EmbeddingBackend(ABC):
    """Abstract base class for embedding backends."""

    @abstractmethod
    def encode(self, texts: List[str], batch_size: int = 64) -> np.ndarray:
        """Encode a list of texts into embeddings. Returns (N, dim) array, in input order."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model, stored in the index metadata."""
        pass

    def encode_query(self, text: str) -> np.ndarray:
        """Encode a single query string. Returns a (dim,) vector."""
        return self.encode([text], batch_size=1)[0]


class SentenceTransformerBackend(EmbeddingBackend):
    """
    Embedding backend using Sentence Transformers (HuggingFace).
    Uses all-MiniLM-L6-v2 by default; a multilingual model can be configured via EMBEDDING_MODEL.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self._model_name = model_name
        self._model = None  # lazy load to save memory

    @property
    def model_name(self) -> str:
        return self._model_name

    def _load_model(self):
        if self._model is None:
            logger.info("Loading embedding model: %s", self._model_name)
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self._model_name)

    def encode(self, texts: List[str], batch_size: int = 64) -> np.ndarray:
        self._load_model()
        embeddings = self._model.encode(
            texts,
            batch_size=batch_size,
            show_progress_bar=False,
            convert_to_numpy=True,
        )
        return np.asarray(embeddings, dtype=np.float32)


class GeminiEmbeddingBackend(EmbeddingBackend):
    """Google Gemini embedding backend (text-embedding-004 by default)."""

    def __init__(self, model_name: str = "text-embedding-004", api_key: Optional[str] = None):
        if not api_key:
            raise ConfigurationError("Missing GOOGLE_API_KEY for the Gemini embedding backend")
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        self._genai = genai
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    def encode(self, texts: List[str], batch_size: int = 64) -> np.ndarray:
        model = self._model_name if self._model_name.startswith("models/") else f"models/{self._model_name}"
        vectors = []
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            result = self._genai.embed_content(model=model, content=batch)
            vectors.extend(result["embedding"])
        return np.asarray(vectors, dtype=np.float32)


def get_embedding_backend(
    backend_name: str = "sentence-transformers",
    model_name: str = "all-MiniLM-L6-v2",
    api_key: Optional[str] = None,
) -> EmbeddingBackend:
    """Factory to create the embedding backend by name."""
    if backend_name == "sentence-transformers":
        return SentenceTransformerBackend(model_name)
    if backend_name == "gemini":
        return GeminiEmbeddingBackend(model_name, api_key=api_key)
    raise ValueError(
        f"Unknown embedding backend: {backend_name}. Available: ['sentence-transformers', 'gemini']"
    )
