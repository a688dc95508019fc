"""
Shared fixtures: offline fakes for the embedding and generation backends and a tiny corpus.
"""

import random
import sys
from datetime import datetime
from pathlib import Path
from typing import List

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.embeddings import EmbeddingBackend
from core.indexer import embed_chunks
from core.intent_router import SmallTalkResponder
from core.llm_backend import LLMBackend, MockLLMBackend
from core.pipeline import KnowledgeQAPipeline
from core.sessions import SessionStore
from core.text_cleaner import STOPWORD_CONFIG
from core.vectorstore import Index, VectorStore
from tests.test_cases import CORPUS


VOCABULARY = [
    "brands", "duke", "kansai", "sewing", "machine",
    "spares", "service", "delhi", "workshop",
    "garment", "leather", "mattress", "industries", "automation",
]


class KeywordEmbeddingBackend(EmbeddingBackend):
    """Counts vocabulary words; texts without any vocabulary word map to the zero vector."""

    def __init__(self, vocabulary: List[str] = VOCABULARY):
        self._vocab = list(vocabulary)
        self.calls: List[List[str]] = []

    @property
    def model_name(self) -> str:
        return "keyword-test"

    def encode(self, texts, batch_size=64):
        self.calls.append(list(texts))
        rows = []
        for text in texts:
            tokens = text.lower().split()
            rows.append([float(tokens.count(word)) for word in self._vocab])
        return np.asarray(rows, dtype=np.float32)


class FailingEmbeddingBackend(EmbeddingBackend):
    def __init__(self, status=None, fail_after_calls=0):
        self.status = status
        self._remaining = fail_after_calls
        self._inner = KeywordEmbeddingBackend()

    @property
    def model_name(self) -> str:
        return "failing-test"

    def encode(self, texts, batch_size=64):
        if self._remaining > 0:
            self._remaining -= 1
            return self._inner.encode(texts, batch_size)
        err = RuntimeError("embedding quota exceeded")
        if self.status is not None:
            err.status = self.status
        raise err


class RecordingLLM(LLMBackend):
    """Wraps the mock backend and keeps every prompt it was given."""

    def __init__(self, fail: bool = False):
        self.prompts: List[str] = []
        self._fail = fail
        self._mock = MockLLMBackend()

    @property
    def name(self) -> str:
        return "recording"

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._fail:
            raise RuntimeError("generation backend unavailable")
        return self._mock.generate(prompt)


@pytest.fixture
def embedding_backend():
    return KeywordEmbeddingBackend()


@pytest.fixture
def corpus_index(embedding_backend):
    chunks = embed_chunks(CORPUS, embedding_backend, batch_size=2)
    embedding_backend.calls.clear()
    return Index(model=embedding_backend.model_name, stopword_config=STOPWORD_CONFIG, chunks=chunks)


@pytest.fixture
def vector_store(corpus_index):
    return VectorStore(corpus_index)


@pytest.fixture
def llm():
    return RecordingLLM()


@pytest.fixture
def morning_clock():
    return lambda: datetime(2024, 1, 15, 9, 30)


@pytest.fixture
def pipeline(embedding_backend, llm, vector_store, morning_clock):
    p = KnowledgeQAPipeline(
        embedding_backend=embedding_backend,
        llm=llm,
        vector_store=vector_store,
        session_store=SessionStore(),
        responder=SmallTalkResponder(org_name="HCA", rng=random.Random(7), clock=morning_clock),
        top_k=2,
        min_score=0.25,
        org_name="HCA",
    )
    p.initialize()
    return p
