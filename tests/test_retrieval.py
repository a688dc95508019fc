"""
Tests for index persistence, the indexer, cosine scoring and the retriever.
"""

import json
import math

import numpy as np
import pytest

from core.chunking import Chunk
from core.errors import IndexBuildError, IndexLoadError
from core.indexer import build_and_save_index, build_index, embed_chunks
from core.retriever import Retriever
from core.text_cleaner import STOPWORD_CONFIG
from core.vectorstore import Index, VectorStore, cosine_similarity, load_index, save_index
from tests.conftest import FailingEmbeddingBackend, KeywordEmbeddingBackend
from tests.test_cases import CORPUS


class TestCosine:

    @pytest.mark.parametrize("a,b", [
        ([1.0, 2.0, 3.0], [3.0, -1.0, 0.5]),
        ([0.2, 0.0], [0.0, 5.0]),
        ([1.0, 1.0], [-2.0, -2.0]),
    ])
    def test_symmetric_and_bounded(self, a, b):
        s = cosine_similarity(a, b)
        assert s == pytest.approx(cosine_similarity(b, a))
        assert -1.0 <= s <= 1.0

    def test_self_similarity_is_one(self):
        v = [0.3, -4.0, 12.5]
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-3.0, 0.0]) == pytest.approx(-1.0)


class TestVectorStore:

    def test_search_scans_all_and_sorts(self, vector_store):
        hits = vector_store.search([1.0] + [0.0] * 13, top_k=10)
        assert len(hits) == len(CORPUS)
        scores = [s for _, s in hits]
        assert scores == sorted(scores, reverse=True)
        assert hits[0][0].id == 0

    def test_search_respects_top_k(self, vector_store):
        assert len(vector_store.search([1.0] * 14, top_k=2)) == 2

    def test_dimension_mismatch(self, vector_store):
        with pytest.raises(ValueError):
            vector_store.search([1.0, 0.0], top_k=2)

    def test_empty_store(self):
        store = VectorStore()
        assert not store.is_loaded
        assert store.search([1.0], top_k=3) == []

    def test_load_missing_file_returns_false(self, tmp_path):
        assert VectorStore().load(tmp_path / "index.json") is False


class TestIndexPersistence:

    def test_save_and_load(self, tmp_path, corpus_index):
        path = tmp_path / "data" / "index.json"
        save_index(corpus_index, path)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert set(raw) == {"createdAt", "model", "stopwords", "vectors"}
        assert raw["stopwords"] == STOPWORD_CONFIG
        assert set(raw["vectors"][0]) == {"id", "text_original", "text_cleaned", "embedding"}

        loaded = load_index(path)
        assert [c.id for c in loaded.chunks] == [0, 1, 2]
        assert loaded.model == "keyword-test"
        assert loaded.chunks[1].embedding == corpus_index.chunks[1].embedding

    def test_no_temp_files_left(self, tmp_path, corpus_index):
        save_index(corpus_index, tmp_path / "index.json")
        assert [p.name for p in tmp_path.iterdir()] == ["index.json"]

    def test_missing_index(self, tmp_path):
        with pytest.raises(IndexLoadError):
            load_index(tmp_path / "index.json")

    @pytest.mark.parametrize("payload", ["null", "[]", "42", "\"vectors\""])
    def test_non_object_index(self, tmp_path, payload):
        path = tmp_path / "index.json"
        path.write_text(payload, encoding="utf-8")
        with pytest.raises(IndexLoadError):
            load_index(path)
        assert VectorStore().load(path) is False

    def test_corrupt_index(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(IndexLoadError):
            load_index(path)

    def test_empty_index(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text(json.dumps({"createdAt": "x", "model": "m", "stopwords": "s", "vectors": []}))
        with pytest.raises(IndexLoadError):
            load_index(path)

    def test_inconsistent_dimensions_rejected(self):
        index = Index(model="m", stopword_config="s", chunks=[
            Chunk(0, "a", "a", [1.0, 0.0]),
            Chunk(1, "b", "b", [1.0]),
        ])
        with pytest.raises(ValueError):
            index.validate()


class TestIndexer:

    def test_embed_chunks_batches_and_placeholders(self):
        backend = KeywordEmbeddingBackend()
        chunks = embed_chunks(["Duke spares", "what is the", "Leather automation"], backend, batch_size=2)

        assert [len(call) for call in backend.calls] == [2, 1]
        assert backend.calls[0][1] == " "
        assert chunks[1].text_cleaned == ""
        assert [c.id for c in chunks] == [0, 1, 2]
        assert chunks[0].text_cleaned == "duke spares"
        assert len({len(c.embedding) for c in chunks}) == 1

    def test_build_index_from_text_document(self, tmp_path):
        doc = tmp_path / "knowledge.txt"
        doc.write_text("\n\n".join(CORPUS), encoding="utf-8")
        index = build_index(doc, KeywordEmbeddingBackend(), chunk_size=80, overlap=20, batch_size=2)

        assert index.model == "keyword-test"
        assert index.stopword_config == STOPWORD_CONFIG
        assert all(len(c.text_original) <= 80 for c in index.chunks)
        assert index.dimension == 14

    def test_failed_batch_writes_nothing(self, tmp_path):
        doc = tmp_path / "knowledge.txt"
        doc.write_text(" ".join(CORPUS) * 5, encoding="utf-8")
        index_path = tmp_path / "index.json"

        with pytest.raises(RuntimeError):
            build_and_save_index(
                doc, index_path, FailingEmbeddingBackend(fail_after_calls=1),
                chunk_size=50, overlap=10, batch_size=2,
            )
        assert not index_path.exists()

    def test_failed_rebuild_keeps_previous_index(self, tmp_path, corpus_index):
        index_path = tmp_path / "index.json"
        save_index(corpus_index, index_path)
        before = index_path.read_text(encoding="utf-8")

        doc = tmp_path / "knowledge.txt"
        doc.write_text("Duke spares " * 50, encoding="utf-8")
        with pytest.raises(RuntimeError):
            build_and_save_index(doc, index_path, FailingEmbeddingBackend(), chunk_size=50, overlap=10)
        assert index_path.read_text(encoding="utf-8") == before

    def test_missing_document(self, tmp_path):
        with pytest.raises(IndexBuildError):
            build_index(tmp_path / "knowledge.pdf", KeywordEmbeddingBackend())


class TestRetriever:

    def test_returns_at_most_k_sorted(self, vector_store, embedding_backend):
        retriever = Retriever(vector_store, embedding_backend, top_k=2, min_score=0.25)
        result = retriever.retrieve("Which brands do you carry?")

        assert len(result.hits) <= 2
        scores = [s for _, s in result.hits]
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert result.hits[0][0].id == 0
        assert result.top_score == pytest.approx(1 / math.sqrt(5))
        assert not result.gated

    def test_query_is_cleaned_before_embedding(self, vector_store, embedding_backend):
        Retriever(vector_store, embedding_backend).retrieve("Which brands do you carry?")
        assert embedding_backend.calls[-1] == ["brands carry"]

    def test_stopword_only_query_falls_back_to_raw(self, vector_store, embedding_backend):
        Retriever(vector_store, embedding_backend).retrieve("What is the")
        assert embedding_backend.calls[-1] == ["what is the"]

    def test_gated_below_min_score(self, vector_store, embedding_backend):
        retriever = Retriever(vector_store, embedding_backend, top_k=3, min_score=0.9)
        result = retriever.retrieve("Which brands do you carry?")
        assert result.gated
        assert result.hits

    def test_gated_when_nothing_matches(self, vector_store, embedding_backend):
        result = Retriever(vector_store, embedding_backend, min_score=0.25).retrieve("capital of France")
        assert result.gated
        assert result.top_score == 0.0

    def test_gated_when_store_empty(self, embedding_backend):
        result = Retriever(VectorStore(), embedding_backend).retrieve("Duke spares")
        assert result.gated
        assert result.hits == []

    def test_citations_numbered_in_score_order(self, vector_store, embedding_backend):
        result = Retriever(vector_store, embedding_backend, top_k=3).retrieve("Which industries do you serve?")
        citations = result.citations()
        assert [c["idx"] for c in citations] == [1, 2, 3]
        assert citations[0]["score"] >= citations[1]["score"] >= citations[2]["score"]

    def test_full_scan_over_large_store(self, embedding_backend):
        rng = np.random.default_rng(0)
        chunks = [Chunk(i, f"t{i}", f"t{i}", rng.normal(size=14).tolist()) for i in range(2000)]
        store = VectorStore(Index(model="m", stopword_config="s", chunks=chunks))
        query = chunks[1234].embedding

        hits = store.search(query, top_k=5)
        assert hits[0][0].id == 1234
        assert hits[0][1] == pytest.approx(1.0)
