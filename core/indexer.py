"""
Offline corpus indexer.
Orchestrates: load document → chunk → clean → embed in batches → Index.
"""

import logging
import time
from pathlib import Path
from typing import List

from core.chunking import Chunk, chunk_text
from core.embeddings import EmbeddingBackend
from core.errors import IndexBuildError
from core.ingestion import load_document
from core.text_cleaner import STOPWORD_CONFIG, clean
from core.vectorstore import Index, save_index

logger = logging.getLogger(__name__)

EMPTY_TEXT_PLACEHOLDER = " "


def embed_chunks(
    texts: List[str],
    backend: EmbeddingBackend,
    batch_size: int = 64,
) -> List[Chunk]:
    """
    Clean and embed chunk texts batch by batch.
    Any backend failure propagates; nothing is returned for a partial run.
    """
    chunks: List[Chunk] = []
    total = len(texts)

    for i in range(0, total, batch_size):
        batch_original = texts[i : i + batch_size]
        batch_cleaned = [clean(t) for t in batch_original]
        payload = [c or EMPTY_TEXT_PLACEHOLDER for c in batch_cleaned]
        if any(not c for c in batch_cleaned):
            logger.warning("Batch at offset %d contains chunks that clean to nothing; embedding a placeholder", i)

        vectors = backend.encode(payload, batch_size=batch_size)
        if len(vectors) != len(batch_original):
            raise IndexBuildError(
                f"Embedding backend returned {len(vectors)} vectors for {len(batch_original)} texts"
            )

        for j, (original, cleaned, vector) in enumerate(zip(batch_original, batch_cleaned, vectors)):
            chunks.append(Chunk(
                id=i + j,
                text_original=original,
                text_cleaned=cleaned,
                embedding=[float(x) for x in vector],
            ))

        logger.info("Embedded %d/%d chunks", min(i + batch_size, total), total)

    return chunks


def build_index(
    document_path: Path,
    backend: EmbeddingBackend,
    chunk_size: int = 1200,
    overlap: int = 200,
    batch_size: int = 64,
) -> Index:
    """Build an in-memory Index from a single source document."""
    text = load_document(document_path)

    texts = chunk_text(text, chunk_size=chunk_size, overlap=overlap)
    logger.info("Chunked %d characters into %d chunks (size=%d, overlap=%d)", len(text), len(texts), chunk_size, overlap)

    index = Index(
        model=backend.model_name,
        stopword_config=STOPWORD_CONFIG,
        chunks=embed_chunks(texts, backend, batch_size=batch_size),
    )
    try:
        index.validate()
    except ValueError as e:
        raise IndexBuildError(str(e)) from e
    return index


def build_and_save_index(
    document_path: Path,
    index_path: Path,
    backend: EmbeddingBackend,
    chunk_size: int = 1200,
    overlap: int = 200,
    batch_size: int = 64,
) -> Index:
    """Build the index and write it to index_path only once every batch has succeeded."""
    start = time.time()
    logger.info("Building index from %s", document_path)

    index = build_index(document_path, backend, chunk_size=chunk_size, overlap=overlap, batch_size=batch_size)
    save_index(index, index_path)

    logger.info("Index ready (%.1fs): %d chunks, dim=%d", time.time() - start, len(index.chunks), index.dimension)
    return index
