"""
End-to-end Knowledge Base Assistant pipeline.
Orchestrates: small-talk routing → retrieval → grounded generation → session history.
"""

import logging
import time
from pathlib import Path
from typing import Dict, Optional

from config import (
    INDEX_PATH,
    EMBEDDING_BACKEND,
    EMBEDDING_MODEL,
    TOP_K,
    MIN_SCORE,
    HINGLISH_THRESHOLD,
    LLM_BACKEND,
    GENERATION_MODEL,
    GOOGLE_API_KEY,
    ORG_NAME,
    SESSION_TTL_SECONDS,
)
from core.embeddings import EmbeddingBackend, get_embedding_backend
from core.errors import BackendFailure, ValidationError
from core.intent_router import IntentRouter, SmallTalkResponder
from core.language import detect_mode
from core.llm_backend import LLMBackend, get_llm_backend
from core.prompts import build_grounded_prompt, no_context_message, not_loaded_message
from core.retriever import Retriever
from core.sessions import SessionStore, new_session_id, now_ms
from core.vectorstore import VectorStore

logger = logging.getLogger(__name__)


class KnowledgeQAPipeline:
    """
    Main pipeline class that answers questions about the indexed knowledge base.

    Usage:
        pipeline = KnowledgeQAPipeline()
        pipeline.initialize()
        result = pipeline.ask("Which brands do we represent?", session_id)

    Every collaborator can be injected; anything left as None is built from config
    in initialize().
    """

    def __init__(
        self,
        index_path: Optional[Path] = None,
        embedding_backend: Optional[EmbeddingBackend] = None,
        llm: Optional[LLMBackend] = None,
        vector_store: Optional[VectorStore] = None,
        session_store: Optional[SessionStore] = None,
        router: Optional[IntentRouter] = None,
        responder: Optional[SmallTalkResponder] = None,
        top_k: int = TOP_K,
        min_score: float = MIN_SCORE,
        hinglish_threshold: float = HINGLISH_THRESHOLD,
        org_name: str = ORG_NAME,
    ):
        self._index_path = index_path or INDEX_PATH
        self._embedding_backend = embedding_backend
        self._llm = llm
        self._vector_store = vector_store
        self._sessions = session_store or SessionStore(ttl_seconds=SESSION_TTL_SECONDS or None)
        self._router = router or IntentRouter()
        self._responder = responder or SmallTalkResponder(org_name=org_name)
        self._top_k = top_k
        self._min_score = min_score
        self._hinglish_threshold = hinglish_threshold
        self._org = org_name

        self._retriever: Optional[Retriever] = None
        self._is_initialized = False

    def initialize(self) -> None:
        """
        Build missing backends and load the index.
        A missing or broken index does not stop the pipeline: it runs degraded,
        answering only small talk.
        """
        logger.info("Initializing knowledge base pipeline")
        start = time.time()

        if self._embedding_backend is None:
            self._embedding_backend = get_embedding_backend(
                EMBEDDING_BACKEND, EMBEDDING_MODEL, api_key=GOOGLE_API_KEY
            )

        if self._vector_store is None:
            self._vector_store = VectorStore()
            if not self._vector_store.load(self._index_path):
                logger.warning("Running without embeddings; retrieval is disabled until the index is built")

        self._retriever = Retriever(
            self._vector_store,
            self._embedding_backend,
            top_k=self._top_k,
            min_score=self._min_score,
        )

        if self._llm is None:
            self._llm = get_llm_backend(LLM_BACKEND, GENERATION_MODEL, api_key=GOOGLE_API_KEY)

        self._is_initialized = True
        logger.info(
            "Pipeline ready (%.1fs): %d chunks, LLM backend %s",
            time.time() - start, self._vector_store.chunk_count, self._llm.name,
        )

    def ask(self, question, session_id: Optional[str] = None) -> Dict:
        """
        Answer a question within a session.
        Returns {answer, mode, sessionId, citations}. Raises ValidationError for a
        missing question and BackendFailure when a backend call fails; a failed
        exchange is not written to history.
        """
        if not self._is_initialized:
            raise RuntimeError("Pipeline not initialized. Call initialize() first.")
        if not isinstance(question, str) or not question.strip():
            raise ValidationError("Missing 'question' (or 'message') string")

        session_id = session_id or new_session_id()
        q = question.strip()
        mode = detect_mode(q, threshold=self._hinglish_threshold)

        # Small talk first (no retrieval needed)
        intent = self._router.route(q)
        if intent is not None:
            reply = self._responder.reply(intent, mode)
            return self._respond(session_id, q, reply, mode, intent=intent.value)

        if not self.is_ready:
            return self._respond(session_id, q, not_loaded_message(mode), mode, degraded=True)

        try:
            result = self._retriever.retrieve(q)
        except Exception as e:
            logger.error("Embedding backend failed: %s", e)
            raise BackendFailure.from_exception(e) from e

        if result.gated:
            logger.info("Top score %.3f below %.2f; not generating", result.top_score, self._min_score)
            return self._respond(session_id, q, no_context_message(mode, self._org), mode)

        prompt = build_grounded_prompt(q, result.hits, mode, org=self._org)
        try:
            answer = self._llm.generate(prompt)
        except Exception as e:
            logger.error("Generation backend failed: %s", e)
            raise BackendFailure.from_exception(e) from e

        return self._respond(session_id, q, answer, mode, citations=result.citations())

    def _respond(self, session_id, question, answer, mode, citations=None, intent=None, degraded=False) -> Dict:
        self._sessions.append_exchange(session_id, question, answer)
        response = {
            "answer": answer,
            "mode": mode,
            "sessionId": session_id,
            "citations": citations or [],
        }
        if intent:
            response["intent"] = intent
        if degraded:
            response["degraded"] = True
        return response

    def reset(self, session_id: str) -> Dict:
        self._sessions.reset(session_id)
        return {"sessionId": session_id, "cleared": True}

    def session_info(self, session_id: str) -> Dict:
        return self._sessions.info(session_id)

    @staticmethod
    def health() -> Dict:
        return {"ok": True, "ts": now_ms()}

    def get_stats(self) -> Dict:
        """Return pipeline statistics."""
        index = self._vector_store.index if self._vector_store else None
        return {
            "chunks": self._vector_store.chunk_count if self._vector_store else 0,
            "embedding_model": index.model if index else None,
            "index_created_at": index.created_at if index else None,
            "stopwords": index.stopword_config if index else None,
            "llm_backend": self._llm.name if self._llm else "not initialized",
            "index_loaded": self.is_ready,
            "top_k": self._top_k,
            "min_score": self._min_score,
            "sessions": len(self._sessions),
        }

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def is_ready(self) -> bool:
        return self._vector_store is not None and self._vector_store.is_loaded

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized
