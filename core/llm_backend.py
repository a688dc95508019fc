"""
Pluggable LLM backend module.
Provides abstract interface and concrete implementations for answer generation.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional

from core.errors import ConfigurationError
from core.prompts import refusal_sentence
from core.text_cleaner import clean

logger = logging.getLogger(__name__)


class LLMBackend(ABC):
    """Abstract base class for LLM backends."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a completion for a single text prompt."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend name."""
        pass


class MockLLMBackend(LLMBackend):
    """
    Rule-based mock LLM backend.
    Answers with the sentences of the numbered context blocks that best overlap the question.
    No external API or heavy model required.
    """

    _QUESTION_RE = re.compile(r"QUESTION:\s*(.+?)\n\s*\n?CONTEXT", re.DOTALL)
    _BLOCK_RE = re.compile(r"【(\d+)】\s*(.*?)(?=\n\n【\d+】|\n\nFormat:|\Z)", re.DOTALL)
    _REFUSAL_RE = re.compile(r'reply exactly:\s*\n"(.+?)"')

    def __init__(self, max_sentences: int = 3, max_chars: int = 400):
        self._max_sentences = max_sentences
        self._max_chars = max_chars

    @property
    def name(self) -> str:
        return "mock"

    def generate(self, prompt: str) -> str:
        question = self._extract_question(prompt)
        blocks = [text.strip() for _, text in self._BLOCK_RE.findall(prompt)]
        refusal = self._extract_refusal(prompt)

        keywords = set(clean(question).split())
        for block in blocks:
            passage = self._best_passage(block, keywords)
            if passage:
                return passage
        return refusal

    def _extract_question(self, prompt: str) -> str:
        match = self._QUESTION_RE.search(prompt)
        return match.group(1).strip() if match else ""

    def _extract_refusal(self, prompt: str) -> str:
        match = self._REFUSAL_RE.search(prompt)
        return match.group(1) if match else refusal_sentence()

    def _best_passage(self, text: str, keywords: set) -> str:
        """Pick up to max_sentences sentences sharing the most keywords with the question."""
        text = re.sub(r"\s+", " ", text)
        sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", text) if len(s.strip()) >= 15]

        scored = []
        for position, sent in enumerate(sentences):
            overlap = len(keywords & set(clean(sent).split()))
            if overlap:
                scored.append((overlap, -position, sent))
        if not scored:
            return ""

        scored.sort(reverse=True)
        picked, total = [], 0
        for _, _, sent in scored[: self._max_sentences]:
            if picked and total + len(sent) > self._max_chars:
                break
            picked.append(sent)
            total += len(sent)
        return " ".join(picked)


class TransformersBackend(LLMBackend):
    """
    HuggingFace Transformers backend.
    Uses a local seq2seq model for generation (e.g., google/flan-t5-base).
    """

    def __init__(self, model_name: str = "google/flan-t5-base"):
        self._model_name = model_name
        self._model = None
        self._tokenizer = None

    @property
    def name(self) -> str:
        return "transformers"

    def _load_model(self):
        if self._model is None:
            from transformers import AutoTokenizer, AutoModelForSeq2SeqLM
            logger.info("Loading LLM: %s", self._model_name)
            self._tokenizer = AutoTokenizer.from_pretrained(self._model_name)
            self._model = AutoModelForSeq2SeqLM.from_pretrained(self._model_name)

    def generate(self, prompt: str) -> str:
        self._load_model()
        inputs = self._tokenizer(prompt, return_tensors="pt", max_length=512, truncation=True)
        outputs = self._model.generate(**inputs, max_new_tokens=256)
        return self._tokenizer.decode(outputs[0], skip_special_tokens=True)


class GeminiBackend(LLMBackend):
    """Google Gemini generation backend. Requires GOOGLE_API_KEY."""

    def __init__(self, model: str = "gemini-2.5-flash", api_key: Optional[str] = None):
        if not api_key:
            raise ConfigurationError("Missing GOOGLE_API_KEY for the Gemini generation backend")
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        self._model_name = model
        self._model = genai.GenerativeModel(model)

    @property
    def name(self) -> str:
        return f"gemini:{self._model_name}"

    def generate(self, prompt: str) -> str:
        response = self._model.generate_content(prompt)
        return response.text


LLM_BACKENDS: List[str] = ["mock", "transformers", "gemini"]


def get_llm_backend(
    backend_name: str = "mock",
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMBackend:
    """Factory to create an LLM backend by name."""
    if backend_name == "mock":
        return MockLLMBackend()
    if backend_name == "transformers":
        return TransformersBackend(model_name) if model_name else TransformersBackend()
    if backend_name == "gemini":
        return GeminiBackend(model_name or "gemini-2.5-flash", api_key=api_key)
    raise ValueError(f"Unknown LLM backend: {backend_name}. Available: {LLM_BACKENDS}")
