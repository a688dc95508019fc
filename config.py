"""
Central configuration for the Knowledge Base Assistant.
All tuneable parameters in one place, overridable through the environment (.env supported).
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# ── Paths ──────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
DOCUMENT_PATH = Path(os.getenv("PDF_PATH", str(DATA_DIR / "knowledge.pdf")).replace("\\", "/"))
INDEX_PATH = Path(os.getenv("INDEX_PATH", str(DATA_DIR / "index.json")))

# ── Embedding ──────────────────────────────────────────────────────────────
EMBEDDING_BACKEND = os.getenv("EMBEDDING_BACKEND", "sentence-transformers")   # "sentence-transformers" | "gemini"
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")
EMBEDDING_BATCH_SIZE = _env_int("EMBEDDING_BATCH_SIZE", 64)                   # backend batch limit

# ── Chunking ──────────────────────────────────────────────────────────────
CHUNK_SIZE = _env_int("CHUNK_SIZE", 1200)        # characters per window
CHUNK_OVERLAP = _env_int("CHUNK_OVERLAP", 200)   # characters shared by consecutive windows

# ── Retrieval ─────────────────────────────────────────────────────────────
TOP_K = _env_int("TOP_K", 6)
MIN_SCORE = _env_float("MIN_SCORE", 0.25)        # below this the top hit is not trusted

# ── Language detection ────────────────────────────────────────────────────
HINGLISH_THRESHOLD = _env_float("HINGLISH_THRESHOLD", 2.0)

# ── LLM Backend ───────────────────────────────────────────────────────────
LLM_BACKEND = os.getenv("LLM_BACKEND", "mock")   # "mock" | "transformers" | "gemini"
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "gemini-2.5-flash")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")

ORG_NAME = os.getenv("ORG_NAME", "HCA")

# ── Sessions ──────────────────────────────────────────────────────────────
SESSION_COOKIE_NAME = "sid"
SESSION_HEADER = "X-Session-ID"
SESSION_ID_MAX_LENGTH = 200
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 30      # 30 days, in seconds
COOKIE_SECURE = _env_flag("COOKIE_SECURE")
SESSION_TTL_SECONDS = _env_int("SESSION_TTL_SECONDS", 0)   # 0 keeps sessions for the process lifetime

# ── Web Server ────────────────────────────────────────────────────────────
WEB_HOST = os.getenv("WEB_HOST", "127.0.0.1")
WEB_PORT = _env_int("PORT", 5173)

# ── Logging ───────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging() -> None:
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format=LOG_FORMAT)
