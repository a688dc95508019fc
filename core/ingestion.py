"""
Document ingestion module.
Loads the knowledge document (PDF or plain text) and returns normalized plain text.
"""

import logging
import re
from pathlib import Path

import fitz  # PyMuPDF

from core.errors import IndexBuildError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".pdf", ".txt", ".md")


def normalize_whitespace(text: str) -> str:
    """Drop carriage returns and collapse runs of blank lines into a single blank line."""
    text = text.replace("\r", "")
    text = re.sub(r"\n{2,}", "\n\n", text)
    return text.strip()


def _read_pdf(path: Path) -> str:
    try:
        doc = fitz.open(str(path))
    except Exception as e:
        raise IndexBuildError(f"Could not open PDF {path}: {e}") from e

    try:
        pages = [page.get_text("text") for page in doc]
    finally:
        doc.close()

    logger.info("Read %d pages from %s", len(pages), path.name)
    return "\n".join(pages)


def load_document(path: Path) -> str:
    """
    Extract and normalize the text of a single source document.
    Raises IndexBuildError when the file is missing, unsupported, unreadable or empty.
    """
    path = Path(path)
    if not path.is_file():
        raise IndexBuildError(
            f"Document not found at {path}. Place it at data/knowledge.pdf or set PDF_PATH."
        )

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise IndexBuildError(f"Unsupported document type '{suffix}' (expected one of {SUPPORTED_SUFFIXES})")

    if suffix == ".pdf":
        raw = _read_pdf(path)
    else:
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise IndexBuildError(f"Could not read {path}: {e}") from e

    text = normalize_whitespace(raw)
    if not text:
        raise IndexBuildError(f"No extractable text in {path}")
    return text
