"""
Sliding-window chunking module.
Splits the corpus text into fixed-size, overlapping character windows.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple


@dataclass
class Chunk:
    """A span of source text with its cleaned form and embedding: the unit of retrieval."""
    id: int
    text_original: str
    text_cleaned: str
    embedding: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the record as stored in the index file."""
        return {
            "id": self.id,
            "text_original": self.text_original,
            "text_cleaned": self.text_cleaned,
            "embedding": list(self.embedding),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Chunk":
        return cls(
            id=int(data["id"]),
            text_original=data.get("text_original", ""),
            text_cleaned=data.get("text_cleaned", ""),
            embedding=[float(x) for x in data["embedding"]],
        )


def iter_windows(text_length: int, chunk_size: int, overlap: int) -> Iterator[Tuple[int, int]]:
    """
    Yield (start, end) character spans covering [0, text_length).

    Consecutive spans share exactly `overlap` characters; the last span always
    ends at text_length.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be >= 0 and smaller than chunk_size")

    start = 0
    while start < text_length:
        end = min(start + chunk_size, text_length)
        yield start, end
        if end == text_length:
            break
        start = end - overlap


def chunk_text(text: str, chunk_size: int = 1200, overlap: int = 200) -> List[str]:
    """Split text into overlapping windows, trimmed; whitespace-only windows are skipped."""
    chunks = []
    for start, end in iter_windows(len(text), chunk_size, overlap):
        piece = text[start:end].strip()
        if piece:
            chunks.append(piece)
    return chunks
