"""
Sentence-respecting text chunking.

Splits raw text into bounded-size chunks while keeping sentences whole:
    - Sentences end at '.', '!' or '?'
    - Sentences are packed greedily up to the size limit
    - Text without any sentence terminator is sliced at fixed width

Chunking is pure and deterministic; embeddings are later matched to chunks
by position, so the same input must always yield the same sequence.
"""

import re
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from groundrag.exceptions import InvalidInput

DEFAULT_CHUNK_SIZE = 500

_SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")


@dataclass(frozen=True)
class Chunk:
    """A unit of retrievable context: trimmed text plus its embedding."""

    text: str
    """The trimmed, non-empty text of the chunk."""

    embedding: NDArray[np.float64] = field(repr=False, compare=False)
    """Read-only 1-D embedding vector of the chunk text."""

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise InvalidInput("Chunk text must be non-empty")
        if self.text != self.text.strip():
            object.__setattr__(self, "text", self.text.strip())

        vector = np.array(self.embedding, dtype=np.float64)
        if vector.ndim != 1 or vector.size == 0:
            raise InvalidInput(
                f"Chunk embedding must be a non-empty 1-D vector, got shape {vector.shape}"
            )
        if not np.all(np.isfinite(vector)):
            raise InvalidInput("Chunk embedding contains NaN or infinite values")
        vector.flags.writeable = False
        object.__setattr__(self, "embedding", vector)

    @property
    def dimension(self) -> int:
        """Length of the embedding vector."""
        return int(self.embedding.shape[0])


def chunk_text(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """
    Split text into sentence-respecting chunks.

    Sentences are appended to the current chunk, separated by a single
    space, until adding the next one would exceed max_chunk_size. A
    sentence longer than max_chunk_size on its own becomes its own chunk
    and is never split. Text after the last terminator is treated as a
    final sentence.

    Args:
        text: Raw text to chunk
        max_chunk_size: Maximum characters per chunk

    Returns:
        Ordered list of non-empty, trimmed chunk strings

    Raises:
        InvalidInput: If max_chunk_size <= 0
    """
    if max_chunk_size <= 0:
        raise InvalidInput(f"max_chunk_size must be positive, got {max_chunk_size}")

    # Handle empty or whitespace-only input
    if not text or not text.strip():
        return []

    sentences = _split_sentences(text)

    # No terminators anywhere: slice at fixed width
    if not sentences:
        return _slice_fixed_width(text, max_chunk_size)

    chunks: list[str] = []
    current = ""

    for sentence in sentences:
        if current and len(current) + len(sentence) + 1 > max_chunk_size:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence

    if current:
        chunks.append(current)

    return chunks


def _split_sentences(text: str) -> list[str]:
    """
    Split text into trimmed sentences.

    Args:
        text: Raw text

    Returns:
        Sentences in order, including any leading terminators and a
        trailing unterminated remainder. Empty if no sentence is found.
    """
    sentences: list[str] = []
    start = end = 0

    for match in _SENTENCE_PATTERN.finditer(text):
        if not sentences:
            start = match.start()
        sentences.append(match.group().strip())
        end = match.end()

    if not sentences:
        return []

    # Terminators before the first sentence, e.g. a leading ellipsis
    leading = text[:start].strip()
    if leading:
        sentences.insert(0, leading)

    remainder = text[end:].strip()
    if remainder:
        sentences.append(remainder)

    return sentences


def _slice_fixed_width(text: str, width: int) -> list[str]:
    """
    Slice text into consecutive windows of exactly `width` characters.

    Word boundaries are not respected. Windows that are blank after
    trimming are dropped.
    """
    pieces = (text[i : i + width].strip() for i in range(0, len(text), width))
    return [piece for piece in pieces if piece]
