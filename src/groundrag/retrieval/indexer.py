"""
In-memory chunk collection and exact cosine similarity search.

A collection holds the chunks of one source document. Queries scan every
chunk (O(n * dimension)); this is intended for a single uploaded document
chunked to at most a few hundred entries, not for large corpora.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple, Union, overload

import numpy as np
from numpy.typing import ArrayLike, NDArray

from groundrag.exceptions import DimensionMismatch, InvalidInput
from groundrag.retrieval.chunker import Chunk


class ScoredMatch(NamedTuple):
    position: int
    score: float


class ChunkCollection:
    """
    Immutable, ordered set of chunks sharing one embedding dimension.

    Insertion order is preserved so chunk positions stay stable; ranking
    never depends on it except to break ties.

    Example:
        >>> collection = ChunkCollection.from_embeddings(texts, embeddings)
        >>> len(collection)
        3
        >>> collection.dimension
        768
    """

    def __init__(self, chunks: Iterable[Chunk] = ()) -> None:
        """
        Build a collection from chunks.

        Args:
            chunks: Chunks in source order

        Raises:
            DimensionMismatch: If the chunks have differing embedding dimensions
        """
        self._chunks: tuple[Chunk, ...] = tuple(chunks)

        if self._chunks:
            dimension = self._chunks[0].dimension
            for chunk in self._chunks[1:]:
                if chunk.dimension != dimension:
                    raise DimensionMismatch(dimension, chunk.dimension)
            matrix = np.vstack([chunk.embedding for chunk in self._chunks])
        else:
            matrix = np.empty((0, 0), dtype=np.float64)

        matrix.flags.writeable = False
        self._matrix: NDArray[np.float64] = matrix

    @classmethod
    def from_embeddings(
        cls,
        texts: Sequence[str],
        embeddings: ArrayLike,
    ) -> "ChunkCollection":
        """
        Zip texts and embeddings positionally into a collection.

        Args:
            texts: Chunk texts in order
            embeddings: Array of shape (len(texts), dimension)

        Returns:
            ChunkCollection with one chunk per text

        Raises:
            InvalidInput: If texts and embeddings have different lengths
        """
        matrix = np.asarray(embeddings, dtype=np.float64)

        if len(texts) == 0 and matrix.size == 0:
            return cls()

        if matrix.ndim != 2 or matrix.shape[0] != len(texts):
            raise InvalidInput(
                f"Texts and embeddings must have same length: "
                f"got {len(texts)} texts and embeddings of shape {matrix.shape}"
            )

        return cls(Chunk(text=text, embedding=vector) for text, vector in zip(texts, matrix))

    @property
    def dimension(self) -> int:
        """Embedding dimension shared by all chunks (0 when empty)."""
        return int(self._matrix.shape[1])

    @property
    def embeddings(self) -> NDArray[np.float64]:
        """Read-only matrix of shape (len(self), dimension)."""
        return self._matrix

    @property
    def texts(self) -> list[str]:
        return [chunk.text for chunk in self._chunks]

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self._chunks)

    @overload
    def __getitem__(self, index: int) -> Chunk: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Chunk, ...]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Chunk, tuple[Chunk, ...]]:
        return self._chunks[index]

    def __repr__(self) -> str:
        return f"ChunkCollection(size={len(self)}, dimension={self.dimension})"


def cosine_similarity(a: ArrayLike, b: ArrayLike) -> float:
    """
    Cosine of the angle between two vectors.

    A zero-magnitude vector is dissimilar to everything, itself included,
    so any comparison involving one returns exactly 0.0.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1]

    Raises:
        InvalidInput: If either vector is empty, not 1-D or not finite
        DimensionMismatch: If the vectors have different lengths
    """
    va = _as_vector(a)
    vb = _as_vector(b)

    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatch(va.shape[0], vb.shape[0])

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    return min(1.0, max(-1.0, similarity))


def top_k(query: ArrayLike, collection: ChunkCollection, k: int) -> list[Chunk]:
    """
    Return the k chunks most similar to the query.

    Args:
        query: Query vector
        collection: Candidate chunks
        k: Number of chunks to return

    Returns:
        min(k, len(collection)) chunks sorted by similarity descending

    Raises:
        InvalidInput: If k is negative
        DimensionMismatch: If the query dimension differs from the collection's
    """
    if k < 0:
        raise InvalidInput(f"k must be non-negative, got {k}")
    if k == 0:
        return []

    return [collection[match.position] for match in _score(query, collection)[:k]]


def _score(query: ArrayLike, collection: ChunkCollection) -> list[ScoredMatch]:
    """Compute all similarity scores and stable-sort them descending."""
    vector = _as_vector(query)

    if len(collection) == 0:
        return []

    if vector.shape[0] != collection.dimension:
        raise DimensionMismatch(collection.dimension, vector.shape[0])

    matrix = collection.embeddings
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(vector)
    dots = matrix @ vector
    scores = np.divide(
        dots,
        denominators,
        out=np.zeros_like(dots),
        where=denominators != 0,
    )
    scores = np.clip(scores, -1.0, 1.0)

    order = np.argsort(-scores, kind="stable")
    return [ScoredMatch(int(position), float(scores[position])) for position in order]


def _as_vector(value: ArrayLike) -> NDArray[np.float64]:
    vector = np.asarray(value, dtype=np.float64)
    if vector.ndim != 1 or vector.size == 0:
        raise InvalidInput(f"Expected a non-empty 1-D vector, got shape {vector.shape}")
    if not np.all(np.isfinite(vector)):
        raise InvalidInput("Vector contains NaN or infinite values")
    return vector
