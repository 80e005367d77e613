"""
Retrieval pipeline: chunk, embed and rank.

This is the entry point for callers. It composes the chunker, the batch
embedder and the similarity index so texts and vectors always stay aligned
by position and every vector in a collection has the same dimension.

Usage:
    pipeline = RetrievalPipeline(HuggingFaceEmbeddingProvider())
    collection = pipeline.build_collection(document_text)
    chunks = pipeline.retrieve("How do fish breathe?", collection, k=3)
    context = format_context(chunks)
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Optional, Union

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from groundrag.exceptions import InvalidInput
from groundrag.retrieval.chunker import DEFAULT_CHUNK_SIZE, Chunk, chunk_text
from groundrag.retrieval.embeddings import DEFAULT_BATCH_SIZE, BatchEmbedder, EmbeddingProvider
from groundrag.retrieval.indexer import ChunkCollection, top_k

if TYPE_CHECKING:
    from groundrag.config import Settings

logger = logging.getLogger(__name__)

Query = Union[str, NDArray[np.float64], list[float]]


class RetrievalConfig(BaseModel):
    """Tunable parameters of a pipeline."""

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        description="Maximum characters per chunk",
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        ge=1,
        description="Number of texts per embedding request",
    )
    top_k: int = Field(
        default=5,
        ge=0,
        description="Default number of chunks returned by retrieve",
    )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetrievalConfig":
        """Build a config from application settings."""
        return cls(
            chunk_size=settings.chunk_size,
            batch_size=settings.embedding_batch_size,
            top_k=settings.retrieval_top_k,
        )


class RetrievalPipeline:
    """
    Build chunk collections from raw text and query them.

    The pipeline holds no per-document state: each collection is returned
    to the caller, who owns its lifetime.

    Example:
        >>> pipeline = RetrievalPipeline(provider, RetrievalConfig(chunk_size=20))
        >>> collection = pipeline.build_collection("Cats are mammals. Dogs bark loudly.")
        >>> [chunk.text for chunk in pipeline.retrieve("barking", collection, k=1)]
        ['Dogs bark loudly.']
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        config: Optional[RetrievalConfig] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            provider: Embedding provider used for both chunks and queries
            config: Pipeline parameters (defaults if omitted)
        """
        self.config = config or RetrievalConfig()
        self.embedder = BatchEmbedder(provider, batch_size=self.config.batch_size)

    async def abuild_collection(self, raw_text: str) -> ChunkCollection:
        """
        Chunk and embed a source document.

        Args:
            raw_text: Full text of the source document

        Returns:
            ChunkCollection with one chunk per text segment

        Raises:
            InvalidInput: If raw_text is empty or blank
            RateLimited: If the provider signalled a rate limit
            EmbeddingUnavailable: If any embedding batch failed
        """
        if not raw_text or not raw_text.strip():
            raise InvalidInput("Source text is required")

        texts = chunk_text(raw_text, self.config.chunk_size)
        embeddings = await self.embedder.aembed(texts)
        collection = ChunkCollection.from_embeddings(texts, embeddings)

        logger.info(
            "Built collection of %d chunks (dimension %d)",
            len(collection),
            collection.dimension,
        )
        return collection

    async def aretrieve(
        self,
        query: Query,
        collection: ChunkCollection,
        k: Optional[int] = None,
    ) -> list[Chunk]:
        """
        Retrieve the chunks most relevant to a query.

        Args:
            query: Query text, or a precomputed query vector
            collection: Collection built by this pipeline
            k: Number of chunks to return (default from config)

        Returns:
            Up to k chunks sorted by similarity descending

        Raises:
            InvalidInput: If a text query is blank or k is negative
            DimensionMismatch: If the query vector does not match the collection
            RateLimited: If embedding the query hit a rate limit
            EmbeddingUnavailable: If embedding the query failed
        """
        if k is None:
            k = self.config.top_k

        if isinstance(query, str):
            if not query.strip():
                raise InvalidInput("Query text is required")
            vector = (await self.embedder.aembed([query]))[0]
        else:
            vector = np.asarray(query, dtype=np.float64)

        results = top_k(vector, collection, k)
        logger.debug("Retrieved %d of %d chunks", len(results), len(collection))
        return results

    def build_collection(self, raw_text: str) -> ChunkCollection:
        """Synchronous version of abuild_collection."""
        return asyncio.run(self.abuild_collection(raw_text))

    def retrieve(
        self,
        query: Query,
        collection: ChunkCollection,
        k: Optional[int] = None,
    ) -> list[Chunk]:
        """Synchronous version of aretrieve."""
        return asyncio.run(self.aretrieve(query, collection, k))


def format_context(chunks: Iterable[Chunk], separator: str = "\n\n") -> str:
    """
    Join chunk texts into a context string for a generator prompt.

    Args:
        chunks: Retrieved chunks, most relevant first
        separator: Text placed between chunks

    Returns:
        The joined chunk texts
    """
    return separator.join(chunk.text for chunk in chunks)
