"""
groundrag: passage retrieval for grounding LLM generation

This package finds, within a user-supplied document, the passages most
relevant to a query so a downstream generator can be grounded in them.

Key Components:
    - retrieval.chunker: Sentence-respecting text chunking
    - retrieval.embeddings: Batched, concurrent calls to an embedding provider
    - retrieval.indexer: In-memory cosine similarity top-K search
    - retrieval.pipeline: Build a collection from text, then query it
    - exceptions: InvalidInput, EmbeddingUnavailable, RateLimited, ...

Example:
    >>> from groundrag import RetrievalPipeline, format_context
    >>> from groundrag.retrieval import HuggingFaceEmbeddingProvider
    >>> pipeline = RetrievalPipeline(HuggingFaceEmbeddingProvider())
    >>> collection = pipeline.build_collection(document_text)
    >>> print(format_context(pipeline.retrieve("photosynthesis", collection)))
"""

__version__ = "0.1.0"

from groundrag.config import settings
from groundrag.exceptions import (
    DimensionMismatch,
    EmbeddingUnavailable,
    InvalidInput,
    RateLimited,
    RetrievalError,
)
from groundrag.retrieval.pipeline import RetrievalConfig, RetrievalPipeline, format_context

__all__ = [
    "__version__",
    "settings",
    "DimensionMismatch",
    "EmbeddingUnavailable",
    "InvalidInput",
    "RateLimited",
    "RetrievalError",
    "RetrievalConfig",
    "RetrievalPipeline",
    "format_context",
]
