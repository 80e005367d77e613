"""
Document retrieval components for the RAG pipeline.

Components:
    - chunker: Split text into sentence-respecting chunks
    - embeddings: Batch and embed texts through an external provider
    - indexer: Chunk collections and cosine top-K search
    - pipeline: Composition of the three, the entry point for callers
"""

from groundrag.retrieval.chunker import Chunk, chunk_text
from groundrag.retrieval.embeddings import (
    BatchEmbedder,
    EmbeddingFailure,
    EmbeddingProvider,
    EmbeddingSuccess,
    HuggingFaceEmbeddingProvider,
)
from groundrag.retrieval.indexer import ChunkCollection, cosine_similarity, top_k
from groundrag.retrieval.pipeline import RetrievalConfig, RetrievalPipeline, format_context

__all__ = [
    "Chunk",
    "chunk_text",
    "BatchEmbedder",
    "EmbeddingFailure",
    "EmbeddingProvider",
    "EmbeddingSuccess",
    "HuggingFaceEmbeddingProvider",
    "ChunkCollection",
    "cosine_similarity",
    "top_k",
    "RetrievalConfig",
    "RetrievalPipeline",
    "format_context",
]
