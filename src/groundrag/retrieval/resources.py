"""
Singleton resource management for the embedding provider and pipeline.

Provides cached instances built from settings so callers (the CLI, or an
application embedding this package) share one provider and pipeline. Uses
the same @lru_cache pattern as the config.py settings singleton.

Usage:
    pipeline = get_pipeline()  # First call builds, subsequent calls reuse
    clear_resource_cache()     # In tests, after changing settings
"""

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from groundrag.config import settings

if TYPE_CHECKING:
    from groundrag.retrieval.embeddings import HuggingFaceEmbeddingProvider
    from groundrag.retrieval.pipeline import RetrievalPipeline

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_embedding_provider() -> "HuggingFaceEmbeddingProvider":
    """
    Get or create the global HuggingFace embedding provider.

    Returns:
        HuggingFaceEmbeddingProvider configured from settings
    """
    from groundrag.retrieval.embeddings import HuggingFaceEmbeddingProvider

    if settings.hf_api_key_value is None:
        logger.warning("HF_API_KEY is not set; embedding requests will be unauthenticated")

    provider = HuggingFaceEmbeddingProvider(
        model=settings.embedding_model,
        api_key=settings.hf_api_key_value,
        base_url=settings.embedding_base_url,
        timeout=settings.embedding_timeout,
    )

    logger.info(f"Embedding provider initialized for model: {provider.model_name}")

    return provider


@lru_cache(maxsize=1)
def get_pipeline() -> "RetrievalPipeline":
    """
    Get or create the global retrieval pipeline.

    Returns:
        RetrievalPipeline using the global provider and settings-derived config
    """
    from groundrag.retrieval.pipeline import RetrievalConfig, RetrievalPipeline

    config = RetrievalConfig.from_settings(settings)
    logger.debug(f"Creating retrieval pipeline with {config!r}")

    return RetrievalPipeline(get_embedding_provider(), config)


def clear_resource_cache() -> None:
    """
    Clear all cached resources.

    Used in tests to reset state between test cases.
    """
    get_embedding_provider.cache_clear()
    get_pipeline.cache_clear()
    logger.debug("Resource cache cleared")
