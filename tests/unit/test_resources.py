"""Unit tests for retrieval.resources module."""

import pytest

from groundrag.config import settings
from groundrag.retrieval.embeddings import HuggingFaceEmbeddingProvider
from groundrag.retrieval.pipeline import RetrievalPipeline
from groundrag.retrieval.resources import (
    clear_resource_cache,
    get_embedding_provider,
    get_pipeline,
)


@pytest.fixture(autouse=True)
def reset_resources():
    clear_resource_cache()
    yield
    clear_resource_cache()


@pytest.mark.unit
class TestResources:
    """Tests for cached resource accessors."""

    def test_embedding_provider_from_settings(self):
        provider = get_embedding_provider()

        assert isinstance(provider, HuggingFaceEmbeddingProvider)
        assert provider.model_name == settings.embedding_model
        assert provider.base_url == settings.embedding_base_url

    def test_embedding_provider_is_cached(self):
        assert get_embedding_provider() is get_embedding_provider()

    def test_pipeline_uses_cached_provider(self):
        pipeline = get_pipeline()

        assert isinstance(pipeline, RetrievalPipeline)
        assert pipeline.embedder.provider is get_embedding_provider()
        assert pipeline.config.chunk_size == settings.chunk_size
        assert pipeline.config.batch_size == settings.embedding_batch_size
        assert pipeline.config.top_k == settings.retrieval_top_k

    def test_pipeline_is_cached(self):
        assert get_pipeline() is get_pipeline()

    def test_clear_resource_cache(self):
        provider = get_embedding_provider()
        pipeline = get_pipeline()

        clear_resource_cache()

        assert get_embedding_provider() is not provider
        assert get_pipeline() is not pipeline
