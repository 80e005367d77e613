"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - A fake embedding provider with keyword-count vectors
    - Sample documents
"""

import asyncio
from typing import Callable, Optional
from unittest.mock import patch

import pytest

from groundrag.retrieval.embeddings import EmbeddingResponse, EmbeddingSuccess

KEYWORDS = ("cat", "dog", "bark", "fish", "water")


def keyword_vector(text: str) -> list[float]:
    """Count occurrences of each keyword; a tiny, predictable embedding."""
    lowered = text.lower()
    return [float(lowered.count(keyword)) for keyword in KEYWORDS]


class FakeEmbeddingProvider:
    """
    In-memory embedding provider for tests.

    Records every batch it receives and the peak number of batches in
    flight at once. ``delay`` returns a per-batch sleep so tests can make
    batches finish out of order; ``respond`` can replace the response.
    """

    model_name = "fake-keyword-model"

    def __init__(
        self,
        delay: Optional[Callable[[list[str]], float]] = None,
        respond: Optional[Callable[[list[str]], EmbeddingResponse]] = None,
    ) -> None:
        self.delay = delay
        self.respond = respond
        self.calls: list[list[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed_batch(self, texts: list[str]) -> EmbeddingResponse:
        self.calls.append(list(texts))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                await asyncio.sleep(self.delay(texts))
            if self.respond is not None:
                return self.respond(texts)
            return EmbeddingSuccess(vectors=[self.vector_for(text) for text in texts])
        finally:
            self.in_flight -= 1

    def vector_for(self, text: str) -> list[float]:
        return keyword_vector(text)


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """Provide test settings without requiring .env file."""
    with patch.dict(
        "os.environ",
        {
            "HF_API_KEY": "test-api-key",
            "EMBEDDING_MODEL": "test-org/test-model",
            "CHUNK_SIZE": "200",
            "EMBEDDING_BATCH_SIZE": "4",
            "RETRIEVAL_TOP_K": "3",
        },
    ):
        from groundrag.config import Settings
        yield Settings()


# =============================================================================
# Provider Fixtures
# =============================================================================

@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    """Provide a fake provider returning keyword-count vectors."""
    return FakeEmbeddingProvider()


@pytest.fixture
def fake_provider_factory():
    """Provide the fake provider class for tests that need custom behaviour."""
    return FakeEmbeddingProvider


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def animal_text() -> str:
    """Provide a three-sentence document about animals."""
    return "Cats are mammals. Dogs bark loudly. Fish swim in water."


@pytest.fixture
def long_document() -> str:
    """Provide a document with sentences of varied length."""
    sentences = [
        "The cell is the basic unit of life.",
        "Plants convert sunlight into chemical energy through photosynthesis!",
        "Why do leaves change colour in autumn?",
        "Chlorophyll breaks down as days get shorter and cooler.",
        "Short one.",
        "Mitochondria, often described as the powerhouse of the cell, produce most of the "
        "chemical energy needed to power the cell's biochemical reactions.",
        "Ok.",
    ]
    return " ".join(sentences)
