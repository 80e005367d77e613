"""
Embedding generation through an external provider.

The provider is a remote, possibly rate-limited service. BatchEmbedder
groups texts into fixed-size batches, sends all batches concurrently and
merges the vectors back in input order. Any failed, short or malformed
batch fails the whole call.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Union, runtime_checkable

import httpx
import numpy as np
from numpy.typing import NDArray

from groundrag.config import settings
from groundrag.exceptions import (
    EmbeddingUnavailable,
    InvalidInput,
    RateLimited,
    RetrievalError,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10

_RATE_LIMIT_MARKERS = ("rate limit", "quota", "too many requests")


@dataclass(frozen=True)
class EmbeddingSuccess:
    """Provider returned one vector per input text."""

    vectors: list[list[float]] = field(repr=False)


@dataclass(frozen=True)
class EmbeddingFailure:
    """Provider could not embed the batch."""

    reason: str
    rate_limited: bool = False
    retryable: bool = False
    status_code: Optional[int] = None
    retry_after: Optional[float] = None


EmbeddingResponse = Union[EmbeddingSuccess, EmbeddingFailure]


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding model providers.

    Implementations embed one batch per call and report failures as an
    EmbeddingFailure value instead of raising.
    """

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    async def embed_batch(self, texts: list[str]) -> EmbeddingResponse:
        """Embed a batch of texts, one vector per text, in order."""
        ...


class HuggingFaceEmbeddingProvider:
    """
    Embedding provider backed by the HuggingFace feature-extraction API.

    Sends one POST per batch and never retries; rate limits and transport
    errors come back as EmbeddingFailure so the caller can decide.

    Example:
        >>> provider = HuggingFaceEmbeddingProvider()
        >>> response = await provider.embed_batch(["What is a cat?"])
        >>> len(response.vectors)
        1
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            model: HuggingFace model ID (default from settings)
            api_key: HuggingFace API key (default from settings)
            base_url: Feature-extraction endpoint (default from settings)
            timeout: Request timeout in seconds (default from settings)
        """
        self.model = model or settings.embedding_model
        self.api_key = api_key or settings.hf_api_key_value
        self.base_url = (base_url or settings.embedding_base_url).rstrip("/")
        self.timeout = timeout or settings.embedding_timeout

    @property
    def model_name(self) -> str:
        return self.model

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.model}"

    async def embed_batch(self, texts: list[str]) -> EmbeddingResponse:
        """
        Embed a single batch of texts.

        Args:
            texts: Texts to embed

        Returns:
            EmbeddingSuccess with one vector per text, or EmbeddingFailure
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {"inputs": texts}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            return EmbeddingFailure(reason=f"Embedding request timed out: {e}", retryable=True)
        except httpx.HTTPError as e:
            return EmbeddingFailure(reason=f"Embedding request failed: {e}", retryable=True)

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> EmbeddingResponse:
        """
        Map an HTTP response onto the typed provider contract.

        Args:
            response: Raw response from the feature-extraction endpoint

        Returns:
            EmbeddingSuccess or EmbeddingFailure
        """
        status_code = response.status_code

        if response.is_error:
            detail = response.text[:200]
            rate_limited = status_code == 429 or any(
                marker in detail.lower() for marker in _RATE_LIMIT_MARKERS
            )
            return EmbeddingFailure(
                reason=f"Embedding provider returned HTTP {status_code}: {detail}",
                rate_limited=rate_limited,
                retryable=rate_limited or status_code >= 500,
                status_code=status_code,
                retry_after=_parse_retry_after(response),
            )

        try:
            body = response.json()
        except ValueError:
            return EmbeddingFailure(
                reason="Embedding provider returned a non-JSON body",
                status_code=status_code,
            )

        if not isinstance(body, list):
            return EmbeddingFailure(
                reason=f"Embedding provider returned {type(body).__name__}, expected a list of vectors",
                status_code=status_code,
            )

        return EmbeddingSuccess(vectors=body)


class BatchEmbedder:
    """
    Batch texts and embed them concurrently through a provider.

    Output order always matches input order, regardless of the order in
    which batches complete.

    Example:
        >>> embedder = BatchEmbedder(HuggingFaceEmbeddingProvider(), batch_size=10)
        >>> vectors = await embedder.aembed(["first", "second"])
        >>> vectors.shape
        (2, 768)
    """

    def __init__(self, provider: EmbeddingProvider, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """
        Initialize the embedder.

        Args:
            provider: Embedding provider that handles one batch per call
            batch_size: Number of texts per provider call
        """
        if batch_size <= 0:
            raise InvalidInput(f"batch_size must be positive, got {batch_size}")

        self.provider = provider
        self.batch_size = batch_size

    async def aembed(self, texts: list[str]) -> NDArray[np.float64]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: Texts to embed

        Returns:
            Array of shape (len(texts), dimension); (0, 0) for no texts

        Raises:
            RateLimited: If the provider signalled a rate limit for any batch
            EmbeddingUnavailable: If any batch failed or came back malformed
        """
        if not texts:
            return np.empty((0, 0), dtype=np.float64)

        batches = [
            list(texts[i : i + self.batch_size])
            for i in range(0, len(texts), self.batch_size)
        ]
        logger.debug(
            "Embedding %d texts in %d batches with %s",
            len(texts),
            len(batches),
            self.provider.model_name,
        )

        # One task per batch; gather returns results in batch order
        tasks = [asyncio.ensure_future(self._embed_batch(batch)) for batch in batches]
        try:
            batch_results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        dimension = batch_results[0].shape[1]
        for position, result in enumerate(batch_results):
            if result.shape[1] != dimension:
                raise EmbeddingUnavailable(
                    f"Batch {position} returned vectors of dimension {result.shape[1]}, "
                    f"expected {dimension}"
                )

        return np.vstack(batch_results)

    def embed(self, texts: list[str]) -> NDArray[np.float64]:
        """Synchronous version of aembed."""
        return asyncio.run(self.aembed(texts))

    async def _embed_batch(self, texts: list[str]) -> NDArray[np.float64]:
        """
        Embed one batch and validate the provider's response.

        Args:
            texts: Texts of this batch

        Returns:
            Array of shape (len(texts), dimension)
        """
        try:
            response = await self.provider.embed_batch(texts)
        except RetrievalError:
            raise
        except Exception as e:
            logger.warning("Embedding provider raised: %s", e)
            raise EmbeddingUnavailable(f"Embedding provider raised: {e}") from e

        if isinstance(response, EmbeddingFailure):
            logger.warning("Embedding batch failed: %s", response.reason)
            if response.rate_limited:
                raise RateLimited(
                    response.reason,
                    status_code=response.status_code,
                    retry_after=response.retry_after,
                )
            raise EmbeddingUnavailable(
                response.reason,
                retryable=response.retryable,
                status_code=response.status_code,
                retry_after=response.retry_after,
            )

        if not isinstance(response, EmbeddingSuccess):
            raise EmbeddingUnavailable(
                f"Embedding provider returned unexpected response type {type(response).__name__}"
            )

        return _to_matrix(response.vectors, expected_rows=len(texts))


def _to_matrix(vectors: list[list[float]], expected_rows: int) -> NDArray[np.float64]:
    """
    Convert provider vectors to a validated 2-D array.

    Raises:
        EmbeddingUnavailable: If the vectors are short, ragged, empty,
            non-numeric or non-finite
    """
    try:
        got = len(vectors)
    except TypeError:
        got = 0

    if got != expected_rows:
        raise EmbeddingUnavailable(
            f"Embedding provider returned {got} vectors for {expected_rows} texts"
        )

    try:
        matrix = np.asarray(vectors, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise EmbeddingUnavailable(f"Embedding provider returned malformed vectors: {e}") from e

    if matrix.ndim != 2 or matrix.shape[1] == 0:
        raise EmbeddingUnavailable(
            f"Embedding provider returned vectors of shape {matrix.shape}, "
            f"expected ({expected_rows}, dimension)"
        )

    if not np.all(np.isfinite(matrix)):
        raise EmbeddingUnavailable("Embedding provider returned non-finite values")

    return matrix


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Read a Retry-After header given in seconds."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
