"""
Exception hierarchy for the retrieval core.

Every error raised by chunking, embedding or ranking derives from
RetrievalError, so callers can catch the whole family at once and still
branch on the specific kind (for example, back off on RateLimited but fail
hard on EmbeddingUnavailable).
"""

from typing import Optional


class RetrievalError(Exception):
    """Base exception for all retrieval errors."""

    pass


class InvalidInput(RetrievalError, ValueError):
    """
    Input rejected before any work was done.

    Raised when:
    - Source text passed to build_collection is empty or blank
    - A vector passed to similarity computation is empty
    - A size or count parameter is out of range
    """

    pass


class DimensionMismatch(InvalidInput):
    """Vectors of differing length were compared or combined."""

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        super().__init__(
            message or f"Vector dimension mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class EmbeddingError(RetrievalError):
    """Base exception for failures of the external embedding provider."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


class EmbeddingUnavailable(EmbeddingError):
    """
    The provider could not produce a usable vector for every input.

    Raised when:
    - The provider is unreachable or times out
    - The provider returns an error response
    - The response is missing, short, or has the wrong shape

    ``retryable`` is True for transient conditions (network errors, 5xx)
    and False for hard failures (bad request, malformed output).
    """

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, status_code=status_code, retry_after=retry_after)
        self.retryable = retryable


class RateLimited(EmbeddingError):
    """
    The provider signalled quota or rate-limit exhaustion.

    ``retry_after`` carries the provider's hint in seconds when it sent one.
    """

    retryable = True
