"""
Base Embedder Interface

Defines the contract for embedding providers used by the backfill.
Every vector leaving an embedder has exactly the configured dimension:
provider output is padded or truncated, and any provider failure is
replaced by a constant fallback vector so ingestion never stops on a
single bad embedding.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 1024
DEFAULT_FALLBACK_VALUE = 0.01

FailureReason = Literal["transport", "provider", "malformed", "missing_values"]


@dataclass(frozen=True)
class EmbeddingError:
    """Why a provider call did not yield a vector."""

    reason: FailureReason
    message: str


@dataclass(frozen=True)
class EmbeddingResult:
    """Outcome of a single provider call: a raw vector or an error."""

    values: list[float] | None = None
    error: EmbeddingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.values is not None

    @classmethod
    def success(cls, values: list[float]) -> EmbeddingResult:
        return cls(values=values)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> EmbeddingResult:
        return cls(error=EmbeddingError(reason=reason, message=message))


def is_finite_number(value: object) -> bool:
    """True for real, finite ints and floats; bools, strings and nested lists are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def fit_to_dimension(values: list[float], dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """
    Right-pad with zeros or truncate a vector to exactly `dimension` entries.

    Args:
        values: Raw provider vector
        dimension: Target length

    Returns:
        List of floats of length `dimension`
    """
    vector = np.asarray(values, dtype=np.float64).ravel()
    if vector.size > dimension:
        vector = vector[:dimension]
    elif vector.size < dimension:
        vector = np.pad(vector, (0, dimension - vector.size))
    return vector.tolist()


def fallback_vector(
    dimension: int = DEFAULT_DIMENSION,
    value: float = DEFAULT_FALLBACK_VALUE,
) -> list[float]:
    """Constant vector stored when the provider cannot produce one."""
    return np.full(dimension, value, dtype=np.float64).tolist()


def vector_or_fallback(
    result: EmbeddingResult,
    dimension: int = DEFAULT_DIMENSION,
    fallback_value: float = DEFAULT_FALLBACK_VALUE,
) -> list[float]:
    """
    Convert a provider result into a storable vector.

    Failures are logged at WARNING and mapped to the fallback vector.
    """
    if not result.ok:
        error = result.error
        if error is not None:
            logger.warning(f"Embedding failed ({error.reason}): {error.message}; using fallback vector")
        else:
            logger.warning("Embedding returned no values; using fallback vector")
        return fallback_vector(dimension, fallback_value)
    bad = [v for v in result.values if not is_finite_number(v)]
    if bad:
        logger.warning(
            f"Embedding failed (malformed): {len(bad)} non-finite values, first {bad[0]!r}; using fallback vector"
        )
        return fallback_vector(dimension, fallback_value)
    return fit_to_dimension(result.values, dimension)


class EmbedderBase(ABC):
    """
    Abstract base class for embedding providers.

    Subclasses implement `try_embed`; `embed` applies the dimension
    and fallback policy and never raises.
    """

    def __init__(
        self,
        dimension: int = DEFAULT_DIMENSION,
        fallback_value: float = DEFAULT_FALLBACK_VALUE,
    ):
        self.dimension = dimension
        self.fallback_value = fallback_value

    @abstractmethod
    def try_embed(self, text: str) -> EmbeddingResult:
        """
        Make one provider call for `text`.

        Must not raise; every failure is reported as an EmbeddingResult error.
        """
        pass

    def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Vector of exactly `self.dimension` floats
        """
        try:
            result = self.try_embed(text)
        except Exception as e:
            result = EmbeddingResult.failure("transport", str(e))
        return vector_or_fallback(result, self.dimension, self.fallback_value)

    @property
    def embedding_dimension(self) -> int:
        """Dimension of every vector returned by `embed`."""
        return self.dimension

    def close(self) -> None:
        """Release provider resources."""
        pass
