"""Embedding providers.

`EmbedderBase.embed()` always returns a vector of the configured dimension;
`GeminiEmbedder` is the production provider.
"""

from issue_backfill.embedders.embedders_base import (
    EmbedderBase,
    EmbeddingError,
    EmbeddingResult,
    fallback_vector,
    fit_to_dimension,
    vector_or_fallback,
)
from issue_backfill.embedders.embedders_gemini import GeminiEmbedder

__all__ = [
    "EmbedderBase",
    "EmbeddingError",
    "EmbeddingResult",
    "GeminiEmbedder",
    "fallback_vector",
    "fit_to_dimension",
    "vector_or_fallback",
]
