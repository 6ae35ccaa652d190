"""Google Gemini embedding provider.

Calls the Generative Language REST API `embedContent` endpoint with an
httpx client. One request per text, no retries; failures come back as
EmbeddingResult errors and become fallback vectors in `embed()`.

Usage:
    from issue_backfill.embedders import GeminiEmbedder

    with GeminiEmbedder(config.embedding) as embedder:
        vector = embedder.embed("Crash on startup ...")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from issue_backfill.embedders.embedders_base import EmbedderBase, EmbeddingResult

if TYPE_CHECKING:
    import httpx

    from issue_backfill.cli.config import EmbeddingConfig

logger = logging.getLogger(__name__)


class GeminiEmbedder(EmbedderBase):
    """Embedder backed by the Gemini `text-embedding-004` model.

    Attributes:
        model_name: Fully qualified model id (e.g. "models/text-embedding-004")
        base_url: API root, without the model path
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        config: EmbeddingConfig,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the embedder.

        Args:
            config: Embedding settings (key, model, dimension, fallback)
            client: Optional preconfigured httpx client (tests inject a mock transport)
        """
        super().__init__(dimension=config.dimension, fallback_value=config.fallback_value)
        self.api_key = config.api_key
        self.model_name = config.model_name
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None:
            import httpx

            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model_name}:embedContent"

    def embed_content(self, text: str) -> dict[str, Any]:
        """POST one embedContent request and return the decoded JSON body.

        Raises:
            httpx.HTTPError: On transport failure
            ValueError: If the body is not JSON
        """
        response = self._get_client().post(
            self.endpoint,
            params={"key": self.api_key},
            json={
                "model": self.model_name,
                "content": {"parts": [{"text": text}]},
            },
        )
        return response.json()

    def try_embed(self, text: str) -> EmbeddingResult:
        """Make one provider call and classify the outcome."""
        import httpx

        try:
            data = self.embed_content(text)
        except httpx.HTTPError as e:
            return EmbeddingResult.failure("transport", str(e))
        except ValueError as e:
            return EmbeddingResult.failure("malformed", f"Response is not JSON: {e}")

        if not isinstance(data, dict):
            return EmbeddingResult.failure("malformed", f"Unexpected response type: {type(data).__name__}")

        if data.get("error"):
            error = data["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            return EmbeddingResult.failure("provider", message)

        embedding = data.get("embedding")
        values = embedding.get("values") if isinstance(embedding, dict) else None
        if not isinstance(values, list):
            return EmbeddingResult.failure("missing_values", "Response has no embedding.values")

        logger.debug(f"Gemini returned {len(values)} values")
        return EmbeddingResult.success(values)

    def close(self) -> None:
        """Close the client and release resources."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> GeminiEmbedder:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
