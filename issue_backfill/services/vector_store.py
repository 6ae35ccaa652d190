"""
Pinecone vector store.

Wraps a Pinecone index with the two operations the backfill needs:
enumerating every stored record with its metadata, and upserting a chunk
of IndexRecords in one call. SDK errors are re-raised as VectorStoreError.

Usage:
    store = PineconeVectorStore(config.vector_store)
    for record in store.list_all():
        ...
    store.upsert(records)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from issue_backfill.cli.config import VectorStoreConfig
    from issue_backfill.models import IndexRecord

logger = logging.getLogger(__name__)


class VectorStoreError(Exception):
    """Error talking to the vector store."""

    pass


def _vectors_of(response: Any) -> dict[str, Any]:
    """Extract the id -> vector mapping from a fetch response."""
    vectors = response.get("vectors") if isinstance(response, dict) else getattr(response, "vectors", None)
    return vectors or {}


def _metadata_of(vector: Any) -> dict[str, Any]:
    metadata = vector.get("metadata") if isinstance(vector, dict) else getattr(vector, "metadata", None)
    return dict(metadata) if metadata else {}


class PineconeVectorStore:
    """Pinecone index adapter.

    Attributes:
        index_name: Name of the Pinecone index
        namespace: Namespace used for listing and upserts ("" is the default namespace)
        list_page_size: Ids requested per listing page
    """

    def __init__(self, config: VectorStoreConfig, index: Any | None = None) -> None:
        """Initialize the store.

        Args:
            config: Vector store settings
            index: Optional pre-built index handle (tests pass a mock)
        """
        self.index_name = config.index_name
        self.namespace = config.namespace
        self.list_page_size = config.list_page_size
        self._api_key = config.api_key
        self._index = index

    def _get_index(self) -> Any:
        """Get or create the Pinecone index handle."""
        if self._index is None:
            from pinecone import Pinecone

            try:
                pc = Pinecone(api_key=self._api_key)
                self._index = pc.Index(self.index_name)
            except Exception as e:
                raise VectorStoreError(f"Could not open Pinecone index '{self.index_name}': {e}") from e
            logger.info(f"Using Pinecone index '{self.index_name}'")
        return self._index

    def list_all(self) -> Iterator[dict[str, Any]]:
        """Enumerate every record in the namespace.

        Drains the id listing page by page and fetches metadata for each page.

        Yields:
            {"id": str, "metadata": dict} per stored record

        Raises:
            VectorStoreError: If listing or fetching fails
        """
        index = self._get_index()
        pages = 0
        try:
            for ids in index.list(namespace=self.namespace, limit=self.list_page_size):
                ids = list(ids)
                if not ids:
                    continue
                pages += 1
                response = index.fetch(ids=ids, namespace=self.namespace)
                for vector_id, vector in _vectors_of(response).items():
                    yield {"id": vector_id, "metadata": _metadata_of(vector)}
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Listing index '{self.index_name}' failed after {pages} pages: {e}") from e

        logger.debug(f"Listed {pages} pages from index '{self.index_name}'")

    def upsert(self, records: Sequence[IndexRecord]) -> int:
        """Upsert a chunk of records in a single call.

        Args:
            records: Records to write

        Returns:
            Number of records the store reports as upserted

        Raises:
            VectorStoreError: If the upsert call fails
        """
        if not records:
            return 0

        vectors = [record.to_vector() for record in records]
        try:
            response = self._get_index().upsert(vectors=vectors, namespace=self.namespace)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Upsert of {len(vectors)} records failed: {e}") from e

        count = response.get("upserted_count") if isinstance(response, dict) else getattr(response, "upserted_count", None)
        return count if isinstance(count, int) else len(vectors)
