"""Resolve which issue numbers are already in the vector index."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ListableStore(Protocol):
    def list_all(self) -> Iterable[dict[str, Any]]: ...


def coerce_issue_number(value: Any) -> int | None:
    """Normalize a stored issue_number to int.

    Pinecone returns numeric metadata as floats, so 42.0 becomes 42.
    Digit strings are accepted; anything else (including booleans and
    non-integral floats) yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def load_existing_issue_numbers(store: ListableStore) -> set[int]:
    """
    Collect the issue numbers of every record in the index.

    Records without a usable `issue_number` in their metadata are ignored.

    Raises:
        VectorStoreError: If listing the index fails
    """
    numbers: set[int] = set()
    records = 0
    ignored = 0

    for record in store.list_all():
        records += 1
        metadata = record.get("metadata") or {}
        number = coerce_issue_number(metadata.get("issue_number"))
        if number is None:
            ignored += 1
            continue
        numbers.add(number)

    if ignored:
        logger.debug(f"Ignored {ignored} records without a valid issue_number")
    logger.info(f"Index holds {records} records covering {len(numbers)} issue numbers")
    return numbers
