"""Select issues that are not yet indexed."""

from __future__ import annotations

from collections.abc import Iterable, Set

from issue_backfill.models import Issue


def select_new(issues: Iterable[Issue], existing_numbers: Set[int]) -> list[Issue]:
    """Issues whose number is not in `existing_numbers`, in input order.

    A number appearing more than once in `issues` is kept at its first occurrence.
    """
    seen: set[int] = set()
    selected: list[Issue] = []
    for issue in issues:
        if issue.number in existing_numbers or issue.number in seen:
            continue
        seen.add(issue.number)
        selected.append(issue)
    return selected
