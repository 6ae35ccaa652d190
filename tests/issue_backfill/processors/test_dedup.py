"""Tests for select_new."""

from issue_backfill.models import Issue
from issue_backfill.processors.dedup import select_new


def _issues(*numbers):
    return [Issue(number=n, title=f"Issue {n}") for n in numbers]


def test_excludes_existing_numbers():
    selected = select_new(_issues(1, 2, 3, 4), {2, 4})
    assert [i.number for i in selected] == [1, 3]


def test_preserves_input_order():
    selected = select_new(_issues(9, 3, 7, 1), {7})
    assert [i.number for i in selected] == [9, 3, 1]


def test_nothing_existing_keeps_everything():
    assert [i.number for i in select_new(_issues(1, 2), set())] == [1, 2]


def test_everything_existing_yields_empty():
    assert select_new(_issues(1, 2), {1, 2, 3}) == []


def test_repeated_numbers_emitted_once():
    issues = [Issue(number=5, title="first"), Issue(number=6, title="x"), Issue(number=5, title="moved")]
    selected = select_new(issues, set())
    assert [(i.number, i.title) for i in selected] == [(5, "first"), (6, "x")]
