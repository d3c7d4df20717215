from __future__ import annotations

from typing import Iterable

from rules.catalog import CheatEntry


def entry_ids(entries: Iterable[CheatEntry]) -> set[str]:
    """Return all ids from a list of CheatEntry objects."""
    return {e.id for e in entries}


def all_rule_ids(entries: Iterable[CheatEntry]) -> list[str]:
    """Registry rule ids in catalog order."""
    return [r.rule_id for e in entries for r in e.registry_rules]


def assert_has_entry(entries: Iterable[CheatEntry], entry_id: str) -> None:
    """Assert that a specific entry is present."""
    ids = entry_ids(entries)
    assert entry_id in ids, f"Expected entry '{entry_id}', got: {sorted(ids)}"


def assert_no_entry(entries: Iterable[CheatEntry], entry_id: str) -> None:
    """Assert that a specific entry is NOT present."""
    ids = entry_ids(entries)
    assert entry_id not in ids, f"Did NOT expect entry '{entry_id}', but got it"
