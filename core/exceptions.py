from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


class CheatSheetError(Exception):
    """Base exception for project-level, domain-specific errors."""


@dataclass(frozen=True)
class InvalidArgument(CheatSheetError):
    """
    Raised when a rule identifier or registry base URL is empty or malformed.

    value: the literal value that was rejected
    reason: short human explanation
    location: where the value came from (e.g. "docs/flask-xss.mdx:12:5"), if known
    """

    value: str
    reason: str
    location: str | None

    def __init__(self, value: str, reason: str, location: str | None = None):
        object.__setattr__(self, "value", "" if value is None else str(value))
        object.__setattr__(self, "reason", reason)
        object.__setattr__(self, "location", location)

    def at(self, location: str) -> InvalidArgument:
        return InvalidArgument(self.value, self.reason, location)

    def __str__(self) -> str:
        base = f"Invalid value {self.value!r}: {self.reason}"
        if self.location:
            return f"{self.location}: {base}"
        return base


@dataclass(frozen=True)
class UnknownEntryError(CheatSheetError):
    """
    Raised when one or more cheat-sheet entry names cannot be resolved.

    unknown: the raw tokens the user provided that were not resolved
    suggestions: mapping from unknown token -> tuple of suggested entry ids
    """

    unknown: tuple[str, ...]
    suggestions: dict[str, tuple[str, ...]]

    def __init__(
        self,
        unknown: Iterable[str],
        suggestions: dict[str, Iterable[str]] | None = None,
    ):
        object.__setattr__(self, "unknown", tuple(unknown))
        sug: dict[str, tuple[str, ...]] = {}
        if suggestions:
            for k, vals in suggestions.items():
                sug[str(k)] = tuple(vals)
        object.__setattr__(self, "suggestions", sug)

    def __str__(self) -> str:
        if not self.unknown:
            return "Unknown entry"

        if len(self.unknown) == 1:
            tok = self.unknown[0]
            base = f"Entry not found: {tok}"
            opts = self.suggestions.get(tok, ())
            if opts:
                return base + f". Did you mean: {', '.join(opts)}?"
            return base

        joined = ", ".join(self.unknown)
        return f"Entries not found: {joined}"
