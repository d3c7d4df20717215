# cheat-sheet entry loading + selection
from __future__ import annotations

import difflib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from core.constants import normalize_location
from core.enums import Location, Severity
from core.exceptions import InvalidArgument, UnknownEntryError
from core.models import Reference, RuleReference

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheatEntry:
    id: str
    title: str
    section: str
    location: Location
    severity: Severity
    summary: str
    example: str
    registry_rules: list[RuleReference]
    # Defaults last
    example_language: str = "python"
    mitigation: list[str] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


_SEV_RANK = {
    Severity.info: 0,
    Severity.warning: 1,
    Severity.error: 2,
}

ALL_LOCATIONS = [Location.code, Location.templates]


def section_key(section: str) -> tuple[int, str]:
    """Sort "2.C" after "1.F" and "10.A" after "9.A"."""
    num, _, letter = (section or "").partition(".")
    try:
        return (int(num), letter)
    except ValueError:
        return (10**6, section or "")


def _parse_references(raw: Any) -> list[Reference]:
    out: list[Reference] = []
    for r in raw or []:
        out.append(
            Reference(
                source=r["source"],
                citation=r["citation"],
                url=r.get("url"),
            )
        )
    return out


def load_entries(rule_dir: Path) -> list[CheatEntry]:
    entries: list[CheatEntry] = []

    for p in sorted(rule_dir.glob("*.json")):
        raw = json.loads(p.read_text(encoding="utf-8"))

        try:
            refs = [RuleReference(rid) for rid in raw["registry_rules"]]
        except KeyError as e:
            raise ValueError(
                f"Entry file '{p.name}' missing required key: {e}"
            ) from e
        except InvalidArgument as e:
            raise e.at(p.name) from e

        try:
            entry = CheatEntry(
                id=raw["id"],
                title=raw["title"],
                section=raw["section"],
                location=Location(raw["location"]),
                severity=Severity(raw.get("severity", "warning")),
                summary=raw["summary"],
                example=raw["example"],
                registry_rules=refs,
                example_language=raw.get("example_language", "python"),
                mitigation=raw.get("mitigation", []),
                references=_parse_references(raw.get("references")),
                tags=raw.get("tags", []),
            )
        except KeyError as e:
            raise ValueError(
                f"Entry file '{p.name}' missing required key: {e}"
            ) from e
        except ValueError as e:
            raise ValueError(f"Entry file '{p.name}': {e}") from e

        entries.append(entry)

    log.debug("Loaded %d cheat-sheet entries from %s", len(entries), rule_dir)
    entries.sort(key=lambda e: section_key(e.section))
    return entries


def parse_location_selection(location_arg: str) -> list[Location]:
    raw = (location_arg or "all").strip().lower()
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    selected: list[Location] = []

    for p in parts:
        if p == "all":
            wanted = list(ALL_LOCATIONS)
        else:
            loc = normalize_location(p)
            if loc not in ALL_LOCATIONS:
                raise InvalidArgument(
                    p, "unknown location. Use: all, code, templates"
                )
            wanted = [Location(loc)]
        for w in wanted:
            if w not in selected:
                selected.append(w)

    if not selected:
        selected = list(ALL_LOCATIONS)

    return selected


def filter_entries(entries: list[CheatEntry], selected: list[Location]) -> list[CheatEntry]:
    selected_set = set(selected)
    return [e for e in entries if e.location in selected_set]


def _suggest_entry_terms(
    token: str, entries: list[CheatEntry], limit: int = 5
) -> tuple[str, ...]:
    q = (token or "").strip().lower()
    if not q:
        return tuple()

    ids = [e.id.lower() for e in entries]
    matches = difflib.get_close_matches(q, ids, n=limit, cutoff=0.6)
    return tuple(matches)


def select_entries(entries: list[CheatEntry], names: list[str]) -> list[CheatEntry]:
    """Look entries up by id or section (case-insensitive), preserving request order."""
    by_term: dict[str, CheatEntry] = {}
    for e in entries:
        by_term.setdefault(e.id.lower(), e)
        by_term.setdefault(e.section.lower(), e)

    out: list[CheatEntry] = []
    unknown: list[str] = []
    for raw in names:
        hit = by_term.get(raw.strip().lower())
        if hit is None:
            unknown.append(raw)
        elif hit not in out:
            out.append(hit)

    if unknown:
        sug_map = {}
        for tok in unknown:
            sug = _suggest_entry_terms(tok, entries, limit=5)
            if sug:
                sug_map[tok] = sug
        raise UnknownEntryError(unknown, suggestions=sug_map)

    return out


def severity_rank(sev: Severity) -> int:
    return _SEV_RANK.get(sev, 0)
