from __future__ import annotations

from typing import Any

from core.enums import Location
from resolve.links import RegistryResolver
from rules.catalog import CheatEntry, section_key

SCHEMA_VERSION = "1.0"


def _val(x: Any) -> Any:
    """Convert enums-like objects to plain JSON-safe values."""
    if hasattr(x, "value"):
        return x.value
    return x


def _ref_key(r: dict[str, str]) -> tuple[str, str, str]:
    return (r.get("source", ""), r.get("citation", ""), r.get("url", ""))


def _entry_to_dict(e: CheatEntry, resolver: RegistryResolver) -> dict[str, Any]:
    links = [resolver.rule(ref) for ref in e.registry_rules]
    refs = sorted((r.as_dict() for r in e.references), key=_ref_key)

    return {
        "id": e.id,
        "section": e.section,
        "title": e.title,
        "location": _val(e.location),
        "severity": _val(e.severity),
        "summary": e.summary,
        "example": {"language": e.example_language, "code": e.example},
        "mitigation": list(e.mitigation),
        "registry_rules": [{"rule_id": ln.label, "url": ln.url} for ln in links],
        "references": refs,
        "tags": sorted(e.tags),
    }


def build_json_payload(
    *,
    entries: list[CheatEntry],
    resolver: RegistryResolver,
    selected_locations: list[Location],
    requested: list[str] | None = None,
) -> dict[str, Any]:
    out = [_entry_to_dict(e, resolver) for e in entries]
    # Deterministic ordering by cheat-sheet section
    out.sort(key=lambda d: section_key(d["section"]))

    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "input": {
            "entries": list(requested or []),
            "selected_locations": [_val(x) for x in selected_locations],
        },
        "registry": {
            "base_url": resolver.base_url,
            "ruleset_base_url": resolver.ruleset_base_url,
        },
        "entries": out,
    }
    return payload
