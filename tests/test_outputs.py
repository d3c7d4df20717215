from __future__ import annotations

import json

from app.json_output import build_json_payload
from app.mdx_output import build_mdx, directive
from app.render import build_summary_rows
from core.enums import Location
from helpers import all_rule_ids
from resolve.directives import check_document, find_directives, render_document


def test_json_payload_is_valid_and_versioned(entries, resolver):
    payload = build_json_payload(
        entries=entries,
        resolver=resolver,
        selected_locations=[Location.code, Location.templates],
    )
    obj = json.loads(json.dumps(payload))

    assert obj["schema_version"] == "1.0"
    assert obj["input"]["selected_locations"] == ["code", "templates"]
    assert obj["registry"]["base_url"] == "https://semgrep.dev/r"
    assert [e["section"] for e in obj["entries"]][:2] == ["1.A", "1.B"]
    for e in obj["entries"]:
        for r in e["registry_rules"]:
            assert r["url"] == f"https://semgrep.dev/r/{r['rule_id']}"


def test_summary_rows_sorted_by_severity_then_section(entries):
    rows = build_summary_rows(entries)

    assert rows[0].severity == "error"
    assert rows[0].section == "1.F"
    rest = [r.section for r in rows[1:]]
    assert rest[0] == "1.A"
    assert rest[-1] == "2.E"


def test_directive_markup():
    assert directive("a.b") == '<LinkToRegistryRule ruleId="a.b" />'


def test_generated_mdx_round_trips_through_renderer(entries, resolver):
    mdx = build_mdx(entries)

    assert mdx.startswith("# XSS prevention for Flask\n")
    assert "## 1. Server code: generating HTML" in mdx
    assert "## 2. Templates: rendering variables" in mdx
    assert [d.rule_id for d in find_directives(mdx)] == all_rule_ids(entries)
    assert check_document(mdx) == []

    out = render_document(mdx, resolver)
    for rid in all_rule_ids(entries):
        assert f"[{rid}](https://semgrep.dev/r/{rid})" in out


def test_generated_mdx_skips_empty_location(entries):
    code_only = [e for e in entries if e.location == Location.code]
    mdx = build_mdx(code_only)
    assert "## 2." not in mdx
