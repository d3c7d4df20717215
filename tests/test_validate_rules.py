from __future__ import annotations

import json
from pathlib import Path

from core.config import RULE_DIR
from rules.validate_rules import main, validate_dir, validate_rule

GOOD = {
    "id": "sample-entry",
    "title": "Sample",
    "section": "3.A",
    "location": "templates",
    "severity": "warning",
    "summary": "Summary.",
    "example": "{{ x | safe }}",
    "registry_rules": ["python.flask.security.xss.audit.sample.sample"],
    "mitigation": ["Do not."],
    "references": [{"source": "Docs", "citation": "Page"}],
    "tags": ["t"],
}


def _messages(raw):
    return [e.message for e in validate_rule(Path("x.json"), raw)]


def test_shipped_catalog_is_valid():
    count, errors = validate_dir(RULE_DIR)
    assert count == 11
    assert errors == []


def test_good_entry_has_no_errors():
    assert _messages(dict(GOOD)) == []


def test_missing_keys_stop_validation():
    raw = dict(GOOD)
    del raw["registry_rules"]
    msgs = _messages(raw)
    assert len(msgs) == 1
    assert "registry_rules" in msgs[0]


def test_enum_and_section_errors():
    raw = dict(GOOD, location="database", severity="critical", section="C2")
    msgs = " | ".join(_messages(raw))
    assert "Invalid location" in msgs
    assert "Invalid severity" in msgs
    assert "Invalid section" in msgs


def test_malformed_registry_rule_is_reported():
    raw = dict(GOOD, registry_rules=["ok.rule", "bad rule", ""])
    msgs = _messages(raw)
    assert len(msgs) == 2
    assert all(m.startswith("registry_rules:") for m in msgs)


def test_empty_registry_rules_rejected():
    assert _messages(dict(GOOD, registry_rules=[])) == [
        "registry_rules must be a non-empty list"
    ]


def test_reference_shape_checked():
    raw = dict(GOOD, references=[{"source": "Docs"}, "nope"])
    msgs = _messages(raw)
    assert "references[0] missing citation" in msgs
    assert "references[1] must be an object" in msgs


def test_duplicates_across_files(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps(GOOD), encoding="utf-8")
    (tmp_path / "b.json").write_text(json.dumps(GOOD), encoding="utf-8")

    count, errors = validate_dir(tmp_path)
    assert count == 2
    msgs = [(e.file, e.message) for e in errors]
    assert ("b.json", "Duplicate id 'sample-entry' (also in a.json)") in msgs
    assert ("b.json", "Duplicate section '3.A' (also in a.json)") in msgs


def test_invalid_json_reported(tmp_path):
    (tmp_path / "a.json").write_text("{not json", encoding="utf-8")
    _, errors = validate_dir(tmp_path)
    assert errors[0].file == "a.json"
    assert errors[0].message.startswith("Invalid JSON")


def test_main_exit_codes(tmp_path, capsys):
    assert main(RULE_DIR) == 0
    assert "passed (11 entries)" in capsys.readouterr().out

    assert main(tmp_path) == 2
    assert main(tmp_path / "missing") == 2

    (tmp_path / "a.json").write_text(json.dumps(dict(GOOD, severity="x")), encoding="utf-8")
    assert main(tmp_path) == 1
    assert "a.json: Invalid severity" in capsys.readouterr().out
