from __future__ import annotations

import json

from app.cli import main

HREF_RULE = "python.flask.security.xss.audit.template-href-var.template-href-var"


def test_resolve_prints_markdown_link(capsys):
    assert main(["resolve", HREF_RULE]) == 0
    out = capsys.readouterr().out
    assert out.strip() == f"[{HREF_RULE}](https://semgrep.dev/r/{HREF_RULE})"


def test_resolve_url_format_with_custom_base(capsys):
    code = main(
        ["--registry-url", "https://registry.example/r", "resolve", "a.b", "c.d", "--format", "url"]
    )
    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "https://registry.example/r/a.b",
        "https://registry.example/r/c.d",
    ]


def test_resolve_ruleset(capsys):
    assert main(["resolve", "--ruleset", "flask", "--format", "html"]) == 0
    assert capsys.readouterr().out.strip() == '<a href="https://semgrep.dev/p/flask">flask</a>'


def test_resolve_empty_rule_id_fails_without_output(capsys):
    assert main(["resolve", "a.b", ""]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "must not be empty" in captured.err


def test_bad_registry_url_is_usage_error(capsys):
    assert main(["--registry-url", "not-a-url", "resolve", "a.b"]) == 2
    assert "error:" in capsys.readouterr().err


def test_show_json_for_one_entry(capsys):
    assert main(["show", "2.C", "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)

    assert payload["schema_version"] == "1.0"
    assert payload["input"]["entries"] == ["2.C"]
    (entry,) = payload["entries"]
    assert entry["id"] == "template-href-var"
    assert entry["registry_rules"] == [
        {"rule_id": HREF_RULE, "url": f"https://semgrep.dev/r/{HREF_RULE}"}
    ]


def test_show_plain_filters_location(capsys):
    assert main(["show", "--location", "templates"]) == 0
    out = capsys.readouterr().out
    assert "2.C. Template variable in an href attribute" in out
    assert "1.A." not in out
    assert f"https://semgrep.dev/r/{HREF_RULE}" in out


def test_show_entry_outside_location_prints_notice(capsys):
    assert main(["show", "1.A", "--location", "templates"]) == 0
    assert "No cheat-sheet entries" in capsys.readouterr().out


def test_show_unknown_entry_suggests(capsys):
    assert main(["show", "template-herf-var"]) == 2
    err = capsys.readouterr().err
    assert "Did you mean: template-href-var" in err


def test_show_unknown_location_is_usage_error(capsys):
    assert main(["show", "--location", "database"]) == 2
    assert "unknown location" in capsys.readouterr().err


def test_show_rich_summary(capsys):
    assert main(["show", "--format", "rich", "--top", "3", "--details"]) == 0
    out = capsys.readouterr().out
    assert "Flask XSS cheat sheet" in out
    assert "1.F" in out


def test_render_document_to_file(tmp_path, capsys):
    doc = tmp_path / "doc.mdx"
    doc.write_text('See <LinkToRegistryRule ruleId="a.b" />.\n', encoding="utf-8")
    out_path = tmp_path / "doc.md"

    assert main(["render", str(doc), "-o", str(out_path)]) == 0
    assert out_path.read_text(encoding="utf-8") == "See [a.b](https://semgrep.dev/r/a.b).\n"
    assert capsys.readouterr().out == ""


def test_render_malformed_document_fails_with_location(tmp_path, capsys):
    doc = tmp_path / "doc.mdx"
    doc.write_text('\n<LinkToRegistryRule ruleId="a b" />\n', encoding="utf-8")
    out_path = tmp_path / "doc.md"

    assert main(["render", str(doc), "-o", str(out_path)]) == 2
    assert not out_path.exists()
    assert f"{doc}:2:1" in capsys.readouterr().err


def test_render_catalog_html(capsys):
    assert main(["render", "--catalog", "--html"]) == 0
    out = capsys.readouterr().out
    assert f'<a href="https://semgrep.dev/r/{HREF_RULE}">{HREF_RULE}</a>' in out
    assert "<LinkToRegistryRule" not in out


def test_check_passes_for_shipped_catalog_and_docs(capsys):
    from core.config import DOCS_DIR

    assert main(["check", str(DOCS_DIR / "flask-xss.mdx")]) == 0
    assert "Check passed (11 entries, 1 documents)" in capsys.readouterr().out


def test_check_reports_bad_document(tmp_path, capsys):
    doc = tmp_path / "bad.mdx"
    doc.write_text('<LinkToRegistryRule ruleId="" />\n', encoding="utf-8")

    assert main(["check", str(doc)]) == 1
    out = capsys.readouterr().out
    assert f"{doc}:1:1" in out
