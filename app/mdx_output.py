# catalog -> MDX cheat sheet with LinkToRegistryRule directives
from __future__ import annotations

from core.constants import DIRECTIVE_NAME
from core.enums import Location
from rules.catalog import CheatEntry

_LOCATION_HEADINGS = {
    Location.code: "Server code: generating HTML",
    Location.templates: "Templates: rendering variables",
}

_FENCE_LANG = {
    "html+jinja": "html",
}

INTRO = (
    "This cheat sheet lists XSS risk patterns in Flask applications that use "
    "Jinja2 templates. Each pattern names the static-analysis rule that detects it."
)


def directive(rule_id: str) -> str:
    return f'<{DIRECTIVE_NAME} ruleId="{rule_id}" />'


def _entry_lines(e: CheatEntry) -> list[str]:
    lines = [f"### {e.section}. {e.title}", "", e.summary, ""]

    lang = _FENCE_LANG.get(e.example_language, e.example_language)
    lines.append(f"```{lang}")
    lines.extend(e.example.splitlines())
    lines.append("```")
    lines.append("")

    if e.mitigation:
        lines.append("**Mitigation**")
        lines.append("")
        lines.extend(f"- {m}" for m in e.mitigation)
        lines.append("")

    if e.references:
        lines.append("**References**")
        lines.append("")
        for r in e.references:
            if r.url:
                lines.append(f"- [{r.source}: {r.citation}]({r.url})")
            else:
                lines.append(f"- {r.source}: {r.citation}")
        lines.append("")

    label = "Rule" if len(e.registry_rules) == 1 else "Rules"
    lines.append(f"**{label}:** " + ", ".join(directive(r.rule_id) for r in e.registry_rules))
    lines.append("")
    return lines


def build_mdx(entries: list[CheatEntry], title: str = "XSS prevention for Flask") -> str:
    lines = [f"# {title}", "", INTRO, ""]

    for num, loc in enumerate((Location.code, Location.templates), start=1):
        group = [e for e in entries if e.location == loc]
        if not group:
            continue
        lines.append(f"## {num}. {_LOCATION_HEADINGS[loc]}")
        lines.append("")
        for e in group:
            lines.extend(_entry_lines(e))

    return "\n".join(lines).rstrip() + "\n"
