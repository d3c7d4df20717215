from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from resolve.links import RegistryResolver
from rules.catalog import CheatEntry, section_key, severity_rank

# Text styles (fine to include backgrounds here)
_SEV_STYLE = {
    "error": "bold white on red",
    "warning": "bold yellow",
    "info": "dim",
}

_LOCATION_STYLE = {
    "code": "cyan",
    "templates": "magenta",
}

# rich lexer names
_SYNTAX_LANG = {
    "python": "python",
    "html+jinja": "html+jinja",
    "html": "html",
}


def _border_style_for_severity(sev: str) -> str:
    """Panel borders should use simple colors (avoid background styles)."""
    return {
        "error": "red",
        "warning": "yellow",
        "info": "dim",
    }.get(sev, "dim")


def _mk_console():
    """
    Force ANSI + colors even when Rich mis-detects TTY on Windows.
    Keep this in one place so summary + details behave identically.
    """
    from rich.console import Console

    return Console(
        force_terminal=True,
        no_color=False,
        color_system="truecolor",
        stderr=False,
    )


@dataclass(frozen=True)
class SummaryRow:
    section: str
    title: str
    location: str
    severity: str
    rules: int


def build_summary_rows(entries: Iterable[CheatEntry]) -> list[SummaryRow]:
    rows: list[SummaryRow] = []
    for e in entries:
        rows.append(
            SummaryRow(
                section=e.section,
                title=e.title,
                location=str(e.location.value),
                severity=str(e.severity.value),
                rules=len(e.registry_rules),
            )
        )

    # Most severe first, then cheat-sheet order
    rows.sort(key=lambda r: (-severity_rank(r.severity), section_key(r.section)))
    return rows


def render_rich_summary(rows: list[SummaryRow], top: int = 0, console=None) -> None:
    from rich.table import Table
    from rich.text import Text

    console = console or _mk_console()

    table = Table(title="Flask XSS cheat sheet", show_lines=False)
    table.add_column("Section", justify="right", no_wrap=True)
    table.add_column("Pattern", overflow="fold", no_wrap=False)
    table.add_column("Location", justify="center", no_wrap=True)
    table.add_column("Severity", justify="center", no_wrap=True)
    table.add_column("Rules", justify="right", no_wrap=True)

    view = rows[:top] if top and top > 0 else rows
    for r in view:
        sev_style = _SEV_STYLE.get(r.severity, "")
        table.add_row(
            r.section,
            Text(r.title, style=sev_style),
            Text(r.location, style=_LOCATION_STYLE.get(r.location, "")),
            Text(r.severity, style=sev_style),
            str(r.rules),
        )

    console.print(table)


def render_rich_details(
    entries: Iterable[CheatEntry],
    resolver: RegistryResolver,
    console=None,
) -> None:
    from rich.console import Group
    from rich.panel import Panel
    from rich.syntax import Syntax
    from rich.text import Text

    console = console or _mk_console()

    for e in entries:
        sev = str(e.severity.value)
        title = Text(f"{e.section}. {e.title}", style=_SEV_STYLE.get(sev, "bold"))

        parts = [Text(e.summary), Text("")]
        parts.append(
            Syntax(
                e.example,
                _SYNTAX_LANG.get(e.example_language, "text"),
                line_numbers=True,
            )
        )

        tail: list[str] = [""]
        if e.mitigation:
            tail.append("Mitigation:")
            tail.extend(f"  - {m}" for m in e.mitigation)
        tail.append("Registry rules:")
        for ref in e.registry_rules:
            link = resolver.rule(ref)
            tail.append(f"  - {link.label}")
            tail.append(f"    {link.url}")
        if e.references:
            tail.append("References:")
            for r in e.references:
                tail.append(f"  - {r.source}: {r.citation}" + (f" ({r.url})" if r.url else ""))
        parts.append(Text("\n".join(tail)))

        console.print(
            Panel(
                Group(*parts),
                title=title,
                subtitle=str(e.location.value),
                border_style=_border_style_for_severity(sev),
                expand=False,
            )
        )
