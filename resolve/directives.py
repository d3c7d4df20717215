"""Find and expand <LinkToRegistryRule ruleId="..." /> directives in MDX text.

The document is rendered all-or-nothing: the first malformed directive aborts
the render with an InvalidArgument that names the source, line and column.
Directives inside fenced code blocks or inline code spans are literal text and
are left alone.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from core.constants import DIRECTIVE_NAME
from core.enums import LinkStyle
from core.exceptions import InvalidArgument
from core.models import check_identifier
from resolve.links import RegistryResolver

log = logging.getLogger(__name__)

_OPEN_RE = re.compile(r"<" + DIRECTIVE_NAME + r"\b")

_DIRECTIVE_RE = re.compile(
    r"<" + DIRECTIVE_NAME + r"\b(?P<attrs>[^<>]*?)\s*"
    r"(?:/>|>\s*</" + DIRECTIVE_NAME + r"\s*>)"
)

_RULE_ID_ATTR_RE = re.compile(
    r"""\bruleId\s*=\s*(?:
        "(?P<dq>[^"]*)"
      | '(?P<sq>[^']*)'
      | \{\s*(?:"(?P<jdq>[^"]*)"|'(?P<jsq>[^']*)'|`(?P<jbt>[^`]*)`)\s*\}
    )""",
    re.VERBOSE,
)

_FENCE_RE = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})(?P<rest>.*)$")
_BACKTICKS_RE = re.compile(r"`+")


@dataclass(frozen=True)
class Directive:
    raw: str
    rule_id: str | None  # None when the ruleId attribute is missing
    line: int
    column: int
    start: int
    end: int
    terminated: bool = True

    def location(self, source: str) -> str:
        return f"{source}:{self.line}:{self.column}"


def _line_col(text: str, pos: int) -> tuple[int, int]:
    line = text.count("\n", 0, pos) + 1
    col = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return line, col


def _fenced_spans(text: str) -> list[tuple[int, int]]:
    """Character spans covered by ``` / ~~~ fenced blocks (an unclosed fence runs to EOF)."""
    spans: list[tuple[int, int]] = []
    open_fence: str | None = None
    open_at = 0
    pos = 0

    for line in text.splitlines(keepends=True):
        m = _FENCE_RE.match(line)
        if m:
            fence = m.group("fence")
            if open_fence is None:
                open_fence = fence
                open_at = pos
            elif (
                fence[0] == open_fence[0]
                and len(fence) >= len(open_fence)
                and not m.group("rest").strip()
            ):
                spans.append((open_at, pos + len(line)))
                open_fence = None
        pos += len(line)

    if open_fence is not None:
        spans.append((open_at, len(text)))
    return spans


def _code_spans(text: str, fenced: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Inline `code` spans outside fenced blocks; a run of N backticks closes only on N."""
    spans: list[tuple[int, int]] = []
    gaps: list[tuple[int, int]] = []
    last = 0
    for a, b in fenced:
        gaps.append((last, a))
        last = b
    gaps.append((last, len(text)))

    for lo, hi in gaps:
        pos = lo
        while True:
            opener = _BACKTICKS_RE.search(text, pos, hi)
            if not opener:
                break
            size = len(opener.group(0))
            closer = None
            for cand in _BACKTICKS_RE.finditer(text, opener.end(), hi):
                if len(cand.group(0)) == size:
                    closer = cand
                    break
            if closer is None:
                # Unmatched run is literal backticks
                pos = opener.end()
                continue
            spans.append((opener.start(), closer.end()))
            pos = closer.end()

    return spans


def _in_spans(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(a <= pos < b for a, b in spans)


def _extract_rule_id(attrs: str) -> str | None:
    m = _RULE_ID_ATTR_RE.search(attrs)
    if not m:
        return None
    for group in ("dq", "sq", "jdq", "jsq", "jbt"):
        val = m.group(group)
        if val is not None:
            return val
    return None


def find_directives(text: str) -> list[Directive]:
    """Return every directive outside fenced code and inline code, in document order."""
    text = text or ""
    fenced = _fenced_spans(text)
    spans = fenced + _code_spans(text, fenced)
    out: list[Directive] = []

    for m in _OPEN_RE.finditer(text):
        start = m.start()
        if _in_spans(start, spans):
            continue
        if out and start < out[-1].end:
            continue

        line, col = _line_col(text, start)
        full = _DIRECTIVE_RE.match(text, start)
        if not full:
            out.append(
                Directive(
                    raw=m.group(0),
                    rule_id=None,
                    line=line,
                    column=col,
                    start=start,
                    end=m.end(),
                    terminated=False,
                )
            )
            continue

        out.append(
            Directive(
                raw=full.group(0),
                rule_id=_extract_rule_id(full.group("attrs")),
                line=line,
                column=col,
                start=start,
                end=full.end(),
            )
        )

    return out


def _problem(d: Directive, source: str) -> InvalidArgument | None:
    loc = d.location(source)
    if not d.terminated:
        return InvalidArgument(d.raw, f"unterminated {DIRECTIVE_NAME} directive", loc)
    if d.rule_id is None:
        return InvalidArgument(d.raw, "directive has no ruleId attribute", loc)
    try:
        check_identifier(d.rule_id, "rule id")
    except InvalidArgument as e:
        return e.at(loc)
    return None


def check_document(text: str, source: str = "<string>") -> list[InvalidArgument]:
    """Collect every malformed reference in a document instead of stopping at the first."""
    problems: list[InvalidArgument] = []
    for d in find_directives(text):
        err = _problem(d, source)
        if err is not None:
            problems.append(err)
    return problems


def render_document(
    text: str,
    resolver: RegistryResolver | None = None,
    style: LinkStyle | str = LinkStyle.markdown,
    source: str = "<string>",
) -> str:
    """
    Replace each directive with a resolved registry link.

    Output order matches document order; text between directives is copied
    verbatim. Raises InvalidArgument for the first malformed directive.
    """
    resolver = resolver or RegistryResolver()
    style = LinkStyle(style)
    text = text or ""

    parts: list[str] = []
    last = 0
    count = 0
    for d in find_directives(text):
        err = _problem(d, source)
        if err is not None:
            raise err

        link = resolver.rule(d.rule_id)
        parts.append(text[last : d.start])
        parts.append(link.html() if style == LinkStyle.html else link.markdown())
        last = d.end
        count += 1

    parts.append(text[last:])
    log.debug("Rendered %d registry links in %s", count, source)
    return "".join(parts)
