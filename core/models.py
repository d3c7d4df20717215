# dataclasses for rule references, resolved links and citations
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional

from core.constants import DOT_SEGMENTS, RULE_ID_RE
from core.exceptions import InvalidArgument


def check_identifier(value: str, kind: str = "rule id") -> str:
    """
    Return `value` unchanged if it can be used verbatim as one URL path segment.

    Never corrects the value: anything empty, containing whitespace or needing
    percent-encoding raises InvalidArgument.
    """
    if not isinstance(value, str):
        raise InvalidArgument(repr(value), f"{kind} must be a string")
    if not value:
        raise InvalidArgument(value, f"{kind} must not be empty")
    if any(ch.isspace() for ch in value):
        raise InvalidArgument(value, f"{kind} must not contain whitespace")
    if value in DOT_SEGMENTS:
        raise InvalidArgument(value, f"{kind} must not be a dot segment")
    if not RULE_ID_RE.match(value):
        bad = sorted({ch for ch in value if not RULE_ID_RE.match(ch)})
        raise InvalidArgument(
            value,
            f"{kind} contains characters not allowed in a URL path segment: "
            + " ".join(repr(ch) for ch in bad),
        )
    return value


@dataclass(frozen=True)
class RuleReference:
    rule_id: str

    def __post_init__(self) -> None:
        check_identifier(self.rule_id)

    def __str__(self) -> str:
        return self.rule_id


@dataclass(frozen=True)
class RegistryLink:
    label: str  # always the literal rule id
    url: str

    def markdown(self) -> str:
        return f"[{self.label}]({self.url})"

    def html(self) -> str:
        href = html.escape(self.url, quote=True)
        return f'<a href="{href}">{html.escape(self.label)}</a>'


@dataclass(frozen=True)
class Reference:
    source: str          # e.g. "Flask docs", "OWASP"
    citation: str        # short human string
    url: Optional[str] = None

    def as_dict(self) -> dict[str, str]:
        out = {"source": self.source, "citation": self.citation}
        if self.url:
            out["url"] = self.url
        return out
