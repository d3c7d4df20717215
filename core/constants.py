from __future__ import annotations

import re
from typing import Dict

from core.enums import Location

# Registry addressing (overridable through config / CLI)

DEFAULT_REGISTRY_BASE_URL = "https://semgrep.dev/r"
DEFAULT_RULESET_BASE_URL = "https://semgrep.dev/p"

# RFC 3986 pchar without pct-encoded: unreserved / sub-delims / ":" / "@"
RULE_ID_RE = re.compile(r"^[A-Za-z0-9._~!$&'()*+,;=:@-]+$")

# Dot segments are swallowed by URL normalization
DOT_SEGMENTS = {".", ".."}

DIRECTIVE_NAME = "LinkToRegistryRule"


_LOCATION_ALIASES: Dict[str, str] = {
    # server-side Python
    "code": Location.code,
    "server": Location.code,
    "python": Location.code,
    "flask": Location.code,

    # Jinja2 templates
    "templates": Location.templates,
    "template": Location.templates,
    "jinja": Location.templates,
    "jinja2": Location.templates,
    "html": Location.templates,
}


def normalize_location(raw: str) -> str:
    if raw is None:
        return ""
    s = str(raw).strip()
    if not s:
        return ""
    return _LOCATION_ALIASES.get(s.lower(), s)
