# severity bins, where the unsafe pattern lives

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    info = "info"
    warning = "warning"
    error = "error"


class Location(StrEnum):
    code = "code"
    templates = "templates"


class LinkStyle(StrEnum):
    markdown = "markdown"
    html = "html"
