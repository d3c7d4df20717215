# rule id -> registry hyperlink
from __future__ import annotations

from urllib.parse import urlsplit

from core.constants import DEFAULT_REGISTRY_BASE_URL, DEFAULT_RULESET_BASE_URL
from core.exceptions import InvalidArgument
from core.models import RegistryLink, RuleReference, check_identifier


def check_base_url(base_url: str) -> str:
    """
    Validate a registry base URL and return it without trailing slashes.

    The base must be an absolute http(s) URL with a host and no query or
    fragment, since the identifier is appended as the last path segment.
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise InvalidArgument(str(base_url or ""), "registry base URL must not be empty")

    raw = base_url.strip()
    parts = urlsplit(raw)
    if parts.scheme not in ("http", "https"):
        raise InvalidArgument(raw, "registry base URL must use http or https")
    if not parts.netloc:
        raise InvalidArgument(raw, "registry base URL must include a host")
    # A bare "?" or "#" splits to an empty query/fragment but still swallows the id
    if "?" in raw or "#" in raw:
        raise InvalidArgument(raw, "registry base URL must not have a query or fragment")
    if any(ch.isspace() for ch in raw):
        raise InvalidArgument(raw, "registry base URL must not contain whitespace")

    return raw.rstrip("/")


def _as_id(ref: str | RuleReference) -> str:
    if isinstance(ref, RuleReference):
        return ref.rule_id
    return ref


def resolve_rule_link(
    rule_id: str | RuleReference,
    base_url: str = DEFAULT_REGISTRY_BASE_URL,
) -> RegistryLink:
    rid = check_identifier(_as_id(rule_id), "rule id")
    return RegistryLink(label=rid, url=f"{check_base_url(base_url)}/{rid}")


def resolve_ruleset_link(
    ruleset_id: str,
    base_url: str = DEFAULT_RULESET_BASE_URL,
) -> RegistryLink:
    rid = check_identifier(ruleset_id, "ruleset id")
    return RegistryLink(label=rid, url=f"{check_base_url(base_url)}/{rid}")


class RegistryResolver:
    """Resolves identifiers against fixed, pre-validated registry bases."""

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_BASE_URL,
        ruleset_base_url: str = DEFAULT_RULESET_BASE_URL,
    ):
        self.base_url = check_base_url(base_url)
        self.ruleset_base_url = check_base_url(ruleset_base_url)

    @classmethod
    def from_settings(cls, settings) -> RegistryResolver:
        return cls(settings.registry_base_url, settings.ruleset_base_url)

    def rule(self, rule_id: str | RuleReference) -> RegistryLink:
        return resolve_rule_link(rule_id, self.base_url)

    def ruleset(self, ruleset_id: str) -> RegistryLink:
        return resolve_ruleset_link(ruleset_id, self.ruleset_base_url)

    def __repr__(self) -> str:
        return f"RegistryResolver(base_url={self.base_url!r}, ruleset_base_url={self.ruleset_base_url!r})"
