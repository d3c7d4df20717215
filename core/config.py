from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from core.constants import DEFAULT_REGISTRY_BASE_URL, DEFAULT_RULESET_BASE_URL
from core.exceptions import InvalidArgument

BASE_DIR = Path(__file__).resolve().parents[1]
RULE_DIR = BASE_DIR / "rules" / "rule_defs"
DOCS_DIR = BASE_DIR / "docs"
DEFAULT_CONFIG_NAME = "cheatsheet.ini"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    registry_base_url: str = DEFAULT_REGISTRY_BASE_URL
    ruleset_base_url: str = DEFAULT_RULESET_BASE_URL
    rule_dir: Path = RULE_DIR

    def override(
        self,
        *,
        registry_base_url: str | None = None,
        ruleset_base_url: str | None = None,
        rule_dir: str | Path | None = None,
    ) -> Settings:
        """Apply command-line values on top of file values; None keeps the current one."""
        out = self
        if registry_base_url:
            out = replace(out, registry_base_url=registry_base_url)
        if ruleset_base_url:
            out = replace(out, ruleset_base_url=ruleset_base_url)
        if rule_dir:
            out = replace(out, rule_dir=Path(rule_dir))
        return out


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Read settings from an INI file.

    Without an explicit path, ./cheatsheet.ini is used when present. Missing
    keys fall back to the built-in defaults; a missing explicit file is an error.
    """
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.exists():
            return Settings()
        path = candidate

    p = Path(path)
    if not p.exists():
        raise InvalidArgument(str(p), "config file not found")

    # URLs may carry percent-encoding, so no %-interpolation
    config = configparser.ConfigParser(interpolation=None)
    try:
        config.read(p, encoding="utf-8")
    except configparser.Error as e:
        raise InvalidArgument(str(p), f"unreadable config file: {e}") from e
    log.debug("Loaded config from %s", p)

    rule_dir_raw = config.get("catalog", "rule_dir", fallback="")
    rule_dir = RULE_DIR
    if rule_dir_raw:
        rule_dir = Path(rule_dir_raw)
        if not rule_dir.is_absolute():
            rule_dir = (p.parent / rule_dir).resolve()

    settings = Settings(
        registry_base_url=config.get(
            "registry", "base_url", fallback=DEFAULT_REGISTRY_BASE_URL
        ),
        ruleset_base_url=config.get(
            "registry", "ruleset_base_url", fallback=DEFAULT_RULESET_BASE_URL
        ),
        rule_dir=rule_dir,
    )
    return settings
