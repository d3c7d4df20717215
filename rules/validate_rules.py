from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.exceptions import InvalidArgument
from core.models import check_identifier

#Keep these in sync with core.enums
ALLOWED_LOCATIONS = {"code", "templates"}
ALLOWED_SEVERITIES = {"info", "warning", "error"}

REQUIRED_TOP_KEYS = {
    "id",
    "title",
    "section",
    "location",
    "severity",
    "summary",
    "example",
    "registry_rules",
}

SECTION_RE = re.compile(r"^[0-9]+\.[A-Z]$")
ENTRY_ID_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


@dataclass
class RuleError:
    file: str
    message: str


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def _is_str_list(x: Any) -> bool:
    return isinstance(x, list) and all(isinstance(v, str) for v in x)


def validate_rule(path: Path, raw: Dict[str, Any]) -> List[RuleError]:
    errors: List[RuleError] = []

    if not isinstance(raw, dict):
        return [RuleError(path.name, "Entry must be a JSON object")]

    # Required top-level keys
    missing = REQUIRED_TOP_KEYS - set(raw.keys())
    if missing:
        errors.append(RuleError(path.name, f"Missing required keys: {sorted(missing)}"))
        return errors  # cannot safely continue

    if not isinstance(raw["id"], str) or not ENTRY_ID_RE.match(raw["id"]):
        errors.append(RuleError(path.name, f"Invalid id: {raw['id']!r} (lowercase, digits and '-')"))

    # Enums
    if raw["location"] not in ALLOWED_LOCATIONS:
        errors.append(RuleError(path.name, f"Invalid location: {raw['location']} (allowed: {sorted(ALLOWED_LOCATIONS)})"))

    if raw["severity"] not in ALLOWED_SEVERITIES:
        errors.append(RuleError(path.name, f"Invalid severity: {raw['severity']} (allowed: {sorted(ALLOWED_SEVERITIES)})"))

    if not isinstance(raw["section"], str) or not SECTION_RE.match(raw["section"]):
        errors.append(RuleError(path.name, f"Invalid section: {raw['section']!r} (expected e.g. '2.C')"))

    for key in ("title", "summary", "example"):
        if not isinstance(raw[key], str) or not raw[key].strip():
            errors.append(RuleError(path.name, f"{key} must be a non-empty string"))

    for key in ("mitigation", "tags"):
        if key in raw and not _is_str_list(raw[key]):
            errors.append(RuleError(path.name, f"{key} must be a list of strings"))

    # registry_rules: non-empty list of well-formed identifiers
    rule_ids = raw["registry_rules"]
    if not isinstance(rule_ids, list) or not rule_ids:
        errors.append(RuleError(path.name, "registry_rules must be a non-empty list"))
    else:
        for rid in rule_ids:
            try:
                check_identifier(rid, "rule id")
            except InvalidArgument as e:
                errors.append(RuleError(path.name, f"registry_rules: {e}"))

    refs = raw.get("references", [])
    if not isinstance(refs, list):
        errors.append(RuleError(path.name, "references must be a list"))
    else:
        for i, r in enumerate(refs):
            if not isinstance(r, dict):
                errors.append(RuleError(path.name, f"references[{i}] must be an object"))
                continue
            for k in ("source", "citation"):
                if not isinstance(r.get(k), str) or not r.get(k):
                    errors.append(RuleError(path.name, f"references[{i}] missing {k}"))

    return errors


def validate_dir(rule_dir: Path) -> tuple[int, List[RuleError]]:
    """Validate every entry file; returns (file count, errors) including cross-file duplicates."""
    all_errors: List[RuleError] = []
    files = sorted(rule_dir.glob("*.json"))

    seen_ids: Dict[str, str] = {}
    seen_sections: Dict[str, str] = {}

    for p in files:
        try:
            raw = _load_json(p)
        except ValueError as e:
            all_errors.append(RuleError(p.name, str(e)))
            continue

        all_errors.extend(validate_rule(p, raw))
        if not isinstance(raw, dict):
            continue

        eid = raw.get("id")
        if isinstance(eid, str):
            if eid in seen_ids:
                all_errors.append(RuleError(p.name, f"Duplicate id '{eid}' (also in {seen_ids[eid]})"))
            else:
                seen_ids[eid] = p.name

        sec = raw.get("section")
        if isinstance(sec, str):
            if sec in seen_sections:
                all_errors.append(RuleError(p.name, f"Duplicate section '{sec}' (also in {seen_sections[sec]})"))
            else:
                seen_sections[sec] = p.name

    return len(files), all_errors


def main(rule_dir: Optional[Path] = None) -> int:
    if rule_dir is None:
        base_dir = Path(__file__).resolve().parents[1]
        rule_dir = base_dir / "rules" / "rule_defs"

    if not rule_dir.exists():
        print(f"Rule directory not found: {rule_dir}")
        return 2

    count, all_errors = validate_dir(rule_dir)
    if not count:
        print(f"No entry JSON files found in: {rule_dir}")
        return 2

    if all_errors:
        print("Entry validation failed:\n")
        for err in all_errors:
            print(f"- {err.file}: {err.message}")
        return 1

    print(f"Entry validation passed ({count} entries).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
