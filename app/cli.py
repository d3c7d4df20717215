from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.json_output import build_json_payload
from app.mdx_output import build_mdx
from core.config import RULE_DIR, Settings, load_settings
from core.enums import LinkStyle
from core.exceptions import InvalidArgument, UnknownEntryError
from resolve.directives import check_document, render_document
from resolve.links import RegistryResolver
from rules.catalog import (
    CheatEntry,
    filter_entries,
    load_entries,
    parse_location_selection,
    select_entries,
)
from rules.validate_rules import validate_dir

log = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SystemExit(f"Document not found: {p}") from e


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    return settings.override(
        registry_base_url=args.registry_url,
        ruleset_base_url=args.ruleset_url,
        rule_dir=args.rule_dir,
    )


def _print_plain(entries: list[CheatEntry], resolver: RegistryResolver) -> None:
    for e in entries:
        print("=" * 80)
        print(f"{e.section}. {e.title}")
        print(f"Location: {e.location.value} | severity={e.severity.value}")
        print()
        print(e.summary)
        print()
        print("Example:")
        for line in e.example.splitlines():
            print(f"    {line}")
        print()
        if e.mitigation:
            print("Mitigation:")
            for m in e.mitigation:
                print(f" - {m}")
            print()
        print("Registry rules:")
        for ref in e.registry_rules:
            link = resolver.rule(ref)
            print(f" - {link.label}")
            print(f"   {link.url}")
        if e.references:
            print("References:")
            for r in sorted(e.references, key=lambda r: (r.source, r.citation)):
                if r.url:
                    print(f" - {r.source}: {r.citation} ({r.url})")
                else:
                    print(f" - {r.source}: {r.citation}")
        print()
    print("=" * 80)


def cmd_show(args: argparse.Namespace, settings: Settings, resolver: RegistryResolver) -> int:
    selected = parse_location_selection(args.location)
    entries_all = load_entries(settings.rule_dir)

    if args.entries:
        try:
            entries = select_entries(entries_all, args.entries)
        except UnknownEntryError as e:
            # Print one line per unknown token for clarity
            for tok in e.unknown:
                opts = e.suggestions.get(tok, ())
                if opts:
                    print(
                        f"Entry '{tok}' not found. Did you mean: {', '.join(opts)}?",
                        file=sys.stderr,
                    )
                else:
                    print(f"Entry '{tok}' not found.", file=sys.stderr)
            print("Tip: use an entry id or a section such as 2.C.", file=sys.stderr)
            return 2
        entries = filter_entries(entries, selected)
    else:
        entries = filter_entries(entries_all, selected)

    if not entries:
        locs = ", ".join(s.value for s in selected)
        print(f"No cheat-sheet entries in selected locations: {locs}.")
        return 0

    if args.format == "json":
        payload = build_json_payload(
            entries=entries,
            resolver=resolver,
            selected_locations=selected,
            requested=args.entries,
        )
        print(json.dumps(payload, indent=2))
        return 0

    if args.format == "mdx":
        print(build_mdx(entries), end="")
        return 0

    if args.format == "rich":
        from app.render import build_summary_rows, render_rich_details, render_rich_summary

        render_rich_summary(build_summary_rows(entries), top=args.top)
        if args.details:
            render_rich_details(entries, resolver)
        return 0

    _print_plain(entries, resolver)
    return 0


def cmd_resolve(args: argparse.Namespace, settings: Settings, resolver: RegistryResolver) -> int:
    # Resolve all first: a malformed id produces no partial output
    links = [
        resolver.ruleset(rid) if args.ruleset else resolver.rule(rid)
        for rid in args.rule_ids
    ]
    for link in links:
        if args.format == "url":
            print(link.url)
        elif args.format == "html":
            print(link.html())
        else:
            print(link.markdown())
    return 0


def cmd_render(args: argparse.Namespace, settings: Settings, resolver: RegistryResolver) -> int:
    if args.catalog:
        text = build_mdx(load_entries(settings.rule_dir))
        source = "<catalog>"
    elif args.document:
        text = _read_text(args.document)
        source = "<stdin>" if args.document == "-" else args.document
    else:
        raise SystemExit("render: provide a DOCUMENT path, '-' for stdin, or --catalog")

    style = LinkStyle.html if args.html else LinkStyle.markdown
    out = render_document(text, resolver, style=style, source=source)

    if args.output:
        Path(args.output).write_text(out, encoding="utf-8")
        log.info("Wrote %s", args.output)
    else:
        sys.stdout.write(out)
    return 0


def cmd_check(args: argparse.Namespace, settings: Settings, resolver: RegistryResolver) -> int:
    problems: list[str] = []

    if not settings.rule_dir.exists():
        print(f"Rule directory not found: {settings.rule_dir}")
        return 2

    count, errors = validate_dir(settings.rule_dir)
    for err in errors:
        problems.append(f"{err.file}: {err.message}")

    for doc in args.documents:
        source = "<stdin>" if doc == "-" else doc
        for err in check_document(_read_text(doc), source=source):
            problems.append(str(err))

    if problems:
        print("Check failed:\n")
        for p in problems:
            print(f"- {p}")
        return 1

    print(f"Check passed ({count} entries, {len(args.documents)} documents).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xss-cheatsheet",
        description="Flask/Jinja2 XSS cheat sheet with links into a static-analysis rule registry.",
    )
    p.add_argument(
        "--config",
        metavar="PATH",
        help="INI file with [registry] base_url / ruleset_base_url and [catalog] rule_dir.",
    )
    p.add_argument("--registry-url", metavar="URL", help="Base URL for rule links.")
    p.add_argument("--ruleset-url", metavar="URL", help="Base URL for ruleset links.")
    p.add_argument(
        "--rule-dir",
        metavar="DIR",
        help=f"Directory of cheat-sheet entry JSON files (default: {RULE_DIR}).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr.")

    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("show", help="Print cheat-sheet entries.")
    s.add_argument(
        "entries",
        nargs="*",
        help="Entry ids or sections (e.g. template-href-var, 2.C). Default: all.",
    )
    s.add_argument(
        "--location",
        default="all",
        help="Comma-separated: all, code, templates (aliases: server, python, jinja, html).",
    )
    s.add_argument(
        "--format",
        choices=("plain", "rich", "json", "mdx"),
        default="plain",
        help="Output format. Default: plain.",
    )
    s.add_argument(
        "--details",
        action="store_true",
        help="In rich mode, print a panel per entry after the summary.",
    )
    s.add_argument(
        "--top",
        type=int,
        default=0,
        help="In rich mode, show only the top N entries in the summary (0 = all).",
    )
    s.set_defaults(func=cmd_show)

    r = sub.add_parser("resolve", help="Print registry links for rule ids.")
    r.add_argument("rule_ids", nargs="+", metavar="RULE_ID")
    r.add_argument("--ruleset", action="store_true", help="Resolve ruleset ids instead of rule ids.")
    r.add_argument(
        "--format",
        choices=("markdown", "html", "url"),
        default="markdown",
    )
    r.set_defaults(func=cmd_resolve)

    d = sub.add_parser("render", help="Expand LinkToRegistryRule directives in a document.")
    d.add_argument("document", nargs="?", help="MDX/Markdown file, or '-' for stdin.")
    d.add_argument("--catalog", action="store_true", help="Render the generated catalog cheat sheet.")
    d.add_argument("-o", "--output", metavar="PATH", help="Write to PATH instead of stdout.")
    d.add_argument("--html", action="store_true", help="Emit <a> anchors instead of Markdown links.")
    d.set_defaults(func=cmd_render)

    c = sub.add_parser("check", help="Validate the catalog and any given documents.")
    c.add_argument("documents", nargs="*", metavar="DOC")
    c.set_defaults(func=cmd_check)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    try:
        settings = _settings_from_args(args)
        resolver = RegistryResolver.from_settings(settings)
        return args.func(args, settings, resolver)
    except InvalidArgument as e:
        log.debug("Aborting on invalid argument", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # Broken entry files; `check` reports every problem
        log.debug("Aborting on unreadable catalog", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        print("Tip: run the check command for a full report.", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
