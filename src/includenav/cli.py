#!/usr/bin/env python3
"""Unified CLI for includenav.

Subcommands:
    - includenav resolve: Resolve an include/import string from a file
    - includenav context: Show the path reference at a position
    - includenav complete: List completions for a typed path prefix
    - includenav scan: Report references that resolve to nothing
    - includenav aliases: Show the alias table of a project
    - includenav probe: Check whether a URL answers
    - includenav preview: Show the first lines of what a reference points to
    - includenav links: List the http(s) links in a file
    - includenav watch: Keep scanning a project as files change

Positions are 1-based LINE:COLUMN pairs.

Example:
    $ includenav resolve src/app.ts @components/Button
    $ includenav context src/app.ts 3:24
    $ includenav scan src/ --json
    $ includenav aliases .
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .colors import get_colors
from .config import ConfigError, load_config
from .documents import TextDocument, iter_source_files
from .navigator import IncludeNavigator
from .watcher import run_watch

ROOT_MARKERS = [
    ".includenav.json",
    "tsconfig.json",
    "jsconfig.json",
    "package.json",
    "composer.json",
    ".git",
]


def find_project_root(path: Path) -> Path:
    """Walk up from ``path`` to the nearest directory holding a root marker.

    Falls back to the starting directory when no marker is found.
    """
    start = path.resolve()
    if not start.is_dir():
        start = start.parent
    for directory in [start, *start.parents]:
        if any((directory / marker).exists() for marker in ROOT_MARKERS):
            return directory
    return start


def parse_position(text: str) -> Tuple[int, int]:
    """Parse a 1-based 'LINE:COLUMN' into a 0-based (line, column) pair."""
    try:
        line, column = text.split(":", 1)
        line_number, column_number = int(line), int(column)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LINE:COLUMN, got {text!r}")
    if line_number < 1 or column_number < 1:
        raise argparse.ArgumentTypeError("LINE and COLUMN start at 1")
    return line_number - 1, column_number - 1


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def _navigator(args, path: str) -> IncludeNavigator:
    root = Path(args.root).resolve() if args.root else find_project_root(Path(path))
    config = load_config(root)
    overrides = {}
    if getattr(args, "css_urls", False):
        overrides["enableAssetUrlsInCSS"] = True
    if getattr(args, "no_css_modules", False):
        overrides["preferCssModules"] = False
    if getattr(args, "max_lines", None):
        overrides["hover.maxLines"] = args.max_lines
    if getattr(args, "validate_urls", False):
        overrides["url.validation"] = True
    return IncludeNavigator([root], config=config.merged(overrides))


def _open(path: str) -> TextDocument:
    try:
        return TextDocument.from_file(path)
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        sys.exit(2)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def run_resolve(args) -> int:
    c = get_colors(no_color=args.no_color)
    nav = _navigator(args, args.file)
    document = _open(args.file)
    result = asyncio.run(nav.resolve(document, args.raw))
    root = nav.workspace.root_for(document) or document.directory

    if args.json:
        _print_json(
            {
                "raw": result.raw,
                "status": result.status.value,
                "targets": [str(p) for p in result.targets],
                "candidates": [str(p) for p in result.candidates] if args.candidates else None,
            }
        )
    else:
        for target in result.targets:
            print(c.path(_display(target, root)))
        if not result.found:
            print(c.warning(f"Not found: {args.raw}"), file=sys.stderr)
        if args.candidates:
            for candidate in result.candidates:
                mark = c.success("✓") if candidate in result.targets else c.dim("·")
                print(f"  {mark} {_display(candidate, root)}", file=sys.stderr)
    return 0 if result.found else 1


def run_context(args) -> int:
    nav = _navigator(args, args.file)
    document = _open(args.file)
    line, column = args.position
    if args.prefix:
        context = nav.extract_prefix(document, line, column)
    else:
        context = nav.extract_context(document, line, column)

    if args.json:
        _print_json(
            {
                "kind": context.kind.value,
                "text": context.text if context.found else None,
                "start": context.start + 1 if context.found else None,
                "end": context.end + 1 if context.found else None,
            }
        )
    elif context.found:
        print(context.text)
    else:
        print("No include/import path at this position.", file=sys.stderr)
    return 0 if context.found else 1


def run_complete(args) -> int:
    c = get_colors(no_color=args.no_color)
    nav = _navigator(args, args.file)
    document = _open(args.file)
    entries = asyncio.run(nav.list_completions(document, args.prefix))

    if args.json:
        _print_json(
            [
                {"name": e.name, "kind": e.kind.value, "detail": e.detail, "sortKey": e.sort_key}
                for e in entries
            ]
        )
    else:
        for entry in entries:
            name = c.bold(entry.name) if entry.kind.value == "directory" else entry.name
            print(f"{name}  {c.dim(entry.detail)}")
    return 0


def _collect_files(paths: List[str]) -> List[Path]:
    files = []
    for path in paths:
        p = Path(path)
        if p.is_dir():
            files.extend(iter_source_files(p))
        else:
            files.append(p)
    return files


def run_scan(args) -> int:
    c = get_colors(no_color=args.no_color)
    files = _collect_files(args.paths)
    if not files:
        print(c.warning("No source files to scan."), file=sys.stderr)
        return 0

    nav = _navigator(args, args.paths[0])

    async def scan_all():
        results = []
        for file_path in files:
            document = _open(str(file_path))
            if nav.workspace.root_for(document) is None:
                nav.workspace.add_root(find_project_root(file_path))
            results.append((document, await nav.scan_document(document)))
        return results

    results = asyncio.run(scan_all())
    total = sum(len(findings) for _, findings in results)

    if args.json:
        _print_json(
            {
                str(document.path): [f.to_dict() for f in findings]
                for document, findings in results
                if findings
            }
        )
    else:
        cwd = Path.cwd()
        for document, findings in results:
            for finding in findings:
                location = c.path(_display(document.path, cwd))
                position = c.position(finding.line + 1, finding.start + 1)
                print(f"{location}:{position} {c.warning(finding.severity)} {finding.message}")
        summary = f"{len(results)} files scanned, {total} unresolved references"
        print(c.success(summary) if total == 0 else c.warning(summary), file=sys.stderr)
    return 1 if total else 0


def run_aliases(args) -> int:
    c = get_colors(no_color=args.no_color)
    root = Path(args.path).resolve()
    nav = IncludeNavigator([root])
    entries = asyncio.run(nav.alias_entries(root))

    if args.json:
        _print_json(
            [{"prefix": e.prefix, "target": str(e.target), "source": e.source} for e in entries]
        )
    elif not entries:
        print("No aliases configured.", file=sys.stderr)
    else:
        width = max(len(e.prefix) for e in entries)
        for entry in entries:
            print(
                f"{c.alias(entry.prefix.ljust(width))}  -> "
                f"{c.path(_display(entry.target, root))}  {c.dim(entry.source)}"
            )
    return 0


def run_probe(args) -> int:
    nav = IncludeNavigator()
    result = asyncio.run(nav.probe_url(args.url))
    if args.json:
        _print_json(
            {
                "url": result.url,
                "ok": result.ok,
                "statusCode": result.status_code,
                "statusMessage": result.status_message,
                "error": result.error or None,
            }
        )
    else:
        print(f"{result.url}: {result.status_line}")
    return 0 if result.ok else 1


def run_preview(args) -> int:
    c = get_colors(no_color=args.no_color)
    args.validate_urls = True
    nav = _navigator(args, args.file)
    document = _open(args.file)
    line, column = args.position
    preview = asyncio.run(nav.preview_at(document, line, column))
    if preview is None:
        print("Nothing to preview at this position.", file=sys.stderr)
        return 1

    if preview.url_status is not None:
        print(f"URL: {preview.raw}")
        print(f"Status: {preview.url_status}")
        return 0

    root = nav.workspace.root_for(document) or document.directory
    for i, item in enumerate(preview.files):
        if i:
            print()
        print(c.bold(f"File: {_display(item.path, root)}"))
        print(item.text)
    return 0


def run_links(args) -> int:
    c = get_colors(no_color=args.no_color)
    document = _open(args.file)
    nav = IncludeNavigator()
    links = nav.document_links(document)
    if args.json:
        _print_json(
            [{"line": link.line + 1, "column": link.start + 1, "url": link.url} for link in links]
        )
    else:
        for link in links:
            print(f"{c.position(link.line + 1, link.start + 1)} {link.url}")
    return 0


def _add_common(parser: argparse.ArgumentParser, json_output: bool = True) -> None:
    parser.add_argument("-r", "--root", help="Project root (default: detected from the file)")
    if json_output:
        parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="includenav",
        description="Resolve include/import paths and find the ones that point nowhere",
        epilog="Run 'includenav <command> --help' for more information on a command.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    # includenav resolve
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve an include/import string",
        description="Resolve a raw include/import string as written in FILE.",
        epilog="Example: includenav resolve src/app.ts @components/Button",
    )
    resolve_parser.add_argument("file", help="File containing the reference")
    resolve_parser.add_argument("raw", help="The include/import string")
    resolve_parser.add_argument(
        "--candidates", action="store_true", help="Also show every path that was tried"
    )
    resolve_parser.add_argument(
        "--no-css-modules", action="store_true", help="Do not prefer .module.css files"
    )
    _add_common(resolve_parser)

    # includenav context
    context_parser = subparsers.add_parser(
        "context",
        help="Show the path reference at a position",
        description="Extract the include/import path literal at LINE:COLUMN.",
        epilog="Example: includenav context src/app.ts 3:24",
    )
    context_parser.add_argument("file", help="File to inspect")
    context_parser.add_argument("position", type=parse_position, help="LINE:COLUMN (1-based)")
    context_parser.add_argument(
        "--prefix", action="store_true", help="Only the text before the cursor (completion mode)"
    )
    context_parser.add_argument(
        "--css-urls", action="store_true", help="Treat url(...) arguments in stylesheets as paths"
    )
    _add_common(context_parser)

    # includenav complete
    complete_parser = subparsers.add_parser(
        "complete",
        help="List completions for a path prefix",
        description="List directory entries matching PREFIX as typed in FILE.",
        epilog="Example: includenav complete src/app.ts ./comp",
    )
    complete_parser.add_argument("file", help="File the prefix is typed in")
    complete_parser.add_argument("prefix", nargs="?", default="", help="Typed path prefix")
    _add_common(complete_parser)

    # includenav scan
    scan_parser = subparsers.add_parser(
        "scan",
        help="Report unresolved references",
        description="Scan files or directories for include/import paths that resolve to nothing.",
        epilog="Example: includenav scan src/",
    )
    scan_parser.add_argument("paths", nargs="+", help="Files or directories to scan")
    scan_parser.add_argument(
        "--no-css-modules", action="store_true", help="Do not prefer .module.css files"
    )
    _add_common(scan_parser)

    # includenav aliases
    aliases_parser = subparsers.add_parser(
        "aliases",
        help="Show the alias table of a project",
        description="List path aliases read from tsconfig/jsconfig and vite/webpack configs.",
        epilog="Example: includenav aliases .",
    )
    aliases_parser.add_argument("path", nargs="?", default=".", help="Project root")
    aliases_parser.add_argument("--json", action="store_true", help="Output JSON")
    aliases_parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    # includenav probe
    probe_parser = subparsers.add_parser(
        "probe",
        help="Check whether a URL answers",
        description="Send a HEAD request (3 second timeout) and print the status.",
        epilog="Example: includenav probe https://cdn.example.com/lib.js",
    )
    probe_parser.add_argument("url", help="http(s) URL")
    probe_parser.add_argument("--json", action="store_true", help="Output JSON")

    # includenav preview
    preview_parser = subparsers.add_parser(
        "preview",
        help="Preview what a reference points to",
        description="Show the first lines of the files the reference at LINE:COLUMN resolves to.",
        epilog="Example: includenav preview src/app.ts 3:24 --max-lines 10",
    )
    preview_parser.add_argument("file", help="File to inspect")
    preview_parser.add_argument("position", type=parse_position, help="LINE:COLUMN (1-based)")
    preview_parser.add_argument("--max-lines", type=int, help="Lines shown per file")
    preview_parser.add_argument(
        "--css-urls", action="store_true", help="Treat url(...) arguments in stylesheets as paths"
    )
    _add_common(preview_parser, json_output=False)

    # includenav links
    links_parser = subparsers.add_parser(
        "links",
        help="List http(s) links in a file",
        description="List every http(s) URL in the first 2000 lines of FILE.",
    )
    links_parser.add_argument("file", help="File to inspect")
    links_parser.add_argument("--json", action="store_true", help="Output JSON")
    links_parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    # includenav watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Keep scanning a project as files change",
        description="Poll a project and re-scan documents when they or the alias configs change.",
        epilog="Example: includenav watch /my/project",
    )
    watch_parser.add_argument("path", help="Project root")
    watch_parser.add_argument("-i", "--ignore", nargs="*", help="Glob patterns to ignore")
    watch_parser.add_argument(
        "--debounce",
        type=float,
        default=0.5,
        help="Seconds to wait after a change before scanning (default: 0.5)",
    )
    watch_parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    return parser


COMMANDS = {
    "resolve": run_resolve,
    "context": run_context,
    "complete": run_complete,
    "scan": run_scan,
    "aliases": run_aliases,
    "probe": run_probe,
    "preview": run_preview,
    "links": run_links,
}


def main(argv: Optional[List[str]] = None):
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "watch":
            run_watch(args)
            code = 0
        else:
            code = COMMANDS[args.command](args)
    except (ConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
