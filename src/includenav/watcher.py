#!/usr/bin/env python3
"""Watch mode: keep include/import diagnostics current while files change.

Polls a project root (no external dependencies) and turns what it sees into
document events for the navigator:

- a new source file is opened and scanned,
- a modified source file is saved and re-scanned,
- a deleted source file is closed and its findings dropped,
- a changed build-tool config (tsconfig.json, vite.config.ts, ...) invalidates
  the root's alias table and re-scans every tracked document.

Example:
    Command line usage:
        $ includenav watch /path/to/project

    Python API usage:
        >>> watcher = IncludeWatcher('/path/to/project')
        >>> watcher.start()  # Blocks until Ctrl+C
"""

import asyncio
import fnmatch
import logging
import signal
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from .alias_config import BUNDLER_CONFIGS, COMPILER_CONFIGS
from .colors import get_colors
from .config import CONFIG_FILENAME, ConfigError, load_config
from .diagnostics import Finding
from .documents import TextDocument, iter_source_files
from .navigator import IncludeNavigator

logger = logging.getLogger(__name__)

WATCHED_CONFIGS = COMPILER_CONFIGS + BUNDLER_CONFIGS + [CONFIG_FILENAME]


@dataclass
class WatchEvents:
    """Changes seen by one poll, as relative paths."""

    opened: List[str] = field(default_factory=list)
    saved: List[str] = field(default_factory=list)
    closed: List[str] = field(default_factory=list)
    config_changed: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.opened or self.saved or self.closed or self.config_changed)

    def merge(self, other: "WatchEvents") -> None:
        for name in ("opened", "saved", "closed", "config_changed"):
            target = getattr(self, name)
            for item in getattr(other, name):
                if item not in target:
                    target.append(item)


class IncludeWatcher:
    """Watches a project and re-scans documents as they change.

    Attributes:
        root_path: Project root.
        navigator: Session whose diagnostics are kept current.
        ignore_patterns: Extra glob patterns of files to leave alone.
        debounce: Seconds to wait after the last change before scanning.
        poll_interval: Seconds between polls.
    """

    def __init__(
        self,
        root_path: str,
        navigator: Optional[IncludeNavigator] = None,
        ignore_patterns: List[str] = None,
        debounce: float = 0.5,
        poll_interval: float = 1.0,
        no_color: bool = False,
    ):
        self.root_path = Path(root_path).resolve()
        self.navigator = navigator or IncludeNavigator(
            [self.root_path], config=load_config(self.root_path)
        )
        self.ignore_patterns = list(ignore_patterns or [])
        self.debounce = debounce
        self.poll_interval = poll_interval

        self._running = False
        self._file_hashes: Dict[str, str] = {}
        self._config_hashes: Dict[str, str] = {}
        self._colors = get_colors(no_color=no_color)

    def _should_ignore(self, path: Path) -> bool:
        name = path.name
        rel = path.relative_to(self.root_path).as_posix()
        return any(
            fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(rel, pattern)
            for pattern in self.ignore_patterns
        )

    def _hash_file(self, file_path: Path) -> Optional[str]:
        """Hash a file's content, or None if it vanished or is unreadable."""
        try:
            if not file_path.is_file():
                return None
            from . import compute_content_hash

            return compute_content_hash(file_path.read_text(encoding="utf-8", errors="replace"))
        except OSError:
            # Deleted between listing and reading
            return None

    def _current_hashes(self) -> Dict[str, str]:
        hashes = {}
        for file_path in iter_source_files(self.root_path):
            if self._should_ignore(file_path):
                continue
            file_hash = self._hash_file(file_path)
            if file_hash is not None:
                hashes[file_path.relative_to(self.root_path).as_posix()] = file_hash
        return hashes

    def _current_config_hashes(self) -> Dict[str, str]:
        hashes = {}
        for name in WATCHED_CONFIGS:
            file_hash = self._hash_file(self.root_path / name)
            if file_hash is not None:
                hashes[name] = file_hash
        return hashes

    def poll(self) -> WatchEvents:
        """Compare the tree with the last poll and report what changed."""
        events = WatchEvents()
        current = self._current_hashes()
        for rel_path, file_hash in current.items():
            previous = self._file_hashes.get(rel_path)
            if previous is None:
                events.opened.append(rel_path)
            elif previous != file_hash:
                events.saved.append(rel_path)
        events.closed.extend(p for p in self._file_hashes if p not in current)
        self._file_hashes = current

        configs = self._current_config_hashes()
        for name in set(configs) | set(self._config_hashes):
            if configs.get(name) != self._config_hashes.get(name):
                events.config_changed.append(name)
        self._config_hashes = configs
        return events

    def _document(self, rel_path: str) -> Optional[TextDocument]:
        try:
            return TextDocument.from_file(self.root_path / rel_path)
        except OSError as e:
            logger.debug("Cannot open %s: %s", rel_path, e)
            return None

    async def process(self, events: WatchEvents) -> Dict[str, List[Finding]]:
        """Apply events to the navigator.

        Returns:
            Findings of every document scanned, keyed by relative path.
        """
        nav = self.navigator
        for rel_path in events.closed:
            nav.close_document(TextDocument(path=self.root_path / rel_path))

        to_scan: Set[str] = set(events.opened) | set(events.saved)
        if events.config_changed:
            nav.invalidate_aliases(self.root_path)
            if CONFIG_FILENAME in events.config_changed:
                try:
                    nav.set_config(load_config(self.root_path))
                except ConfigError as e:
                    logger.warning("Keeping previous options: %s", e)
            to_scan |= set(self._file_hashes)

        results = {}
        for rel_path in sorted(to_scan):
            document = self._document(rel_path)
            if document is None:
                continue
            results[rel_path] = await nav.scan_document(document)
        return results

    def _report(self, results: Dict[str, List[Finding]]) -> None:
        c = self._colors
        total = 0
        for rel_path, findings in sorted(results.items()):
            for finding in findings:
                total += 1
                print(
                    f"{c.path(rel_path)}:{c.position(finding.line + 1, finding.start + 1)} "
                    f"{c.warning(finding.severity)} {finding.message}",
                    file=sys.stderr,
                )
        status = c.success("✓") if total == 0 else c.warning("!")
        print(
            f"{status} Scanned {len(results)} files, {total} unresolved references",
            file=sys.stderr,
        )

    async def run(self) -> None:
        """Poll until stopped."""
        c = self._colors
        self._running = True

        print(f"{c.bold('Include Watcher')}", file=sys.stderr)
        print(f"  Root: {c.path(str(self.root_path))}", file=sys.stderr)

        # Everything present at startup counts as opened
        self._report(await self.process(await asyncio.to_thread(self.poll)))
        print(f"{c.dim('Press Ctrl+C to stop')}", file=sys.stderr)

        pending = WatchEvents()
        last_change = 0.0
        while self._running:
            # Walking and hashing the tree is blocking file I/O
            events = await asyncio.to_thread(self.poll)
            if events:
                pending.merge(events)
                last_change = time.monotonic()

            if pending and time.monotonic() - last_change >= self.debounce:
                if pending.config_changed:
                    names = ", ".join(pending.config_changed)
                    print(f"{c.cyan('Config changed:')} {names}", file=sys.stderr)
                self._report(await self.process(pending))
                pending = WatchEvents()

            await asyncio.sleep(self.poll_interval)

        print(f"{c.success('✓')} Watcher stopped", file=sys.stderr)

    def start(self) -> None:
        """Start watching. Blocks until interrupted."""
        c = self._colors

        def signal_handler(signum, frame):
            self._running = False
            print(f"\n{c.dim('Stopping watcher...')}", file=sys.stderr)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
        asyncio.run(self.run())

    def stop(self) -> None:
        self._running = False


def run_watch(args) -> None:
    """Run the watch command.

    Args:
        args: Parsed command-line arguments.
    """
    watcher = IncludeWatcher(
        root_path=args.path,
        ignore_patterns=getattr(args, "ignore", None),
        debounce=getattr(args, "debounce", 0.5),
        no_color=getattr(args, "no_color", False),
    )
    watcher.start()
