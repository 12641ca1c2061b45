#!/usr/bin/env python3
"""Path alias extraction from build-tool configuration.

Two kinds of sources feed the alias table of a project root:

- Compiler configs (tsconfig.json, jsconfig.json) are parsed as JSON with
  comments. ``compilerOptions.paths`` keys become prefixes and the first
  replacement of each key becomes the target directory, resolved against
  ``compilerOptions.baseUrl``.
- Bundler configs (vite.config.*, webpack.config.*) are executable code and
  are never evaluated. Aliases are lifted from the text: quoted pairs inside
  ``alias: { ... }`` blocks and ``{ find: 'k', replacement: 'v' }`` objects.

Every source is read independently; one that is missing or broken contributes
nothing. The merged table is ordered by descending prefix length so the first
matching entry is always the longest one.

Example:
    >>> cache = AliasCache(LocalFileSystem())
    >>> entries = await cache.get(Path('/my/project'))
    >>> match_alias('@components/Button', entries)
    AliasMatch(entry=AliasEntry(prefix='@components/', ...), rest='Button')
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .documents import FileSystem

logger = logging.getLogger(__name__)

COMPILER_CONFIGS = ["tsconfig.json", "jsconfig.json"]

BUNDLER_CONFIGS = [
    "vite.config.ts",
    "vite.config.js",
    "vite.config.mjs",
    "vite.config.mts",
    "vite.config.cjs",
    "webpack.config.js",
    "webpack.config.ts",
    "webpack.config.cjs",
    "webpack.config.mjs",
]

# alias: { ... }
ALIAS_BLOCK_RE = re.compile(r"\balias\s*:\s*\{")
# 'key': 'value'
QUOTED_PAIR_RE = re.compile(r"""['"]([^'"\n]+)['"]\s*:\s*['"]([^'"\n]+)['"]""")
# { find: 'key', replacement: 'value' }
FIND_REPLACEMENT_RE = re.compile(
    r"""\{\s*find\s*:\s*['"]([^'"\n]+)['"]\s*,\s*replacement\s*:\s*['"]([^'"\n]+)['"]\s*,?\s*\}"""
)
TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


@dataclass(frozen=True)
class AliasEntry:
    """A prefix-to-directory mapping.

    Attributes:
        prefix: Leading text of an import that selects this alias (non-empty).
        target: Absolute directory the remainder of the import is resolved in.
        source: Config filename the entry was read from.
    """

    prefix: str
    target: Path
    source: str = ""


@dataclass(frozen=True)
class AliasMatch:
    """The longest alias prefix an import starts with, and what follows it."""

    entry: AliasEntry
    rest: str


def match_alias(raw: str, entries: Tuple[AliasEntry, ...]) -> Optional[AliasMatch]:
    """Find the alias for an import string.

    ``entries`` must be ordered longest prefix first (as ``sort_entries``
    leaves them), so the first hit is the most specific one. One leading
    slash is dropped from the remainder.
    """
    for entry in entries:
        if raw.startswith(entry.prefix):
            rest = raw[len(entry.prefix):]
            if rest.startswith("/"):
                rest = rest[1:]
            return AliasMatch(entry=entry, rest=rest)
    return None


def sort_entries(entries: List[AliasEntry]) -> Tuple[AliasEntry, ...]:
    """Order entries by descending prefix length, keeping discovery order on ties."""
    return tuple(sorted(entries, key=lambda e: -len(e.prefix)))


def strip_wildcard(pattern: str) -> str:
    """Drop the first '*' and everything after it ('@/*' -> '@/')."""
    idx = pattern.find("*")
    return pattern if idx == -1 else pattern[:idx]


def strip_json_comments(text: str) -> str:
    """Remove // and /* */ comments outside string literals, and trailing commas."""
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return TRAILING_COMMA_RE.sub(r"\1", "".join(out))


def _join(base: Path, relative: str) -> Path:
    return Path(os.path.normpath(os.path.join(str(base), relative.lstrip("/"))))


class CompilerConfigReader:
    """Reads ``compilerOptions.paths`` from tsconfig/jsconfig files."""

    def __init__(self, fs: FileSystem):
        self.fs = fs

    async def read(self, root: Path, filename: str) -> List[AliasEntry]:
        """Return the alias entries declared by one compiler config."""
        paths, base_dir = await self._load(root / filename, set())
        if base_dir is None:
            base_dir = root

        entries = []
        for key, replacements in paths.items():
            if not isinstance(replacements, list) or not replacements:
                continue
            if not isinstance(replacements[0], str):
                continue
            prefix = strip_wildcard(key)
            if not prefix:
                continue
            target = _join(base_dir, strip_wildcard(replacements[0]))
            entries.append(AliasEntry(prefix=prefix, target=target, source=filename))
        return entries

    async def _load(
        self, config_path: Path, seen: Set[str]
    ) -> Tuple[Dict[str, List[str]], Optional[Path]]:
        """Parse a config, following ``extends``.

        Returns:
            Tuple of (paths mapping, directory baseUrl points at or None).
        """
        key = os.path.normpath(str(config_path))
        if key in seen:
            return {}, None
        seen.add(key)

        try:
            text = await self.fs.read_text(config_path)
        except FileNotFoundError:
            return {}, None
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", config_path, e)
            return {}, None

        try:
            config = json.loads(strip_json_comments(text))
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unparseable %s: %s", config_path, e)
            return {}, None
        if not isinstance(config, dict):
            return {}, None

        compiler_options = config.get("compilerOptions") or {}
        if not isinstance(compiler_options, dict):
            compiler_options = {}
        paths = compiler_options.get("paths") or {}
        if not isinstance(paths, dict):
            paths = {}
        base_url = compiler_options.get("baseUrl")
        base_dir = None
        if isinstance(base_url, str):
            base_dir = _join(config_path.parent, base_url)

        extends = config.get("extends")
        # Package-name extends would need node module resolution
        if isinstance(extends, str) and (extends.startswith(".") or os.path.isabs(extends)):
            parent_path = Path(extends)
            if not parent_path.is_absolute():
                parent_path = config_path.parent / extends
            if not parent_path.suffix:
                parent_path = parent_path.with_suffix(".json")

            parent_paths, parent_base = await self._load(parent_path, seen)

            # Child overrides parent
            merged = dict(parent_paths)
            merged.update(paths)
            paths = merged
            if base_dir is None:
                base_dir = parent_base

        return paths, base_dir


class BundlerConfigReader:
    """Lifts alias declarations out of bundler config source text."""

    def __init__(self, fs: FileSystem):
        self.fs = fs

    async def read(self, root: Path, filename: str) -> List[AliasEntry]:
        """Return the alias entries found in one bundler config."""
        try:
            text = await self.fs.read_text(root / filename)
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", root / filename, e)
            return []

        entries = []
        for prefix, value in extract_alias_pairs(text):
            entries.append(AliasEntry(prefix=prefix, target=_join(root, value), source=filename))
        return entries


def extract_alias_pairs(text: str) -> List[Tuple[str, str]]:
    """Extract (prefix, value) pairs from bundler config text.

    Object-literal blocks come first, in source order, then the
    find/replacement objects.
    """
    pairs = []
    for block in alias_blocks(text):
        pairs.extend(QUOTED_PAIR_RE.findall(block))
    pairs.extend(FIND_REPLACEMENT_RE.findall(text))
    return pairs


def alias_blocks(text: str) -> List[str]:
    """Return the body of every ``alias: { ... }`` object literal."""
    blocks = []
    pos = 0
    while True:
        match = ALIAS_BLOCK_RE.search(text, pos)
        if not match:
            break
        start = match.end()
        end = _matching_brace(text, start)
        blocks.append(text[start:end])
        pos = end
    return blocks


def _matching_brace(text: str, start: int) -> int:
    """Index of the '}' closing a brace opened just before ``start``.

    Braces inside quoted strings and comments are ignored. An unbalanced block
    runs to the end of the text.
    """
    depth = 1
    quote = None
    i = start
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = len(text) if newline == -1 else newline
            continue
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = len(text) if close == -1 else close + 2
            continue
        elif ch in "'\"`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return len(text)


class AliasCache:
    """Alias tables per project root, built on first use.

    The cache lives as long as the session that owns it. Tables are immutable
    tuples and are only ever replaced, never edited. Two concurrent first
    requests for the same root may both do the extraction; both produce the
    same table.
    """

    def __init__(self, fs: FileSystem):
        self.fs = fs
        self.compiler_reader = CompilerConfigReader(fs)
        self.bundler_reader = BundlerConfigReader(fs)
        self._tables: Dict[str, Tuple[AliasEntry, ...]] = {}

    def __contains__(self, root: Path) -> bool:
        return str(root) in self._tables

    async def get(self, root: Optional[Path]) -> Tuple[AliasEntry, ...]:
        """Return the alias table for a project root (empty without a root)."""
        if root is None:
            return ()
        key = str(root)
        cached = self._tables.get(key)
        if cached is not None:
            return cached

        entries = await self.extract(root)
        self._tables[key] = entries
        logger.debug("Loaded %d alias entries for %s", len(entries), root)
        return entries

    async def extract(self, root: Path) -> Tuple[AliasEntry, ...]:
        """Read every config source under ``root`` without touching the cache."""
        entries: List[AliasEntry] = []
        for filename in COMPILER_CONFIGS:
            entries.extend(await self.compiler_reader.read(root, filename))
        for filename in BUNDLER_CONFIGS:
            entries.extend(await self.bundler_reader.read(root, filename))
        return sort_entries(entries)

    def invalidate(self, root: Optional[Path] = None) -> None:
        """Forget one root's table, or every table when ``root`` is None."""
        if root is None:
            self._tables.clear()
        else:
            self._tables.pop(str(root), None)
