#!/usr/bin/env python3
"""Path Candidate Resolver - turn a raw include/import string into files.

Resolution generates every plausible location for a raw path, in a fixed
priority order, then keeps the ones that exist:

    1. Root-absolute paths (/foo) against the project root
    2. The current document's directory
    3. The project root
    4. The longest matching alias target (tsconfig paths, vite/webpack alias)

Each base path is expanded with extension and index-file inference unless it
already carries an extension. Results keep generation order, so the most
specific interpretation is listed first and every interpretation that exists
is reported.

Example:
    >>> resolver = PathResolver(workspace, aliases, fs)
    >>> result = await resolver.resolve(document, '@components/Button')
    >>> result.status, result.targets
    (<ResolveStatus.FOUND: 'found'>, [PosixPath('/my/project/src/components/Button.ts')])
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .alias_config import AliasCache, match_alias
from .config import NavigatorConfig
from .context_scanner import extract_path_at, is_http_url
from .documents import FileSystem, TextDocument, Workspace

logger = logging.getLogger(__name__)

# Extension sets, in inference order
SCRIPT_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"]
STYLE_EXTENSIONS = [".css", ".scss", ".sass", ".less"]
SERVER_EXTENSIONS = [".php", ".inc", ".phtml"]
ALL_EXTENSIONS = SCRIPT_EXTENSIONS + STYLE_EXTENSIONS + SERVER_EXTENSIONS

CSS_MODULE_SUFFIX = ".module.css"


class ResolveStatus(Enum):
    """Outcome of a resolution request."""

    FOUND = "found"  # At least one candidate exists
    UNRESOLVED = "unresolved"  # Candidates were generated, none exists
    NO_CONTEXT = "no_context"  # Nothing to resolve (no reference, empty, or a URL)


@dataclass
class ResolveResult:
    """Result of resolving one raw path.

    Attributes:
        raw: The raw text as given.
        status: Found, unresolved, or no context.
        targets: Existing files, in generation order.
        candidates: Every path that was tried, in generation order.
    """

    raw: str
    status: ResolveStatus
    targets: List[Path] = field(default_factory=list)
    candidates: List[Path] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND


def extensions_for(language_id: str) -> List[str]:
    """Pick the extension set for a document language."""
    if language_id == "php":
        return SERVER_EXTENSIONS
    if language_id.startswith(("javascript", "typescript")) or language_id == "vue":
        return SCRIPT_EXTENSIONS
    if language_id in ("css", "scss", "less", "html"):
        return STYLE_EXTENSIONS
    return ALL_EXTENSIONS


def apply_shorthand(raw: str) -> str:
    """Rewrite the built-in shorthands: '@/x' -> 'src/x', '~/x' and '~x' -> 'x'."""
    if raw.startswith("@/"):
        return "src/" + raw[2:]
    if raw.startswith("~"):
        return raw[2:] if raw.startswith("~/") else raw[1:]
    return raw


def _join(base: Path, *parts: str) -> Path:
    return Path(os.path.normpath(os.path.join(str(base), *(p.lstrip("/") for p in parts))))


def expand_candidates(
    raw: str,
    base_dir: Path,
    extensions: List[str],
    prefer_css_modules: bool = False,
) -> List[Path]:
    """Expand one base path with extension and index-file inference.

    Order: the bare path; then, when it has no extension, the path plus each
    extension, ``path/index``, and ``path/index`` plus each extension. With
    CSS module preference on (and a style set), ``.module.css`` variants go
    right before the plain extension attempts.
    """
    candidates = [_join(base_dir, raw)]
    if os.path.splitext(raw)[1]:
        return candidates

    modules = prefer_css_modules and ".css" in extensions
    if modules:
        candidates.append(_join(base_dir, raw + CSS_MODULE_SUFFIX))
    for ext in extensions:
        candidates.append(_join(base_dir, raw + ext))

    candidates.append(_join(base_dir, raw, "index"))
    if modules:
        candidates.append(_join(base_dir, raw, "index" + CSS_MODULE_SUFFIX))
    for ext in extensions:
        candidates.append(_join(base_dir, raw, "index" + ext))
    return candidates


class PathResolver:
    """Resolves raw include/import strings against the filesystem.

    Attributes:
        workspace: Project roots, used to find a document's root.
        aliases: Alias cache shared with the owning session.
        fs: Filesystem used for existence checks.
        config: Navigator options (CSS module preference, url() support).
    """

    def __init__(
        self,
        workspace: Workspace,
        aliases: AliasCache,
        fs: FileSystem,
        config: Optional[NavigatorConfig] = None,
    ):
        self.workspace = workspace
        self.aliases = aliases
        self.fs = fs
        self.config = config or NavigatorConfig()

    async def candidates_for(self, document: TextDocument, raw: str) -> List[Path]:
        """Generate the ordered candidate paths for a raw string.

        Duplicates (e.g. when the document sits in the project root) keep
        their first position only.
        """
        root = self.workspace.root_for(document)
        extensions = extensions_for(document.language_id)
        prefer_modules = self.config.prefer_css_modules

        if root is not None:
            raw = apply_shorthand(raw)
        match = match_alias(raw, await self.aliases.get(root))

        bases = []
        if raw.startswith("/") and root is not None:
            bases.append((raw[1:], root))
        bases.append((raw, document.directory))
        if root is not None:
            bases.append((raw, root))
        if match is not None:
            bases.append((match.rest, match.entry.target))

        candidates: List[Path] = []
        seen = set()
        for text, base_dir in bases:
            for candidate in expand_candidates(text, base_dir, extensions, prefer_modules):
                if candidate not in seen:
                    seen.add(candidate)
                    candidates.append(candidate)
        return candidates

    async def resolve(self, document: TextDocument, raw_input: str) -> ResolveResult:
        """Resolve a raw path to the existing files it may refer to.

        Empty input and http(s) URLs short-circuit to NO_CONTEXT without any
        filesystem access.
        """
        raw = raw_input.strip()
        if not raw or is_http_url(raw):
            return ResolveResult(raw=raw_input, status=ResolveStatus.NO_CONTEXT)

        candidates = await self.candidates_for(document, raw)
        # Checks run concurrently; gather keeps generation order
        exists = await asyncio.gather(*(self.fs.exists(c) for c in candidates))
        targets = [c for c, ok in zip(candidates, exists) if ok]

        if not targets:
            logger.debug("Unresolved %r from %s (%d candidates)", raw, document.path, len(candidates))
            return ResolveResult(
                raw=raw_input,
                status=ResolveStatus.UNRESOLVED,
                candidates=candidates,
            )
        return ResolveResult(
            raw=raw_input,
            status=ResolveStatus.FOUND,
            targets=targets,
            candidates=candidates,
        )

    async def resolve_at(self, document: TextDocument, line: int, column: int) -> ResolveResult:
        """Resolve the path literal under a cursor position."""
        context = extract_path_at(
            document.line_at(line),
            column,
            document.language_id,
            self.config.enable_asset_urls_in_css,
        )
        if not context.found:
            return ResolveResult(raw="", status=ResolveStatus.NO_CONTEXT)
        return await self.resolve(document, context.text)
