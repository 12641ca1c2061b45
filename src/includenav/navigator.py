#!/usr/bin/env python3
"""Navigator session - the operations an editor integration calls.

An ``IncludeNavigator`` owns the alias cache for its lifetime and wires the
resolver, completion lister and diagnostics scanner to one workspace, one
filesystem and one configuration.

Example:
    >>> nav = IncludeNavigator(['/my/project'])
    >>> doc = TextDocument.from_file('/my/project/src/app.ts')
    >>> result = await nav.resolve(doc, './utils/helpers')
    >>> result.targets
    [PosixPath('/my/project/src/utils/helpers.ts')]
    >>> findings = await nav.scan_document(doc)
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import httpx

from .alias_config import AliasCache, AliasEntry
from .completions import CompletionEntry, list_completions
from .config import NavigatorConfig
from .context_scanner import PathContext, extract_path_at, extract_prefix_at
from .diagnostics import DiagnosticsScanner, Finding
from .documents import FileSystem, LocalFileSystem, PathLike, TextDocument, Workspace
from .http_probe import ProbeResult, probe_url
from .preview import DocumentLink, Preview, document_links, preview_at
from .resolver import PathResolver, ResolveResult


class IncludeNavigator:
    """Include/import navigation for a set of project roots.

    Attributes:
        workspace: Project roots.
        config: Navigator options.
        fs: Filesystem capability.
        aliases: Alias tables, cached per root.
        resolver: Path candidate resolver.
        diagnostics: Document scanner and published findings.
    """

    def __init__(
        self,
        roots: Sequence[PathLike] = (),
        config: Optional[NavigatorConfig] = None,
        fs: Optional[FileSystem] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.workspace = roots if isinstance(roots, Workspace) else Workspace(roots)
        self.config = config or NavigatorConfig()
        self.fs = fs or LocalFileSystem()
        self.http_transport = http_transport
        self.aliases = AliasCache(self.fs)
        self.resolver = PathResolver(self.workspace, self.aliases, self.fs, self.config)
        self.diagnostics = DiagnosticsScanner(self.resolver, self.config)

    def set_config(self, config: NavigatorConfig) -> None:
        """Swap in new options for every component of the session."""
        self.config = config
        self.resolver.config = config
        self.diagnostics.config = config

    async def resolve(self, document: TextDocument, raw: str) -> ResolveResult:
        return await self.resolver.resolve(document, raw)

    async def resolve_at(self, document: TextDocument, line: int, column: int) -> ResolveResult:
        return await self.resolver.resolve_at(document, line, column)

    def extract_context(self, document: TextDocument, line: int, column: int) -> PathContext:
        return extract_path_at(
            document.line_at(line),
            column,
            document.language_id,
            self.config.enable_asset_urls_in_css,
        )

    def extract_prefix(self, document: TextDocument, line: int, column: int) -> PathContext:
        return extract_prefix_at(document.line_at(line), column)

    async def list_completions(self, document: TextDocument, prefix: str) -> List[CompletionEntry]:
        return await list_completions(document, prefix, self.workspace, self.fs)

    async def complete_at(self, document: TextDocument, line: int, column: int) -> List[CompletionEntry]:
        """Completion entries for the quoted path being typed at a position."""
        context = self.extract_prefix(document, line, column)
        if not context.found:
            return []
        return await self.list_completions(document, context.text)

    async def scan_document(self, document: TextDocument) -> List[Finding]:
        """Scan a document and publish the result (an open/save event)."""
        findings = await self.diagnostics.refresh(document)
        return list(self.diagnostics.collection.get(document.key)) if findings is None else findings

    def close_document(self, document: TextDocument) -> None:
        self.diagnostics.on_close(document)

    async def probe_url(self, url: str) -> ProbeResult:
        return await probe_url(url, transport=self.http_transport)

    async def preview_at(self, document: TextDocument, line: int, column: int) -> Optional[Preview]:
        return await preview_at(
            document, line, column, self.resolver, self.config, transport=self.http_transport
        )

    def document_links(self, document: TextDocument) -> List[DocumentLink]:
        return document_links(document)

    async def alias_entries(self, root: PathLike) -> Tuple[AliasEntry, ...]:
        return await self.aliases.get(Path(root).resolve())

    def invalidate_aliases(self, root: Optional[PathLike] = None) -> None:
        """Drop cached alias tables for one root, or for all roots."""
        self.aliases.invalidate(Path(root).resolve() if root is not None else None)
