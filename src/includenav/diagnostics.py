#!/usr/bin/env python3
"""Unresolved include/import diagnostics for whole documents.

Every line (up to a cap) that looks like it holds an include/import is split
into its quoted strings, and each non-empty, non-URL string is resolved. A
string that resolves to nothing becomes a warning anchored to the text
between its quotes.

Scans are driven by document events. Opening or saving a document schedules
a scan, and a newer request for the same document supersedes (cancels) any
scan still in flight, so an older result can never overwrite a newer one.
Closing a document drops its findings.

Example:
    >>> scanner = DiagnosticsScanner(resolver, config)
    >>> await scanner.on_open(document)
    >>> for finding in scanner.collection.get(document.key):
    ...     print(finding.line, finding.message)
    0 Include/Import target not found: ./missing
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .config import NavigatorConfig
from .context_scanner import is_http_url, line_has_import_context, quoted_spans
from .documents import TextDocument
from .resolver import PathResolver, ResolveStatus

logger = logging.getLogger(__name__)

MAX_SCAN_LINES = 2000
SOURCE = "includenav"


@dataclass(frozen=True)
class Finding:
    """An unresolved reference.

    Attributes:
        line: 0-based line number.
        start: Column of the first character inside the quotes.
        end: Column of the closing quote.
        message: Human-readable description naming the raw value.
        severity: Always 'warning'.
        source: Tool that produced the finding.
    """

    line: int
    start: int
    end: int
    message: str
    severity: str = "warning"
    source: str = SOURCE

    @property
    def span(self) -> Tuple[int, int, int]:
        return (self.line, self.start, self.end)

    def to_dict(self) -> Dict:
        return asdict(self)


class DiagnosticsCollection:
    """Findings per document, each set replaced as a whole."""

    def __init__(self):
        self._findings: Dict[str, Tuple[Finding, ...]] = {}

    def set(self, key: str, findings: List[Finding]) -> None:
        self._findings[key] = tuple(findings)

    def get(self, key: str) -> Tuple[Finding, ...]:
        return self._findings.get(key, ())

    def delete(self, key: str) -> None:
        self._findings.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._findings

    def __iter__(self) -> Iterator[Tuple[str, Tuple[Finding, ...]]]:
        return iter(list(self._findings.items()))

    def __len__(self) -> int:
        return len(self._findings)


class DiagnosticsScanner:
    """Scans documents for references that resolve to no file."""

    def __init__(
        self,
        resolver: PathResolver,
        config: Optional[NavigatorConfig] = None,
        collection: Optional[DiagnosticsCollection] = None,
        max_lines: int = MAX_SCAN_LINES,
    ):
        self.resolver = resolver
        self.config = config or NavigatorConfig()
        self.collection = collection if collection is not None else DiagnosticsCollection()
        self.max_lines = max_lines
        self._tasks: Dict[str, asyncio.Task] = {}

    async def scan(self, document: TextDocument) -> List[Finding]:
        """Compute the findings for a document without storing them."""
        if not self.config.diagnostics_enabled:
            return []

        findings = []
        for line_number in range(min(document.line_count, self.max_lines)):
            text = document.line_at(line_number)
            if not line_has_import_context(text):
                continue
            for span in quoted_spans(text):
                raw = span.text.strip()
                if not raw or is_http_url(raw):
                    continue
                result = await self.resolver.resolve(document, raw)
                if result.status is ResolveStatus.UNRESOLVED:
                    findings.append(
                        Finding(
                            line=line_number,
                            start=span.start,
                            end=span.end,
                            message=f"Include/Import target not found: {raw}",
                        )
                    )
        return findings

    async def refresh(self, document: TextDocument) -> Optional[List[Finding]]:
        """Scan a document and publish its findings.

        Returns:
            The published findings, or None when a newer request for the
            same document superseded this one.
        """
        key = document.key
        if not self.config.diagnostics_enabled:
            self._cancel(key)
            self.collection.delete(key)
            return []

        self._cancel(key)
        task = asyncio.ensure_future(self.scan(document))
        self._tasks[key] = task

        current = False
        try:
            findings = await task
            current = self._tasks.get(key) is task
        except asyncio.CancelledError:
            if self._tasks.get(key) is task:
                raise
            logger.debug("Scan of %s superseded", key)
            return None
        finally:
            if self._tasks.get(key) is task:
                del self._tasks[key]

        if not current:
            return None
        self.collection.set(key, findings)
        return findings

    async def on_open(self, document: TextDocument) -> Optional[List[Finding]]:
        return await self.refresh(document)

    async def on_save(self, document: TextDocument) -> Optional[List[Finding]]:
        return await self.refresh(document)

    def on_close(self, document: TextDocument) -> None:
        self._cancel(document.key)
        self.collection.delete(document.key)

    def _cancel(self, key: str) -> None:
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()
