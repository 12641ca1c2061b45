#!/usr/bin/env python3
"""Preview content for references, and http(s) links in documents.

These gather the data an editor shows on hover or underlines as links;
turning it into markup is left to the caller.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import httpx

from .config import NavigatorConfig
from .context_scanner import extract_path_at, is_http_url, url_spans
from .documents import LINE_BREAK_RE, FileSystem, TextDocument
from .http_probe import probe_url
from .resolver import PathResolver

logger = logging.getLogger(__name__)

MAX_PREVIEW_TARGETS = 3
MAX_LINK_LINES = 2000


@dataclass
class FilePreview:
    """The first lines of one resolved target."""

    path: Path
    text: str


@dataclass
class Preview:
    """What to show for the reference under a cursor.

    Exactly one of ``url_status`` (for URL references) and ``files`` (for
    path references) is filled in.
    """

    raw: str
    url_status: Optional[str] = None
    files: List[FilePreview] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentLink:
    line: int
    start: int
    end: int
    url: str


async def read_first_lines(fs: FileSystem, path: Path, max_lines: int) -> str:
    """Read up to ``max_lines`` lines of a file.

    Raises:
        OSError: If the file cannot be read.
    """
    text = await fs.read_text(path)
    return "\n".join(LINE_BREAK_RE.split(text)[:max_lines])


async def preview_at(
    document: TextDocument,
    line: int,
    column: int,
    resolver: PathResolver,
    config: NavigatorConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[Preview]:
    """Build the preview for the reference at a position, if any."""
    if not config.hover_preview:
        return None

    context = extract_path_at(
        document.line_at(line), column, document.language_id, config.enable_asset_urls_in_css
    )
    if not context.found or not context.text:
        return None

    if is_http_url(context.text):
        if not config.url_validation:
            return None
        result = await probe_url(context.text, transport=transport)
        return Preview(raw=context.text, url_status=result.status_line)

    result = await resolver.resolve(document, context.text)
    files = []
    for target in result.targets[:MAX_PREVIEW_TARGETS]:
        try:
            text = await read_first_lines(resolver.fs, target, config.hover_max_lines)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot preview %s: %s", target, e)
            continue
        if text:
            files.append(FilePreview(path=target, text=text))
    if not files:
        return None
    return Preview(raw=context.text, files=files)


def document_links(document: TextDocument, max_lines: int = MAX_LINK_LINES) -> List[DocumentLink]:
    """Every http(s) URL in the first ``max_lines`` lines of a document."""
    links = []
    for line_number in range(min(document.line_count, max_lines)):
        for start, end, url in url_spans(document.line_at(line_number)):
            links.append(DocumentLink(line=line_number, start=start, end=end, url=url))
    return links
