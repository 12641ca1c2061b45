#!/usr/bin/env python3
"""Directory listing for path completion.

Given the text typed so far inside a quoted path, list the immediate entries
of a base directory whose names start with the last segment typed.
Root-absolute prefixes (/foo) list the project root, everything else the
document's own directory.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List

from .documents import FileSystem, TextDocument, Workspace

logger = logging.getLogger(__name__)


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class CompletionEntry:
    """One completion candidate.

    Attributes:
        name: Text to insert (directories end with '/').
        kind: File or directory.
        detail: Location relative to the project root.
        sort_key: Orders directories before files, then by name.
    """

    name: str
    kind: EntryKind
    detail: str
    sort_key: str


def split_prefix(prefix: str):
    """Split a typed prefix into (directory part, final segment)."""
    idx = prefix.rfind("/")
    if idx == -1:
        return "", prefix
    return prefix[: idx + 1], prefix[idx + 1:]


async def list_completions(
    document: TextDocument,
    prefix: str,
    workspace: Workspace,
    fs: FileSystem,
) -> List[CompletionEntry]:
    """List directory entries matching a path prefix.

    Returns an empty list when the document has no project root or the
    directory cannot be listed.
    """
    root = workspace.root_for(document)
    if root is None:
        return []

    prefix = prefix or ""
    base = root if prefix.startswith("/") else document.directory
    _, segment = split_prefix(prefix)
    directory = Path(base)

    try:
        entries = await fs.list_dir(directory)
    except OSError as e:
        logger.debug("Cannot list %s: %s", directory, e)
        return []

    needle = segment.lower()
    items = []
    for name, is_dir in entries:
        if not name.lower().startswith(needle):
            continue
        try:
            detail = (directory / name).relative_to(root).as_posix()
        except ValueError:
            detail = str(directory / name)
        items.append(
            CompletionEntry(
                name=name + "/" if is_dir else name,
                kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
                detail=detail,
                sort_key=("0" if is_dir else "1") + name,
            )
        )

    items.sort(key=lambda item: (item.sort_key[0], item.name.lower(), item.name))
    return items
