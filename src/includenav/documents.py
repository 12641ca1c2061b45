#!/usr/bin/env python3
"""Documents, workspace roots and the filesystem seam.

The resolution engine never touches the disk directly. It reads files, checks
existence and lists directories through a ``FileSystem`` object whose methods
are coroutines, so an editor integration can supply its own implementation
while the command line uses ``LocalFileSystem``.

Example:
    >>> doc = TextDocument.from_file('web/src/app.ts')
    >>> doc.language_id
    'typescript'
    >>> workspace = Workspace(['web'])
    >>> workspace.root_for(doc)
    PosixPath('/abs/web')
"""

import asyncio
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

PathLike = Union[str, os.PathLike]

# \r\n, \r and \n only; str.splitlines also breaks on \f, \v, \x85 and others
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

# Language identifiers by file extension (editor-style ids)
LANGUAGE_IDS = {
    ".php": "php",
    ".inc": "php",
    ".phtml": "php",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".css": "css",
    ".scss": "scss",
    ".sass": "scss",
    ".less": "less",
}

STYLESHEET_LANGUAGES = frozenset({"css", "scss", "less"})

# Directories never walked when collecting documents
IGNORED_DIRS = {
    "node_modules",
    "__pycache__",
    ".git",
    ".svn",
    "venv",
    ".venv",
    "dist",
    "build",
    ".next",
    "coverage",
    "vendor",
}


def detect_language(file_path: PathLike) -> str:
    """Map a file name to a language identifier ('plaintext' when unknown)."""
    return LANGUAGE_IDS.get(Path(file_path).suffix.lower(), "plaintext")


def iter_source_files(root: PathLike) -> Iterator[Path]:
    """Yield every file under ``root`` with a known language, skipping IGNORED_DIRS."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for filename in sorted(filenames):
            if Path(filename).suffix.lower() in LANGUAGE_IDS:
                yield Path(dirpath) / filename


@dataclass
class TextDocument:
    """An open text document.

    Attributes:
        path: Absolute location of the document (its identity).
        lines: Document text split into lines, without line terminators.
        language_id: Language identifier, e.g. 'typescript' or 'php'.
    """

    path: Path
    lines: List[str] = field(default_factory=list)
    language_id: str = "plaintext"

    def __post_init__(self):
        self.path = Path(self.path).resolve()

    @classmethod
    def from_text(
        cls, path: PathLike, text: str, language_id: Optional[str] = None
    ) -> "TextDocument":
        """Build a document from in-memory text."""
        return cls(
            path=Path(path),
            lines=LINE_BREAK_RE.split(text),
            language_id=language_id or detect_language(path),
        )

    @classmethod
    def from_file(cls, path: PathLike, language_id: Optional[str] = None) -> "TextDocument":
        """Load a document from disk.

        Raises:
            OSError: If the file cannot be read.
        """
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        return cls.from_text(path, text, language_id)

    @property
    def key(self) -> str:
        return str(self.path)

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, line: int) -> str:
        """Return the text of a 0-based line ('' when out of range)."""
        if 0 <= line < len(self.lines):
            return self.lines[line]
        return ""


class Workspace:
    """The set of project roots open in a session.

    A document belongs to the deepest root that contains it; documents outside
    every root have no project root, so root-relative and alias resolution is
    skipped for them.
    """

    def __init__(self, roots: Sequence[PathLike] = ()):
        self.roots: List[Path] = []
        for root in roots:
            self.add_root(root)

    def add_root(self, root: PathLike) -> Path:
        """Register a project root.

        Raises:
            ValueError: If the directory does not exist.
        """
        path = Path(root).resolve()
        if not path.is_dir():
            raise ValueError(f"Project root does not exist: {path}")
        if path not in self.roots:
            self.roots.append(path)
        return path

    def root_for(self, document: Union[TextDocument, PathLike]) -> Optional[Path]:
        """Return the project root owning a document, or None."""
        path = document.path if isinstance(document, TextDocument) else Path(document).resolve()
        best: Optional[Path] = None
        for root in self.roots:
            if path == root or root in path.parents:
                if best is None or len(root.parts) > len(best.parts):
                    best = root
        return best


class FileSystem:
    """Asynchronous filesystem capabilities consumed by the engine.

    Subclasses provide the actual I/O. ``read_text`` and ``list_dir`` raise
    ``OSError`` on failure; the existence check never raises.
    """

    async def read_text(self, path: Path) -> str:
        raise NotImplementedError

    async def exists(self, path: Path) -> bool:
        raise NotImplementedError

    async def list_dir(self, path: Path) -> List[Tuple[str, bool]]:
        """Return ``(name, is_directory)`` pairs for a directory's entries."""
        raise NotImplementedError


class LocalFileSystem(FileSystem):
    """Local disk access, run in worker threads so the event loop never blocks."""

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    async def list_dir(self, path: Path) -> List[Tuple[str, bool]]:
        return await asyncio.to_thread(_scan_dir, path)


def _scan_dir(path: Path) -> List[Tuple[str, bool]]:
    with os.scandir(path) as it:
        return [(entry.name, entry.is_dir()) for entry in it]
