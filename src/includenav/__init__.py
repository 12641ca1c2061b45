"""includenav - Go-to-definition for include/import paths.

Resolves the path strings written in include, require and import statements
(PHP, JavaScript/TypeScript, CSS/SCSS/LESS, HTML) to files in a project,
honouring the path aliases declared in tsconfig/jsconfig and in vite/webpack
configs. It also completes partially typed paths and reports references that
point nowhere.

Components:
    - IncludeNavigator: Session object wiring everything to one workspace
    - PathResolver: Turns a raw path string into candidate and existing files
    - AliasCache: Per-root alias tables read from build-tool configs
    - DiagnosticsScanner: Finds unresolved references in a document
    - IncludeWatcher: Keeps diagnostics current while files change

Quick Start:
    1. Resolve a reference:
        >>> from includenav import IncludeNavigator, TextDocument
        >>> nav = IncludeNavigator(['/my/project'])
        >>> doc = TextDocument.from_file('/my/project/src/app.ts')
        >>> result = await nav.resolve(doc, '@components/Button')
        >>> result.targets
        [PosixPath('/my/project/src/components/Button.ts')]

    2. Find the path under the cursor:
        >>> context = nav.extract_context(doc, 2, 24)
        >>> context.text
        './utils'

    3. Report broken references:
        >>> findings = await nav.scan_document(doc)
        >>> findings[0].message
        'Include/Import target not found: ./missing'
"""

import hashlib

from .alias_config import AliasCache, AliasEntry, match_alias
from .completions import CompletionEntry, EntryKind, list_completions
from .config import ConfigError, NavigatorConfig, load_config
from .context_scanner import (
    ContextKind,
    PathContext,
    extract_path_at,
    extract_prefix_at,
    is_http_url,
)
from .diagnostics import DiagnosticsCollection, DiagnosticsScanner, Finding
from .documents import FileSystem, LocalFileSystem, TextDocument, Workspace
from .http_probe import ProbeResult, probe_url
from .navigator import IncludeNavigator
from .preview import DocumentLink, Preview
from .resolver import PathResolver, ResolveResult, ResolveStatus, expand_candidates
from .watcher import IncludeWatcher

__version__ = "1.0.0"
__license__ = "MIT"


def compute_content_hash(content: str) -> str:
    """Compute a short hash of content for change detection.

    Args:
        content: The text content to hash.

    Returns:
        A 12-character MD5 hash string.
    """
    return hashlib.md5(content.encode()).hexdigest()[:12]


__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Session
    "IncludeNavigator",
    "IncludeWatcher",
    "NavigatorConfig",
    "ConfigError",
    "load_config",
    # Documents and filesystem
    "TextDocument",
    "Workspace",
    "FileSystem",
    "LocalFileSystem",
    # Aliases
    "AliasCache",
    "AliasEntry",
    "match_alias",
    # Context extraction
    "ContextKind",
    "PathContext",
    "extract_path_at",
    "extract_prefix_at",
    "is_http_url",
    # Resolution
    "PathResolver",
    "ResolveResult",
    "ResolveStatus",
    "expand_candidates",
    # Completion
    "CompletionEntry",
    "EntryKind",
    "list_completions",
    # Diagnostics
    "DiagnosticsScanner",
    "DiagnosticsCollection",
    "Finding",
    # Preview and links
    "Preview",
    "DocumentLink",
    "ProbeResult",
    "probe_url",
    # Utilities
    "compute_content_hash",
]
