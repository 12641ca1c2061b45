#!/usr/bin/env python3
"""Terminal colors for includenav output.

ANSI styling that switches itself off when stdout is not a terminal, and
honours NO_COLOR (https://no-color.org/) and FORCE_COLOR.

Example:
    >>> c = get_colors()
    >>> print(c.path("src/app.ts") + ":" + c.position(3, 15))
"""

import os
import sys
import threading


class Colors:
    """ANSI color helpers.

    Attributes:
        enabled: Whether escape codes are emitted.
    """

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    def __init__(self, enabled: bool = None):
        self.enabled = self._should_enable_colors() if enabled is None else enabled

    def _should_enable_colors(self) -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("FORCE_COLOR"):
            return True
        if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
            return False
        return os.environ.get("TERM", "") != "dumb"

    def _colorize(self, text: str, *codes: str) -> str:
        if not self.enabled:
            return text
        return "".join(codes) + text + self.RESET

    def bold(self, text: str) -> str:
        return self._colorize(text, self.BOLD)

    def dim(self, text: str) -> str:
        return self._colorize(text, self.DIM)

    def cyan(self, text: str) -> str:
        return self._colorize(text, self.CYAN)

    def green(self, text: str) -> str:
        return self._colorize(text, self.GREEN)

    def path(self, text: str) -> str:
        """File locations."""
        return self._colorize(text, self.CYAN)

    def position(self, line: int, column: int) -> str:
        """A 1-based line:column pair."""
        return self._colorize(f"{line}:{column}", self.DIM)

    def alias(self, text: str) -> str:
        return self._colorize(text, self.MAGENTA)

    def success(self, text: str) -> str:
        return self._colorize(text, self.BOLD, self.GREEN)

    def warning(self, text: str) -> str:
        return self._colorize(text, self.YELLOW)

    def error(self, text: str) -> str:
        return self._colorize(text, self.BOLD, self.RED)


_colors = None
_colors_lock = threading.Lock()


def get_colors(no_color: bool = False) -> Colors:
    """Return the shared Colors instance, or a disabled one for ``no_color``."""
    global _colors

    if no_color:
        return Colors(enabled=False)

    if _colors is None:
        with _colors_lock:
            if _colors is None:
                _colors = Colors()
    return _colors
