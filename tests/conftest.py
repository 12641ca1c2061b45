"""Shared fixtures for includenav tests."""

import json
from collections import Counter

import pytest

from includenav.documents import LocalFileSystem


class CountingFileSystem(LocalFileSystem):
    """Local filesystem that records every call made through it."""

    def __init__(self):
        self.calls = Counter()
        self.read_paths = []

    async def read_text(self, path):
        self.calls["read_text"] += 1
        self.read_paths.append(path)
        return await super().read_text(path)

    async def exists(self, path):
        self.calls["exists"] += 1
        return await super().exists(path)

    async def list_dir(self, path):
        self.calls["list_dir"] += 1
        return await super().list_dir(path)

    @property
    def total(self):
        return sum(self.calls.values())


@pytest.fixture
def counting_fs():
    return CountingFileSystem()


@pytest.fixture
def web_project(tmp_path):
    """Create a small web project with a tsconfig alias."""
    (tmp_path / "src" / "components").mkdir(parents=True)
    (tmp_path / "src" / "utils").mkdir()
    (tmp_path / "src" / "styles").mkdir()

    (tmp_path / "src" / "components" / "Button.ts").write_text("export const Button = 1;\n")
    (tmp_path / "src" / "utils" / "index.ts").write_text("export * from './format';\n")
    (tmp_path / "src" / "utils" / "format.ts").write_text("export const format = 1;\n")
    (tmp_path / "src" / "styles" / "theme.css").write_text(".a { color: red; }\n")
    (tmp_path / "src" / "app.ts").write_text(
        "import { Button } from '@components/Button';\n"
        "import { format } from './utils';\n"
        "import x from './missing';\n"
    )

    tsconfig = {
        "compilerOptions": {
            "baseUrl": ".",
            "paths": {"@components/*": ["src/components/*"]},
        }
    }
    (tmp_path / "tsconfig.json").write_text(json.dumps(tsconfig, indent=2))
    return tmp_path
