#!/usr/bin/env python3
"""Tests for hover previews and document links."""

import asyncio

import httpx

from includenav.alias_config import AliasCache
from includenav.config import NavigatorConfig
from includenav.documents import LocalFileSystem, TextDocument, Workspace
from includenav.preview import document_links, preview_at
from includenav.resolver import PathResolver


def preview(root, document, line, column, config=None, transport=None):
    config = config or NavigatorConfig()
    fs = LocalFileSystem()
    resolver = PathResolver(Workspace([root]), AliasCache(fs), fs, config)
    return asyncio.run(preview_at(document, line, column, resolver, config, transport=transport))


class TestPreviewAt:
    """Tests for the preview of the reference under a cursor."""

    def test_file_preview(self, web_project):
        doc = TextDocument.from_file(web_project / "src" / "app.ts")

        result = preview(web_project, doc, 0, 30)

        assert result.raw == "@components/Button"
        assert result.url_status is None
        assert [f.path for f in result.files] == [web_project / "src" / "components" / "Button.ts"]
        assert result.files[0].text.startswith("export const Button = 1;")

    def test_directory_target_skipped(self, web_project):
        doc = TextDocument.from_file(web_project / "src" / "app.ts")

        result = preview(web_project, doc, 1, 28)

        assert [f.path for f in result.files] == [web_project / "src" / "utils" / "index.ts"]

    def test_line_limit(self, tmp_path):
        (tmp_path / "long.js").write_text("\n".join(f"line {i}" for i in range(50)))
        doc = TextDocument.from_text(tmp_path / "main.js", "import './long';")

        result = preview(tmp_path, doc, 0, 9, config=NavigatorConfig(hover_max_lines=3))

        assert result.files[0].text == "line 0\nline 1\nline 2"

    def test_at_most_three_targets(self, tmp_path):
        for name in ("x", "x.ts", "x.tsx", "x.js"):
            (tmp_path / name).write_text(f"// {name}")
        doc = TextDocument.from_text(tmp_path / "main.ts", "import './x';")

        result = preview(tmp_path, doc, 0, 9)

        assert [f.path.name for f in result.files] == ["x", "x.ts", "x.tsx"]

    def test_disabled(self, web_project):
        doc = TextDocument.from_file(web_project / "src" / "app.ts")
        config = NavigatorConfig(hover_preview=False)

        assert preview(web_project, doc, 0, 30, config=config) is None

    def test_unresolved_gives_nothing(self, web_project):
        doc = TextDocument.from_file(web_project / "src" / "app.ts")
        assert preview(web_project, doc, 2, 17) is None

    def test_no_reference_gives_nothing(self, web_project):
        doc = TextDocument.from_file(web_project / "src" / "app.ts")
        assert preview(web_project, doc, 0, 2) is None

    def test_url_needs_validation(self, tmp_path):
        doc = TextDocument.from_text(
            tmp_path / "index.html", '<script src="https://cdn.example.com/lib.js"></script>'
        )
        assert preview(tmp_path, doc, 0, 20) is None

    def test_url_status(self, tmp_path):
        doc = TextDocument.from_text(
            tmp_path / "index.html", '<script src="https://cdn.example.com/lib.js"></script>'
        )
        transport = httpx.MockTransport(lambda request: httpx.Response(200))

        result = preview(
            tmp_path, doc, 0, 20, config=NavigatorConfig(url_validation=True), transport=transport
        )

        assert result.raw == "https://cdn.example.com/lib.js"
        assert result.url_status == "200 OK"
        assert result.files == []


class TestDocumentLinks:
    def test_links(self):
        doc = TextDocument.from_text(
            "/tmp/page.html",
            '<a href="https://example.com/a">x</a>\nplain\nsee http://b.org/x, (https://c.io)\n',
        )

        links = document_links(doc)

        assert [(link.line, link.url) for link in links] == [
            (0, "https://example.com/a"),
            (2, "http://b.org/x,"),
            (2, "https://c.io"),
        ]
        first = links[0]
        assert doc.line_at(0)[first.start:first.end] == first.url

    def test_line_cap(self):
        doc = TextDocument.from_text("/tmp/page.html", "\n" * 5 + "https://late.example.com")
        assert document_links(doc, max_lines=5) == []
        assert len(document_links(doc)) == 1
