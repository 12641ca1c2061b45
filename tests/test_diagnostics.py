#!/usr/bin/env python3
"""Tests for unresolved reference diagnostics."""

import asyncio

import pytest

from includenav.alias_config import AliasCache
from includenav.config import NavigatorConfig
from includenav.diagnostics import (
    SOURCE,
    DiagnosticsCollection,
    DiagnosticsScanner,
    Finding,
)
from includenav.documents import LocalFileSystem, TextDocument, Workspace
from includenav.resolver import PathResolver

ALL_OFF = NavigatorConfig(enable_php=False, enable_js=False, enable_css=False, enable_html=False)


def make_scanner(root, config=None, max_lines=2000):
    fs = LocalFileSystem()
    resolver = PathResolver(Workspace([root]), AliasCache(fs), fs, config)
    return DiagnosticsScanner(resolver, config, max_lines=max_lines)


def doc_in(root, text, name="main.ts"):
    return TextDocument.from_text(root / name, text)


class TestScan:
    """Tests for computing findings."""

    def test_missing_import_span(self, tmp_path):
        """Test the reported span covers exactly the text inside the quotes."""
        line = 'import x from "./missing";'
        scanner = make_scanner(tmp_path)

        findings = asyncio.run(scanner.scan(doc_in(tmp_path, line)))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.span == (0, 15, 24)
        assert line[finding.start:finding.end] == "./missing"
        assert finding.message == "Include/Import target not found: ./missing"
        assert finding.severity == "warning"
        assert finding.source == SOURCE

    def test_project_document(self, web_project):
        scanner = make_scanner(web_project)
        doc = TextDocument.from_file(web_project / "src" / "app.ts")

        findings = asyncio.run(scanner.scan(doc))

        assert [(f.line, f.message) for f in findings] == [
            (2, "Include/Import target not found: ./missing")
        ]

    def test_directory_reference_not_reported(self, web_project):
        scanner = make_scanner(web_project)
        doc = TextDocument.from_text(
            web_project / "src" / "main.ts", "import c from './components';", "typescript"
        )

        assert asyncio.run(scanner.scan(doc)) == []

    @pytest.mark.parametrize(
        "text",
        [
            'import x from "https://cdn.example.com/x.js";',
            "const s = './missing';",
            "import x from '';",
            "import x from '   ';",
        ],
    )
    def test_ignored_references(self, tmp_path, text):
        assert asyncio.run(make_scanner(tmp_path).scan(doc_in(tmp_path, text))) == []

    def test_every_quoted_string_on_a_line(self, tmp_path):
        (tmp_path / "a.php").write_text("<?php")
        text = "<?php include 'a.php'; include \"b.php\"; ?>"
        scanner = make_scanner(tmp_path)

        findings = asyncio.run(scanner.scan(doc_in(tmp_path, text, "index.php")))

        assert [f.message for f in findings] == ["Include/Import target not found: b.php"]

    @pytest.mark.parametrize(
        "text",
        [
            "// page\x0cbreak\nimport x from './missing';",
            "/*   \x85 */\r\nimport x from './missing';",
            "// old mac\rimport x from './missing';",
        ],
    )
    def test_line_numbers_count_only_newlines(self, tmp_path, text):
        findings = asyncio.run(make_scanner(tmp_path).scan(doc_in(tmp_path, text)))
        assert [f.line for f in findings] == [1]

    def test_line_cap(self, tmp_path):
        text = "// header\nimport x from './missing';\n"
        scanner = make_scanner(tmp_path, max_lines=1)

        assert asyncio.run(scanner.scan(doc_in(tmp_path, text))) == []

    def test_disabled(self, tmp_path):
        scanner = make_scanner(tmp_path, config=ALL_OFF)
        doc = doc_in(tmp_path, "import x from './missing';")

        assert asyncio.run(scanner.scan(doc)) == []

    def test_any_language_flag_enables(self, tmp_path):
        config = NavigatorConfig(enable_php=False, enable_js=False, enable_css=True, enable_html=False)
        scanner = make_scanner(tmp_path, config=config)
        doc = doc_in(tmp_path, "import x from './missing';")

        assert len(asyncio.run(scanner.scan(doc))) == 1


class TestRefresh:
    """Tests for publishing findings to the collection."""

    def test_refresh_publishes(self, tmp_path):
        scanner = make_scanner(tmp_path)
        doc = doc_in(tmp_path, "import x from './missing';")

        findings = asyncio.run(scanner.on_open(doc))

        assert len(findings) == 1
        assert scanner.collection.get(doc.key) == tuple(findings)

    def test_refresh_replaces_previous_findings(self, tmp_path):
        scanner = make_scanner(tmp_path)
        doc = doc_in(tmp_path, "import x from './missing';")
        asyncio.run(scanner.on_open(doc))

        (tmp_path / "missing.ts").write_text("")
        asyncio.run(scanner.on_save(doc))

        assert scanner.collection.get(doc.key) == ()
        assert doc.key in scanner.collection

    def test_close_removes(self, tmp_path):
        scanner = make_scanner(tmp_path)
        doc = doc_in(tmp_path, "import x from './missing';")
        asyncio.run(scanner.on_open(doc))

        scanner.on_close(doc)

        assert doc.key not in scanner.collection

    def test_disabled_clears(self, tmp_path):
        scanner = make_scanner(tmp_path)
        doc = doc_in(tmp_path, "import x from './missing';")
        asyncio.run(scanner.on_open(doc))

        scanner.config = ALL_OFF
        assert asyncio.run(scanner.refresh(doc)) == []
        assert doc.key not in scanner.collection

    def test_newer_request_supersedes_older(self, tmp_path):
        """Test that only the latest of overlapping scans is published."""
        scanner = make_scanner(tmp_path)
        doc = doc_in(tmp_path, "import x from './missing';")

        async def overlapping():
            return await asyncio.gather(scanner.refresh(doc), scanner.refresh(doc))

        first, second = asyncio.run(overlapping())

        assert first is None
        assert len(second) == 1
        assert scanner.collection.get(doc.key) == tuple(second)


class TestCollection:
    def test_set_get_delete(self):
        collection = DiagnosticsCollection()
        finding = Finding(line=0, start=1, end=2, message="m")

        collection.set("a", [finding])

        assert collection.get("a") == (finding,)
        assert collection.get("b") == ()
        assert len(collection) == 1
        assert list(collection) == [("a", (finding,))]

        collection.delete("a")
        collection.delete("a")
        assert len(collection) == 0

    def test_finding_to_dict(self):
        finding = Finding(line=3, start=4, end=9, message="m")
        assert finding.to_dict() == {
            "line": 3,
            "start": 4,
            "end": 9,
            "message": "m",
            "severity": "warning",
            "source": "includenav",
        }
