#!/usr/bin/env python3
"""Tests for URL reachability probing."""

import asyncio

import httpx

from includenav.http_probe import ProbeResult, probe_url


def probe(url, handler):
    return asyncio.run(probe_url(url, transport=httpx.MockTransport(handler)))


class TestProbeUrl:
    """Tests for HEAD probing through a mock transport."""

    def test_ok_response(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        result = probe("https://cdn.example.com/lib.js", handler)

        assert result.ok
        assert result.status_code == 200
        assert result.status_line == "200 OK"
        assert seen[0].method == "HEAD"
        assert str(seen[0].url) == "https://cdn.example.com/lib.js"

    def test_error_status_is_still_reachable(self):
        result = probe("https://example.com/gone", lambda request: httpx.Response(404))

        assert result.ok
        assert result.status_line == "404 Not Found"

    def test_redirect_not_followed(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(301, headers={"Location": "https://example.com/new"})

        result = probe("https://example.com/old", handler)

        assert result.status_code == 301
        assert len(calls) == 1

    def test_connection_error_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = probe("https://nowhere.invalid/", handler)

        assert not result.ok
        assert result.status_line == "unreachable"
        assert "connection refused" in result.error

    def test_timeout_unreachable(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        result = probe("https://slow.example.com/", handler)

        assert not result.ok
        assert result.error == "timeout"
        assert result.status_line == "unreachable"


def test_status_line_without_reason():
    assert ProbeResult(url="u", ok=True, status_code=599).status_line == "599"
