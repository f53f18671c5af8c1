"""Tests for HttpProbe — status handling, body matching, transport errors."""

from __future__ import annotations

import httpx
import pytest

from panorama.core.config import CheckUrl
from panorama.core.exceptions import ProbeError
from panorama.internet.probe import HttpProbe


# ── Helpers ─────────────────────────────────────────────────────


def _probe(handler) -> HttpProbe:  # type: ignore[no-untyped-def]
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
    return HttpProbe(client=client)


def _respond(status: int = 200, text: str = "") -> object:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=text)

    return handler


# ── Tests ───────────────────────────────────────────────────────


class TestHttpProbe:
    async def test_success_without_body_check(self) -> None:
        probe = _probe(_respond(200, "anything"))
        await probe(CheckUrl(url="https://example.org"))
        await probe.close()

    async def test_success_with_body_match(self) -> None:
        probe = _probe(_respond(200, "<footer>Wikimedia Foundation</footer>"))
        await probe(CheckUrl(url="https://wikipedia.org", body_contains="Wikimedia Foundation"))
        await probe.close()

    async def test_body_mismatch(self) -> None:
        probe = _probe(_respond(200, "captive portal login"))
        with pytest.raises(ProbeError, match="did not contain expected string"):
            await probe(CheckUrl(url="https://wikipedia.org", body_contains="Wikimedia"))
        await probe.close()

    async def test_http_error_status(self) -> None:
        probe = _probe(_respond(503, "down"))
        with pytest.raises(ProbeError, match="returned 503"):
            await probe(CheckUrl(url="https://example.org"))
        await probe.close()

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        probe = _probe(handler)
        with pytest.raises(ProbeError, match="request to https://example.org failed"):
            await probe(CheckUrl(url="https://example.org"))
        await probe.close()

    async def test_redirect_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.org":
                return httpx.Response(301, headers={"Location": "https://www.example.org/"})
            return httpx.Response(200, text="Hacker News")

        probe = _probe(handler)
        await probe(CheckUrl(url="https://example.org", body_contains="Hacker News"))
        await probe.close()

    async def test_close_is_idempotent(self) -> None:
        probe = HttpProbe(timeout_secs=1)
        await probe.close()
        await probe.close()
