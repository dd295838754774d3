# File: tests/conftest.py
import asyncio
from collections.abc import AsyncIterator
from typing import Callable, Dict, List, Union

import pytest
import pytest_asyncio
from aiohttp import web

from edge_esi.app import setup_esi
from edge_esi.config import EsiConfig
from edge_esi.resolver.models import FragmentResponse

#: seconds a slow fragment handler sleeps
SLOW_SLEEP: float = 0.5


class StubFetcher:
    """
    In-memory stand-in for FragmentFetcher.
    Maps URL -> FragmentResponse, or an exception instance to raise.
    Unknown URLs answer 404. Every call is recorded in ``calls``.
    """

    def __init__(self, routes: Dict[str, Union[FragmentResponse, Exception]]) -> None:
        self.routes = routes
        self.calls: List[tuple[str, int]] = []

    async def fetch(self, url: str, depth: int = 0) -> FragmentResponse:
        self.calls.append((url, depth))
        answer = self.routes.get(url, FragmentResponse(url, 404))
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture()
def stub_fetcher() -> Callable[..., StubFetcher]:
    """Factory: ``stub_fetcher({"https://site.example/x": FragmentResponse(...)})``."""
    return StubFetcher


@pytest.fixture()
def basic_config() -> EsiConfig:
    return EsiConfig(fetch_timeout=2.0, user_agent="TestAgent/1.0")


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def fragment_routes(app: web.Application) -> None:
    """Register the fragment endpoints shared by fetcher and middleware tests."""

    async def handle_frag(_):
        return web.Response(text="B", content_type="text/html")

    async def handle_missing(_):
        return web.Response(status=404, text="nope")

    async def handle_boom(_):
        return web.Response(status=500, text="boom")

    async def handle_slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text="slow", content_type="text/html")

    async def handle_redirect(_):
        raise web.HTTPFound("/frag")

    async def handle_echo_headers(request):
        return web.Response(
            text="|".join(
                str(request.headers.get(name)) for name in ("User-Agent", "X-ESI-Depth", "X-ESI-Token")
            ),
            content_type="text/plain",
        )

    app.router.add_get("/frag", handle_frag)
    app.router.add_get("/missing", handle_missing)
    app.router.add_get("/boom", handle_boom)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/redirect", handle_redirect)
    app.router.add_get("/echo-headers", handle_echo_headers)


@pytest_asyncio.fixture
async def fragment_server(unused_tcp_port: int) -> AsyncIterator[str]:
    """Plain aiohttp server (no ESI processing) answering fragment requests."""
    app = web.Application()
    fragment_routes(app)
    async for url in serve_app(app, unused_tcp_port):
        yield url


@pytest.fixture()
def esi_app() -> web.Application:
    """Application with the ESI middleware installed and a set of HTML/non-HTML pages."""
    app = web.Application()
    fragment_routes(app)

    async def page(_):
        return web.Response(
            text='A<esi:include src="/frag" />C',
            content_type="text/html",
            headers={"X-Custom": "kept", "Cache-Control": "max-age=3600"},
        )

    async def page_failures(_):
        return web.Response(
            text=(
                '<esi:include src="/missing" onerror="continue" />'
                '|<esi:include src="/boom" />'
            ),
            content_type="text/html",
        )

    async def page_nested(_):
        return web.Response(text='[<esi:include src="/outer" />]', content_type="text/html")

    async def outer(_):
        return web.Response(text='(<esi:include src="/frag" />)', content_type="text/html")

    async def loop(_):
        return web.Response(text='x<esi:include src="/loop" />', content_type="text/html")

    async def plain(_):
        return web.Response(text='<esi:include src="/frag" />', content_type="text/plain")

    async def created(_):
        return web.Response(
            status=201, reason="Made It", text='<esi:include src="/frag" />', content_type="text/html"
        )

    async def broken_encoding(_):
        return web.Response(body=b"\xff\xfe<esi:include", headers={"Content-Type": "text/html; charset=utf-8"})

    async def explode(_):
        raise RuntimeError("handler blew up")

    async def streamed(request):
        resp = web.StreamResponse(headers={"Content-Type": "text/html"})
        await resp.prepare(request)
        await resp.write(b'<esi:include src="/frag" />')
        await resp.write_eof()
        return resp

    app.router.add_get("/page", page)
    app.router.add_get("/page-failures", page_failures)
    app.router.add_get("/page-nested", page_nested)
    app.router.add_get("/outer", outer)
    app.router.add_get("/loop", loop)
    app.router.add_get("/plain", plain)
    app.router.add_get("/created", created)
    app.router.add_get("/broken-encoding", broken_encoding)
    app.router.add_get("/streamed", streamed)
    app.router.add_get("/explode", explode)
    return setup_esi(app, EsiConfig(fetch_timeout=2.0, max_nesting=3))


@pytest_asyncio.fixture
async def esi_server(esi_app: web.Application, unused_tcp_port: int) -> AsyncIterator[str]:
    async for url in serve_app(esi_app, unused_tcp_port):
        yield url


def make_fragment(url: str, content: str, status: int = 200) -> FragmentResponse:
    return FragmentResponse(url, status, content if 200 <= status < 300 else "")


@pytest.fixture()
def fragment() -> Callable[..., FragmentResponse]:
    return make_fragment
