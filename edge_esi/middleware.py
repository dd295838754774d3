"""
aiohttp middleware that resolves ESI includes in outgoing HTML responses.

The next pipeline stage (``handler``) produces the response; when it is a
buffered HTML ``web.Response`` its body is run through
:class:`~edge_esi.resolver.IncludeResolver` and a new response is built with
the same status and headers, except for ``Content-Type`` and ``Cache-Control``.
"""
from __future__ import annotations

import hmac
from typing import Awaitable, Callable, Optional

from aiohttp import ClientSession, hdrs, web
from multidict import CIMultiDict

from edge_esi.config import EsiConfig
from edge_esi.logger import logger
from edge_esi.resolver import DEPTH_HEADER, TOKEN_HEADER, FragmentFetcher, IncludeResolver

__all__ = ["CLIENT_SESSION_KEY", "NESTING_TOKEN_KEY", "esi_middleware", "request_depth"]

CLIENT_SESSION_KEY = web.AppKey("esi_client_session", ClientSession)
NESTING_TOKEN_KEY = web.AppKey("esi_nesting_token", str)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
_DROPPED_HEADERS = (hdrs.CONTENT_LENGTH, hdrs.TRANSFER_ENCODING)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def request_depth(request: web.Request) -> int:
    """Nesting level announced by a fragment request, 0 for client requests.

    The depth header only counts when it comes with this app's nesting token,
    i.e. when our own fetcher issued the request.
    """
    token = request.app.get(NESTING_TOKEN_KEY)
    sent = request.headers.get(TOKEN_HEADER, "")
    if not token or not hmac.compare_digest(sent, token):
        return 0
    try:
        return max(0, int(request.headers.get(DEPTH_HEADER, "0")))
    except ValueError:
        return 0


def _html_text(response: web.StreamResponse) -> Optional[str]:
    """Return the decoded body when *response* is buffered HTML, else None."""
    if "text/html" not in response.headers.get(hdrs.CONTENT_TYPE, ""):
        return None
    if not isinstance(response, web.Response):
        logger.debug("Skipping ESI for streamed response %r", response)
        return None
    body = response.body
    if body is None:
        return ""
    if not isinstance(body, (bytes, bytearray)):
        logger.debug("Skipping ESI for payload body %r", type(body).__name__)
        return None
    return bytes(body).decode(response.charset or "utf-8")


def esi_middleware(config: Optional[EsiConfig] = None):
    """Build the interceptor.

    The app must provide ``CLIENT_SESSION_KEY``; ``NESTING_TOKEN_KEY`` enables
    the nesting limit (``setup_esi`` sets both).
    """
    config = config or EsiConfig()

    @web.middleware
    async def middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
        try:
            response = await handler(request)
            text = _html_text(response)
            if text is None:
                return response

            depth = request_depth(request)
            if depth >= config.max_nesting:
                # headers are still rewritten, only resolution is skipped
                logger.debug("Nesting limit reached for %s (depth %d)", request.url, depth)
                processed = text
            else:
                fetcher = FragmentFetcher(
                    request.app[CLIENT_SESSION_KEY], config, token=request.app.get(NESTING_TOKEN_KEY)
                )
                processed = await IncludeResolver(fetcher, config).resolve(text, str(request.url), depth)

            headers = CIMultiDict(response.headers)
            for name in _DROPPED_HEADERS:
                headers.popall(name, None)
            headers[hdrs.CONTENT_TYPE] = HTML_CONTENT_TYPE
            headers[hdrs.CACHE_CONTROL] = "no-cache"
            return web.Response(
                status=response.status,
                reason=response.reason,
                body=processed.encode("utf-8"),
                headers=headers,
            )
        except web.HTTPException:
            raise
        except Exception:
            logger.exception("ESI processing failed for %s", request.url)
            return web.Response(status=500, text="Internal Server Error")

    return middleware
