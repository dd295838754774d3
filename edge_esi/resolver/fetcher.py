# edge_esi/resolver/fetcher.py
"""
Fetcher module: loads ESI fragments over HTTP with a per-fragment timeout.
"""
from __future__ import annotations

from typing import Optional

from aiohttp import ClientSession, ClientTimeout

from edge_esi.config import EsiConfig
from edge_esi.resolver.models import FragmentResponse

#: request header carrying the include nesting level of a fragment request
DEPTH_HEADER = "X-ESI-Depth"
#: per-app secret proving a request came from our own fetcher
TOKEN_HEADER = "X-ESI-Token"


class FragmentFetcher:
    """GET fragments through a shared session; no retries, no caching."""

    def __init__(self, session: ClientSession, config: EsiConfig, token: Optional[str] = None) -> None:
        self.session = session
        self.config = config
        self.token = token
        self._timeout = ClientTimeout(total=config.fetch_timeout)

    async def fetch(self, url: str, depth: int = 0) -> FragmentResponse:
        """
        Fetch *url* issued from a document at nesting level *depth*.

        The body is read as text only for 2xx answers. Network errors,
        timeouts and decoding errors are raised to the caller.
        """
        headers = {
            "User-Agent": self.config.user_agent,
            DEPTH_HEADER: str(depth + 1),
        }
        if self.token:
            headers[TOKEN_HEADER] = self.token
        async with self.session.get(url, headers=headers, timeout=self._timeout) as resp:
            fragment = FragmentResponse(str(resp.url), resp.status)
            if fragment.ok:
                fragment.content = await resp.text()
            return fragment


__all__ = ["DEPTH_HEADER", "TOKEN_HEADER", "FragmentFetcher"]
