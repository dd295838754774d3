# === FILE: edge_esi/resolver/resolver.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Sequence
from urllib.parse import urljoin

from edge_esi.config import EsiConfig
from edge_esi.logger import log_include_failure
from edge_esi.resolver.fetcher import FragmentFetcher
from edge_esi.resolver.markers import comment, scan_markers, splice
from edge_esi.resolver.models import Failed, Fetched, IncludeMarker, Outcome

__all__ = ("IncludeResolver", "render_outcome")


def render_outcome(marker: IncludeMarker, outcome: Outcome, expose_error_details: bool = True) -> str:
    """Текст, которым заменяется маркер: фрагмент или HTML-комментарий об ошибке."""
    if isinstance(outcome, Fetched):
        return outcome.content
    if outcome.status is None and expose_error_details:
        return comment(f"ESI Error: {outcome.reason}")
    if outcome.status is not None and outcome.continue_on_error:
        return comment(f"ESI include failed: {marker.src}")
    return comment(f"ESI Error: Could not load {marker.src}")


class IncludeResolver:
    """Заменяет `<esi:include />` в документе содержимым загруженных фрагментов.

    Маркеры ищутся один раз в исходном тексте; каждый маркер получает
    собственную загрузку и подставляется на своё место, даже если текст
    нескольких маркеров совпадает.
    """

    def __init__(self, fetcher: FragmentFetcher, config: Optional[EsiConfig] = None) -> None:
        self.fetcher = fetcher
        self.config = config or EsiConfig()
        self.logger = logging.getLogger("EdgeESI")

    async def resolve(self, document: str, base_location: str, depth: int = 0) -> str:
        markers = scan_markers(document)
        if not markers:
            return document
        start = time.monotonic()
        if self.config.concurrent_fetches:
            outcomes = await self._resolve_concurrently(markers, base_location, depth)
        else:
            outcomes = [await self._resolve_marker(m, base_location, depth) for m in markers]
        replacements = [
            render_outcome(m, o, self.config.expose_error_details) for m, o in zip(markers, outcomes)
        ]
        failed = sum(isinstance(o, Failed) for o in outcomes)
        self.logger.debug(
            "Resolved %d include(s) for %s in %.3f s (%d failed)",
            len(markers), base_location, time.monotonic() - start, failed,
        )
        return splice(document, markers, replacements)

    async def _resolve_concurrently(
        self, markers: Sequence[IncludeMarker], base_location: str, depth: int
    ) -> List[Outcome]:
        limit = asyncio.Semaphore(self.config.max_concurrency)

        async def _bounded(marker: IncludeMarker) -> Outcome:
            async with limit:
                return await self._resolve_marker(marker, base_location, depth)

        return list(await asyncio.gather(*(_bounded(m) for m in markers)))

    async def _resolve_marker(self, marker: IncludeMarker, base_location: str, depth: int) -> Outcome:
        url = urljoin(base_location, marker.src)
        try:
            fragment = await self.fetcher.fetch(url, depth)
        except Exception as exc:
            failure = Failed(str(exc) or type(exc).__name__, None, marker.continue_on_error)
        else:
            if fragment.ok:
                return Fetched(fragment.content)
            failure = Failed(f"HTTP {fragment.status}", fragment.status, marker.continue_on_error)
        log_include_failure(url, failure.reason, failure.status)
        return failure
