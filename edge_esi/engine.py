# File: edge_esi/engine.py
"""edge_esi.engine: разовая обработка документа вне aiohttp-сервера (CLI и встраивание)."""

from __future__ import annotations

from typing import Optional

from aiohttp import ClientSession

from edge_esi.config import EsiConfig
from edge_esi.logger import logger
from edge_esi.resolver import FragmentFetcher, IncludeResolver

__all__ = ["render_document"]


async def render_document(document: str, base_url: str, config: Optional[EsiConfig] = None) -> str:
    """
    Разрешает все ESI-маркеры документа в собственной клиентской сессии.

    Parameters
    ----------
    document : str
        Исходный HTML.
    base_url : str
        URL, относительно которого разрешаются пути `src`.
    config : EsiConfig, optional
        Настройки загрузки; по умолчанию значения EsiConfig().

    Returns
    -------
    str
        Документ с подставленными фрагментами.
    """
    config = config or EsiConfig()
    logger.info("Rendering document against %s", base_url)
    async with ClientSession() as session:
        resolver = IncludeResolver(FragmentFetcher(session, config), config)
        return await resolver.resolve(document, base_url)
