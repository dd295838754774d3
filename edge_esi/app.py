# File: edge_esi/app.py
"""edge_esi.app: сборка aiohttp-приложения: раздача статики и подключение ESI-перехватчика."""

from __future__ import annotations

import asyncio
import mimetypes
import secrets
from pathlib import Path
from typing import AsyncIterator, Optional

from aiohttp import ClientSession, web

from edge_esi.config import EsiConfig
from edge_esi.logger import logger
from edge_esi.middleware import CLIENT_SESSION_KEY, HTML_CONTENT_TYPE, NESTING_TOKEN_KEY, esi_middleware

__all__ = ["CONFIG_KEY", "AssetHandler", "setup_esi", "make_app"]

CONFIG_KEY = web.AppKey("esi_config", EsiConfig)


class AssetHandler:
    """Отдаёт файлы из каталога целиком в памяти, чтобы перехватчик мог прочитать тело."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def _locate(self, rel: str) -> Optional[Path]:
        target = (self.root / rel.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            return None
        if target.is_dir():
            target = target / "index.html"
        return target if target.is_file() else None

    async def handle(self, request: web.Request) -> web.Response:
        path = await asyncio.to_thread(self._locate, request.match_info.get("path", ""))
        if path is None:
            raise web.HTTPNotFound()
        ctype, _ = mimetypes.guess_type(path.name)
        if ctype == "text/html":
            ctype = HTML_CONTENT_TYPE
        body = await asyncio.to_thread(path.read_bytes)
        return web.Response(
            body=body,
            headers={"Content-Type": ctype or "application/octet-stream"},
        )


def setup_esi(app: web.Application, config: Optional[EsiConfig] = None) -> web.Application:
    """Подключает ESI к существующему приложению: конфиг, токен вложенности, клиентская сессия, middleware."""
    config = config or EsiConfig()
    app[CONFIG_KEY] = config
    app[NESTING_TOKEN_KEY] = secrets.token_urlsafe(16)

    async def _client_session(app: web.Application) -> AsyncIterator[None]:
        async with ClientSession() as session:
            app[CLIENT_SESSION_KEY] = session
            yield

    app.cleanup_ctx.append(_client_session)
    app.middlewares.append(esi_middleware(config))
    return app


def make_app(config: Optional[EsiConfig] = None) -> web.Application:
    """Приложение для `edge-esi serve`: статика из asset_root с обработкой ESI."""
    config = config or EsiConfig()
    app = web.Application()
    app.router.add_get("/{path:.*}", AssetHandler(config.asset_root).handle)
    setup_esi(app, config)
    logger.info("Serving %s with ESI processing", Path(config.asset_root).resolve())
    return app
