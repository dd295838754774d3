# edge_esi/__init__.py
"""
EdgeESI package initializer.
Defines package version and exposes the aiohttp integration.
"""
__version__ = "0.1.0"

from edge_esi.app import make_app, setup_esi
from edge_esi.config import EsiConfig, load_config
from edge_esi.engine import render_document
from edge_esi.middleware import esi_middleware

__all__ = ["__version__", "EsiConfig", "esi_middleware", "load_config", "make_app", "render_document", "setup_esi"]
