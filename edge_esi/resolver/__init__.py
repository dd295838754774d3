# File: edge_esi/resolver/__init__.py
"""edge_esi.resolver: поиск ESI-маркеров, загрузка фрагментов и сборка документа."""

from .fetcher import DEPTH_HEADER, TOKEN_HEADER, FragmentFetcher
from .markers import scan_markers, splice
from .models import Failed, Fetched, FragmentResponse, IncludeMarker
from .resolver import IncludeResolver

__all__ = [
    "DEPTH_HEADER",
    "TOKEN_HEADER",
    "Failed",
    "Fetched",
    "FragmentFetcher",
    "FragmentResponse",
    "IncludeMarker",
    "IncludeResolver",
    "scan_markers",
    "splice",
]
