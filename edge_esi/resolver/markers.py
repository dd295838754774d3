# edge_esi/resolver/markers.py
"""
Поиск ESI-маркеров в исходном документе и позиционная подстановка результатов.
"""
from __future__ import annotations

import re
from typing import List, Sequence

from edge_esi.resolver.models import IncludeMarker

__all__ = ("INCLUDE_PATTERN", "scan_markers", "splice", "comment")

# self-closing only; src must be double-quoted, other attributes are free-form
INCLUDE_PATTERN = re.compile(r'<esi:include(?=\s)[^>]*?\ssrc="([^"]+)"[^>]*/>')


def scan_markers(document: str) -> List[IncludeMarker]:
    """Находит все маркеры слева направо за один проход по неизменённому тексту."""
    return [
        IncludeMarker(src=m.group(1), text=m.group(0), start=m.start(), end=m.end())
        for m in INCLUDE_PATTERN.finditer(document)
    ]


def splice(document: str, markers: Sequence[IncludeMarker], replacements: Sequence[str]) -> str:
    """Собирает документ заново, вставляя каждую замену на место своего маркера.

    Маркеры должны идти в порядке обнаружения (возрастающие смещения).
    """
    if len(markers) != len(replacements):
        raise ValueError(f"{len(markers)} markers but {len(replacements)} replacements")
    parts: List[str] = []
    remaining_index = 0
    for marker, replacement in zip(markers, replacements):
        parts.append(document[remaining_index:marker.start])
        parts.append(replacement)
        remaining_index = marker.end
    parts.append(document[remaining_index:])
    return "".join(parts)


def comment(text: str) -> str:
    """Wrap *text* in an HTML comment that it cannot terminate early."""
    safe = text.replace("--!>", "--!&gt;").replace("-->", "--&gt;")
    return f"<!-- {safe} -->"
