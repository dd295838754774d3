# edge_esi/resolver/models.py
"""
Data models for the include resolver.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

CONTINUE_POLICY = 'onerror="continue"'


@dataclass(slots=True, frozen=True)
class IncludeMarker:
    """One `<esi:include ... />` tag found in the pristine document."""

    src: str
    text: str
    start: int
    end: int

    @property
    def continue_on_error(self) -> bool:
        # literal match only, no quoting or spacing variants
        return CONTINUE_POLICY in self.text


@dataclass(slots=True)
class FragmentResponse:
    """Результат загрузки фрагмента: итоговый URL, статус и текст (только для 2xx)."""

    url: str
    status: int
    content: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(slots=True, frozen=True)
class Fetched:
    content: str


@dataclass(slots=True, frozen=True)
class Failed:
    """Marker could not be resolved.

    ``status`` holds the HTTP status of a non-2xx answer and is ``None`` when
    the fetch itself raised; ``reason`` is then the exception message.
    """

    reason: str
    status: Optional[int] = None
    continue_on_error: bool = False


Outcome = Union[Fetched, Failed]

__all__ = ["CONTINUE_POLICY", "IncludeMarker", "FragmentResponse", "Fetched", "Failed", "Outcome"]
