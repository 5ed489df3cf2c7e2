"""Core domain types: spans, direction detection and the ``dir`` codec."""

from .direction import get_text_direction
from .ranges import ChangedRange, Span

__all__ = ["ChangedRange", "Span", "get_text_direction"]
