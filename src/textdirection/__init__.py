"""Automatic and user-controlled text direction for rich-text documents."""

from .core.direction import AUTO, DIRECTIONS, LTR, RTL, get_text_direction
from .direction.extension import TextDirection
from .services.settings import TextDirectionOptions

__all__ = [
    "AUTO",
    "DIRECTIONS",
    "LTR",
    "RTL",
    "TextDirection",
    "TextDirectionOptions",
    "get_text_direction",
]

__version__ = "0.1.0"
