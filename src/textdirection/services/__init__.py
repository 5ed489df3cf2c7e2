"""Service layer helpers (options loading and persistence)."""

from .settings import OptionsError, OptionsStore, TextDirectionOptions

__all__ = ["OptionsError", "OptionsStore", "TextDirectionOptions"]
