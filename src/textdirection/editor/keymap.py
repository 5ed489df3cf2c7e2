"""Keyboard shortcut normalisation and lookup."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, Mapping

__all__ = ["Keymap", "normalize_key_name"]

LOGGER = logging.getLogger(__name__)
_MODIFIER_ORDER: tuple[str, ...] = ("Alt", "Ctrl", "Meta", "Shift")
_MODIFIER_ALIASES: Mapping[str, str] = {
    "alt": "Alt",
    "a": "Alt",
    "option": "Alt",
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "c": "Ctrl",
    "meta": "Meta",
    "cmd": "Meta",
    "m": "Meta",
    "shift": "Shift",
    "s": "Shift",
}


def normalize_key_name(name: str, *, platform: str | None = None) -> str:
    """Return ``name`` with modifiers in canonical order.

    ``Mod`` resolves to ``Meta`` on macOS and ``Ctrl`` elsewhere; single
    character keys are lower-cased.
    """

    target_platform = platform or sys.platform
    parts = name.split("-")
    key = parts[-1]
    if key == "" and len(parts) > 1:
        # "Ctrl--" binds the minus key
        key = "-"
        parts = parts[:-1]
    modifiers: set[str] = set()
    for raw in parts[:-1]:
        lowered = raw.lower()
        if lowered == "mod":
            modifiers.add("Meta" if target_platform == "darwin" else "Ctrl")
            continue
        resolved = _MODIFIER_ALIASES.get(lowered)
        if resolved is None:
            raise ValueError(f"Unrecognized modifier name: {raw!r}")
        modifiers.add(resolved)
    if len(key) == 1:
        key = key.lower()
    prefix = "".join(f"{modifier}-" for modifier in _MODIFIER_ORDER if modifier in modifiers)
    return f"{prefix}{key}"


class Keymap:
    """Maps normalized key names to handlers returning ``True`` when handled."""

    def __init__(self, *, platform: str | None = None) -> None:
        self._platform = platform
        self._bindings: Dict[str, Callable[[], bool]] = {}

    def bind(self, name: str, handler: Callable[[], bool]) -> None:
        key = normalize_key_name(name, platform=self._platform)
        if key in self._bindings:
            LOGGER.debug("Rebinding shortcut %s", key)
        self._bindings[key] = handler

    def bindings(self) -> tuple[str, ...]:
        return tuple(self._bindings)

    def handle(self, name: str) -> bool:
        """Run the handler bound to ``name``; ``False`` when nothing is bound."""

        handler = self._bindings.get(normalize_key_name(name, platform=self._platform))
        if handler is None:
            return False
        return bool(handler())
