"""Editor extension bundling direction detection, commands and shortcuts."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from ..core.codec import GlobalAttributes, global_attributes
from ..core.direction import LTR, RTL
from ..editor.state import EditorState
from ..editor.transaction import Transaction
from ..services.settings import TextDirectionOptions
from ..utils.telemetry import TelemetryClient
from .commands import set_text_direction, unset_text_direction
from .reconcile import TextDirectionPlugin

__all__ = ["TextDirection"]

LOGGER = logging.getLogger(__name__)


class TextDirection:
    """Keeps ``dir`` in sync with content for the configured node types.

    Example:
        editor = Editor(document, extensions=[TextDirection(types={"paragraph", "heading"})])
        editor.insert_text("שלום", 1)
        editor.commands.set_text_direction("ltr")
    """

    name = "text_direction"

    def __init__(
        self,
        options: TextDirectionOptions | None = None,
        *,
        telemetry: TelemetryClient | None = None,
        **overrides: Any,
    ) -> None:
        if options is None:
            options = TextDirectionOptions.from_mapping(overrides)
        elif overrides:
            merged = options.to_dict()
            merged.update(overrides)
            options = TextDirectionOptions.from_mapping(merged)
        self._options = options
        self._telemetry = telemetry
        if not options.types:
            LOGGER.info("Text direction extension configured without node types; detection is inert")

    @property
    def options(self) -> TextDirectionOptions:
        return self._options

    def global_attributes(self) -> GlobalAttributes:
        return global_attributes(self._options)

    def plugins(self) -> tuple[TextDirectionPlugin, ...]:
        return (TextDirectionPlugin(self._options, telemetry=self._telemetry),)

    def commands(self) -> dict[str, Callable[..., bool]]:
        return {
            "set_text_direction": self._tracked("set_text_direction", set_text_direction),
            "unset_text_direction": self._tracked("unset_text_direction", unset_text_direction),
        }

    def keyboard_shortcuts(self) -> dict[str, tuple[str, tuple[Any, ...]]]:
        return {
            "Mod-Alt-l": ("set_text_direction", (LTR,)),
            "Mod-Alt-r": ("set_text_direction", (RTL,)),
        }

    def _tracked(self, name: str, command: Callable[..., bool]) -> Callable[..., bool]:
        bound = functools.partial(command, options=self._options)

        def _run(
            state: EditorState,
            dispatch: Callable[[Transaction], None] | None,
            *args: Any,
            **kwargs: Any,
        ) -> bool:
            result = bound(state, dispatch, *args, **kwargs)
            if self._telemetry is not None and dispatch is not None:
                self._telemetry.track_event("text_direction.command", command=name, ok=result)
            return result

        return _run
