"""Headless editor host: dispatch, history, commands and shortcuts.

The editor owns the current :class:`EditorState`, pushes one undo entry per
dispatched user action (including any transactions plugins appended to it)
and exposes extension commands through ``editor.commands``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence

from .document_model import Node, doc, node
from .keymap import Keymap
from .selection import Selection
from .state import EditorState, Plugin
from .transaction import ADD_TO_HISTORY, Transaction

__all__ = ["Command", "Editor", "EditorExtension", "TransactionListener"]

LOGGER = logging.getLogger(__name__)

Dispatch = Callable[[Transaction], None]


class Command(Protocol):
    """Command signature: inspect ``state``, dispatch a transaction when allowed."""

    def __call__(self, state: EditorState, dispatch: Dispatch | None, *args: Any, **kwargs: Any) -> bool:
        ...


class EditorExtension(Protocol):
    """Bundle of plugins, commands and shortcuts registered on an editor."""

    name: str

    def plugins(self) -> Sequence[Plugin]:
        ...

    def commands(self) -> dict[str, Command]:
        ...

    def keyboard_shortcuts(self) -> dict[str, tuple[str, tuple[Any, ...]]]:
        ...


class TransactionListener(Protocol):
    """Callback fired after a dispatch with every applied transaction."""

    def __call__(self, state: EditorState, transactions: Sequence[Transaction]) -> None:
        ...


@dataclass(slots=True)
class _UndoEntry:
    """Represents a document snapshot for undo/redo bookkeeping."""

    doc: Node
    selection: Selection


class _CommandProxy:
    """Attribute access to registered commands: ``editor.commands.name(...)``."""

    def __init__(self, editor: Editor) -> None:
        self._editor = editor

    def __getattr__(self, name: str) -> Callable[..., bool]:
        if not self._editor.has_command(name):
            raise AttributeError(f"No command named {name!r} is registered")

        def _run(*args: Any, **kwargs: Any) -> bool:
            return self._editor.run_command(name, *args, **kwargs)

        return _run


class Editor:
    """High-level editor orchestrating state, history and extensions."""

    MAX_HISTORY = 50

    def __init__(
        self,
        content: Node | None = None,
        *,
        extensions: Iterable[EditorExtension] = (),
        selection: Selection | None = None,
        platform: str | None = None,
    ) -> None:
        document = content if content is not None else doc(node("paragraph"))
        self._state = EditorState(document, (selection or Selection()).clamp(document.content_size))
        self._commands: dict[str, Command] = {}
        self._keymap = Keymap(platform=platform)
        self._undo_stack: list[_UndoEntry] = []
        self._redo_stack: list[_UndoEntry] = []
        self._listeners: list[TransactionListener] = []
        self.commands = _CommandProxy(self)
        for extension in extensions:
            self.register_extension(extension)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    def register_extension(self, extension: EditorExtension) -> None:
        """Install an extension's plugins, commands and keyboard shortcuts."""

        plugins = list(self._state.plugins)
        plugins.extend(extension.plugins())
        self._state = self._state.reconfigure(plugins)
        for name, command in extension.commands().items():
            if name in self._commands:
                LOGGER.warning("Extension %s overrides command %s", extension.name, name)
            self._commands[name] = command
        for key, (command_name, args) in extension.keyboard_shortcuts().items():
            self._keymap.bind(key, self._shortcut_handler(command_name, args))
        LOGGER.debug("Registered extension %s", extension.name)

    def _shortcut_handler(self, command_name: str, args: tuple[Any, ...]) -> Callable[[], bool]:
        def _handler() -> bool:
            return self.run_command(command_name, *args)

        return _handler

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def run_command(self, name: str, *args: Any, **kwargs: Any) -> bool:
        command = self._commands.get(name)
        if command is None:
            raise KeyError(f"Unknown command: {name}")
        return command(self._state, self.dispatch, *args, **kwargs)

    def can(self, name: str, *args: Any, **kwargs: Any) -> bool:
        """Return whether the command would succeed, without dispatching."""

        command = self._commands.get(name)
        if command is None:
            return False
        return command(self._state, None, *args, **kwargs)

    def handle_key(self, name: str) -> bool:
        """Run the shortcut bound to ``name``; ``False`` when unbound."""

        return self._keymap.handle(name)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def doc(self) -> Node:
        return self._state.doc

    @property
    def selection(self) -> Selection:
        return self._state.selection

    def add_transaction_listener(self, listener: TransactionListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, tr: Transaction) -> None:
        """Apply ``tr`` plus every transaction plugins append to it."""

        previous = self._state
        new_state, transactions = previous.apply_transaction(tr)
        changed = any(item.doc_changed for item in transactions)
        if changed and tr.get_meta(ADD_TO_HISTORY, True) is not False:
            self._push_undo_snapshot(previous)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state, transactions)

    # ------------------------------------------------------------------
    # Editing helpers
    # ------------------------------------------------------------------
    def set_selection(self, anchor: int, head: int | None = None) -> None:
        selection = Selection(anchor, anchor if head is None else head)
        self.dispatch(self._state.tr.set_selection(selection.clamp(self.doc.content_size)))

    def insert_text(self, value: str, start: int | None = None, end: int | None = None) -> None:
        """Insert ``value`` at ``start``, or over the selection leaving the caret after it."""

        tr = self._state.tr.insert_text(value, start, end)
        self.dispatch(tr)

    def delete(self, start: int, end: int) -> None:
        """Delete ``[start, end)``.

        Both bounds must sit in the same parent node. Deleting across a block
        boundary (joining two paragraphs) is not supported and raises
        :class:`StepApplyError` with reason ``"mismatched_parents"``.
        """

        self.dispatch(self._state.tr.delete(start, end))

    def replace_with(self, start: int, end: int, content: Sequence[Node]) -> None:
        self.dispatch(self._state.tr.replace_with(start, end, content))

    # ------------------------------------------------------------------
    # Undo/redo support
    # ------------------------------------------------------------------
    def undo(self) -> bool:
        """Restore the previous document snapshot if available."""

        if not self._undo_stack:
            return False
        entry = self._undo_stack.pop()
        self._redo_stack.append(_UndoEntry(self._state.doc, self._state.selection))
        self._restore(entry)
        return True

    def redo(self) -> bool:
        """Reapply an undone document snapshot if available."""

        if not self._redo_stack:
            return False
        entry = self._redo_stack.pop()
        self._undo_stack.append(_UndoEntry(self._state.doc, self._state.selection))
        self._restore(entry)
        return True

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    def _restore(self, entry: _UndoEntry) -> None:
        current = self._state
        self._state = EditorState(entry.doc, entry.selection.clamp(entry.doc.content_size), None, current.plugins)
        for listener in list(self._listeners):
            listener(self._state, ())

    def _push_undo_snapshot(self, previous: EditorState) -> None:
        self._undo_stack.append(_UndoEntry(previous.doc, previous.selection))
        if len(self._undo_stack) > self.MAX_HISTORY:
            self._undo_stack.pop(0)
        self._redo_stack.clear()
