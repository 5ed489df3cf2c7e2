"""Transforms (step pipelines) and editor transactions."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Sequence

from .document_model import Mark, Node, text
from .mapping import Mapping
from .selection import Selection
from .steps import AttrStep, ReplaceStep, Step

if TYPE_CHECKING:
    from .state import EditorState

__all__ = ["Transaction", "Transform", "ADD_TO_HISTORY"]

ADD_TO_HISTORY = "add_to_history"


class Transform:
    """Accumulates steps applied to a starting document.

    Every applied step records the document it was applied to in ``docs``
    and its position map in ``mapping``, so the transform can be diffed
    against its starting point.
    """

    def __init__(self, doc: Node) -> None:
        self.doc = doc
        self.steps: list[Step] = []
        self.docs: list[Node] = []
        self.mapping = Mapping()

    @property
    def before(self) -> Node:
        """Return the document the transform started from."""

        return self.docs[0] if self.docs else self.doc

    @property
    def doc_changed(self) -> bool:
        return bool(self.steps)

    def step(self, step: Step) -> Transform:
        """Apply ``step``; raises :class:`StepApplyError` when it does not fit."""

        result = step.apply(self.doc)
        self.add_step(step, result)
        return self

    def add_step(self, step: Step, doc: Node) -> None:
        self.docs.append(self.doc)
        self.steps.append(step)
        self.mapping.append(step.get_map())
        self.doc = doc

    # ------------------------------------------------------------------
    # Convenience builders
    # ------------------------------------------------------------------
    def replace_with(self, start: int, end: int, content: Sequence[Node] = ()) -> Transform:
        return self.step(ReplaceStep(start, end, tuple(content)))

    def delete(self, start: int, end: int) -> Transform:
        return self.replace_with(start, end)

    def insert(self, pos: int, content: Sequence[Node]) -> Transform:
        return self.replace_with(pos, pos, content)

    def set_node_attribute(self, pos: int, attr: str, value: Any) -> Transform:
        return self.step(AttrStep(pos, attr, value))


class Transaction(Transform):
    """A transform bound to an editor state: selection, stored marks, meta."""

    def __init__(self, state: EditorState) -> None:
        super().__init__(state.doc)
        self.time = time.monotonic()
        self._selection = state.selection
        self._selection_set = False
        self._stored_marks: tuple[Mark, ...] | None = state.stored_marks
        self._meta: dict[str, Any] = {}

    def add_step(self, step: Step, doc: Node) -> None:
        super().add_step(step, doc)
        self._selection = self._selection.map(step.get_map())
        # Any document step drops the marks queued for the next insertion.
        self._stored_marks = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def selection_set(self) -> bool:
        return self._selection_set

    def set_selection(self, selection: Selection) -> Transaction:
        self._selection = selection
        self._selection_set = True
        return self

    def insert_text(self, value: str, start: int | None = None, end: int | None = None) -> Transaction:
        """Insert ``value`` at ``start`` (or over the selection), carrying stored marks.

        Replacing the selection leaves a caret after the inserted text.
        """

        over_selection = start is None
        if start is None:
            start, end = self._selection.start, self._selection.end
        elif end is None:
            end = start
        marks = self._stored_marks or ()
        self.replace_with(start, end, (text(value, marks),) if value else ())
        if over_selection:
            self.set_selection(Selection.caret(start + len(value)))
        return self

    # ------------------------------------------------------------------
    # Stored marks
    # ------------------------------------------------------------------
    @property
    def stored_marks(self) -> tuple[Mark, ...] | None:
        return self._stored_marks

    def set_stored_marks(self, marks: Sequence[Mark] | None) -> Transaction:
        self._stored_marks = tuple(marks) if marks is not None else None
        return self

    def add_stored_mark(self, mark: Mark) -> Transaction:
        current = list(self._stored_marks or ())
        if mark not in current:
            current.append(mark)
        self._stored_marks = tuple(current)
        return self

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def set_meta(self, key: str, value: Any) -> Transaction:
        self._meta[key] = value
        return self

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self._meta.get(key, default)
