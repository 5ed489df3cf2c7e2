"""Incremental reconciliation of the ``dir`` attribute after edits."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ..core.codec import DIR_ATTRIBUTE
from ..core.direction import get_text_direction
from ..core.ranges import ChangedRange
from ..editor.transaction import ADD_TO_HISTORY, Transaction
from .changes import combine_transaction_steps, find_children_in_range, get_changed_ranges

if TYPE_CHECKING:
    from ..editor.state import EditorState
    from ..services.settings import TextDirectionOptions
    from ..utils.telemetry import TelemetryClient

__all__ = ["TextDirectionPlugin", "reconcile_text_direction"]

LOGGER = logging.getLogger(__name__)


def reconcile_text_direction(
    tr: Transaction,
    changed_ranges: Sequence[ChangedRange],
    options: TextDirectionOptions,
) -> bool:
    """Stage ``dir`` updates on ``tr`` for managed nodes inside ``changed_ranges``.

    A node that already carries a direction and has text keeps it: explicit
    or previously detected values are never overwritten by detection. Nodes
    with no text are always re-evaluated. Returns ``True`` when at least one
    write was staged.
    """

    modified = False
    visited: set[int] = set()
    for change in changed_ranges:
        for found in find_children_in_range(tr.doc, change.new, lambda child: options.manages(child.type)):
            if found.pos in visited:
                continue
            visited.add(found.pos)
            current = found.node.attrs.get(DIR_ATTRIBUTE)
            content = found.node.text_content
            if current and content:
                continue
            detected = get_text_direction(content)
            if detected == current:
                continue
            marks = tr.stored_marks or ()
            tr.set_node_attribute(found.pos, DIR_ATTRIBUTE, detected)
            for mark in marks:
                tr.add_stored_mark(mark)
            LOGGER.debug("dir of %s at %d: %r -> %r", found.node.type, found.pos, current, detected)
            modified = True
    return modified


class TextDirectionPlugin:
    """Appends direction updates to every document-changing batch."""

    key = "text_direction"

    def __init__(self, options: TextDirectionOptions, *, telemetry: TelemetryClient | None = None) -> None:
        self._options = options
        self._telemetry = telemetry

    @property
    def options(self) -> TextDirectionOptions:
        return self._options

    def append_transaction(
        self,
        transactions: Sequence[Transaction],
        old_state: EditorState,
        new_state: EditorState,
    ) -> Transaction | None:
        if not any(transaction.doc_changed for transaction in transactions):
            return None
        transform = combine_transaction_steps(old_state.doc, transactions)
        changes = get_changed_ranges(transform)
        if not changes:
            return None
        tr = new_state.tr
        tr.set_meta(ADD_TO_HISTORY, False)
        modified = reconcile_text_direction(tr, changes, self._options)
        if self._telemetry is not None:
            self._telemetry.track_event(
                "text_direction.reconciled",
                ranges=len(changes),
                writes=len(tr.steps),
            )
        return tr if modified else None
