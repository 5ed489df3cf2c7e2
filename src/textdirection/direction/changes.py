"""Reduce a batch of edit steps to the document regions it changed."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from ..core.ranges import ChangedRange, Span
from ..editor.document_model import Node, NodeWithPos
from ..editor.transaction import Transform

__all__ = ["combine_transaction_steps", "find_children_in_range", "get_changed_ranges"]


def combine_transaction_steps(old_doc: Node, transactions: Iterable[Transform]) -> Transform:
    """Replay the steps of every transaction onto ``old_doc`` as one transform."""

    transform = Transform(old_doc)
    for transaction in transactions:
        for step in transaction.steps:
            transform.step(step)
    return transform


def get_changed_ranges(transform: Transform) -> list[ChangedRange]:
    """Return the disjoint, ascending regions touched by ``transform``.

    Each replaced region is mapped through the steps that follow it to get
    its span in the final document, and back through the inverted mapping to
    get its span in the starting document. Steps that do not move positions
    (attribute updates) contribute nothing.
    """

    mapping = transform.mapping
    inverted = mapping.invert()
    changes: list[ChangedRange] = []
    for index, step_map in enumerate(mapping.maps):
        if step_map.is_empty:
            continue
        remaining = mapping.slice(index)
        for old_start, old_end, _new_start, _new_end in step_map.changes():
            new_start = remaining.map(old_start, -1)
            new_end = remaining.map(old_end)
            changes.append(
                ChangedRange(
                    old=Span(inverted.map(new_start, -1), inverted.map(new_end)),
                    new=Span(new_start, new_end),
                )
            )
    return _merge_changed_ranges(changes)


def _merge_changed_ranges(changes: Sequence[ChangedRange]) -> list[ChangedRange]:
    merged: list[ChangedRange] = []
    for change in sorted(changes, key=lambda item: (item.new.start, item.new.end)):
        if merged and merged[-1].new.touches(change.new):
            previous = merged[-1]
            merged[-1] = ChangedRange(old=previous.old.union(change.old), new=previous.new.union(change.new))
            continue
        merged.append(change)
    return merged


def find_children_in_range(
    node: Node,
    span: Span,
    predicate: Callable[[Node], bool],
) -> list[NodeWithPos]:
    """Return descendants of ``node`` overlapping ``span`` that satisfy ``predicate``."""

    return [item for item in node.nodes_between(span.start, span.end) if predicate(item.node)]
