"""User commands that force or clear an explicit ``dir`` value."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from ..core.codec import DIR_ATTRIBUTE
from ..editor.selection import resolve_target
from ..editor.transaction import Transaction
from .changes import find_children_in_range

if TYPE_CHECKING:
    from ..editor.state import EditorState
    from ..services.settings import TextDirectionOptions

__all__ = ["set_text_direction", "unset_text_direction"]

LOGGER = logging.getLogger(__name__)

Dispatch = Callable[[Transaction], None]


def set_text_direction(
    state: EditorState,
    dispatch: Dispatch | None,
    direction: Any,
    target: Any = None,
    *,
    options: TextDirectionOptions,
) -> bool:
    """Set ``dir`` to ``direction`` on every managed node covered by ``target``.

    Returns ``False`` without touching the document when ``direction`` is not
    an allowed value. An empty target or one without managed nodes is a
    successful no-op.
    """

    if not options.allows(direction):
        LOGGER.debug("Rejected text direction %r (allowed: %s)", direction, options.allowed_directions)
        return False
    return _update_direction(state, dispatch, direction, target, options)


def unset_text_direction(
    state: EditorState,
    dispatch: Dispatch | None,
    target: Any = None,
    *,
    options: TextDirectionOptions,
) -> bool:
    """Clear the explicit ``dir`` of every managed node covered by ``target``.

    Detection is not re-run here; a cleared node picks up a detected
    direction the next time its content is edited.
    """

    return _update_direction(state, dispatch, None, target, options)


def _update_direction(
    state: EditorState,
    dispatch: Dispatch | None,
    value: str | None,
    target: Any,
    options: TextDirectionOptions,
) -> bool:
    spans = resolve_target(target, state.selection, state.doc.content_size)
    tr = state.tr
    seen: set[int] = set()
    for span in spans:
        for found in find_children_in_range(state.doc, span, lambda child: options.manages(child.type)):
            if found.pos in seen:
                continue
            seen.add(found.pos)
            if found.node.attrs.get(DIR_ATTRIBUTE) == value:
                continue
            tr.set_node_attribute(found.pos, DIR_ATTRIBUTE, value)
    if dispatch is not None and tr.doc_changed:
        dispatch(tr)
    return True
