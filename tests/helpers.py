"""Shared test helpers.

Import from here instead of duplicating tree inspection code in individual
test files.
"""

from __future__ import annotations

from textdirection.editor.document_model import Node


def block_dirs(document: Node) -> list[str | None]:
    """Return the ``dir`` attribute of every top-level block, in order."""

    return [child.attrs.get("dir") for child in document.content]


def block_positions(document: Node) -> list[int]:
    """Return the start position of every top-level block."""

    return [offset for _, offset in document.children_with_offsets()]
