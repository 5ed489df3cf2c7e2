"""Immutable document tree used by the editor host.

Positions follow the usual rich-text convention: a text node occupies one
position per character, a leaf node (for example ``hard_break``) occupies a
single position, and every other node occupies its content plus one opening
and one closing token. Positions inside the root node are relative to the
start of its content.
"""

from __future__ import annotations

import json
import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Sequence

import jsonschema

__all__ = [
    "DocumentSchemaError",
    "LEAF_TYPES",
    "Mark",
    "Node",
    "NodeWithPos",
    "StepApplyError",
    "doc",
    "node",
    "text",
]

TEXT_TYPE = "text"
LEAF_TYPES: frozenset[str] = frozenset({"hard_break", "horizontal_rule", "image"})

_NODE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$ref": "#/$defs/node",
    "$defs": {
        "mark": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"type": "string", "minLength": 1},
                "attrs": {"type": "object"},
            },
        },
        "node": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"type": "string", "minLength": 1},
                "attrs": {"type": "object"},
                "text": {"type": "string"},
                "marks": {"type": "array", "items": {"$ref": "#/$defs/mark"}},
                "content": {"type": "array", "items": {"$ref": "#/$defs/node"}},
            },
            "if": {"properties": {"type": {"const": TEXT_TYPE}}},
            "then": {"required": ["text"], "not": {"required": ["content"]}},
        },
    },
}


class StepApplyError(RuntimeError):
    """Raised when an edit step cannot be applied to a document."""

    def __init__(self, message: str, *, reason: str = "invalid_step", position: int | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.position = position

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "position": self.position}


class DocumentSchemaError(ValueError):
    """Raised when serialized document data does not describe a valid tree."""

    def __init__(self, message: str, *, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = tuple(errors)


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(slots=True, frozen=True)
class Mark:
    """Inline formatting attached to text (bold, link, ...)."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _freeze(self.attrs))

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        if self.attrs:
            payload["attrs"] = dict(self.attrs)
        return payload


@dataclass(slots=True, frozen=True)
class Node:
    """One element of the document tree."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    content: tuple[Node, ...] = ()
    text: str | None = None
    marks: tuple[Mark, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _freeze(self.attrs))
        object.__setattr__(self, "content", tuple(self.content))
        object.__setattr__(self, "marks", tuple(self.marks))
        if self.is_text:
            if not isinstance(self.text, str):
                raise ValueError("Text nodes require a string value")
            if self.content:
                raise ValueError("Text nodes cannot have children")
        elif self.text is not None:
            raise ValueError(f"Only text nodes carry text (got type {self.type!r})")
        for child in self.content:
            if not isinstance(child, Node):
                raise TypeError(f"Node content must contain Node instances, got {type(child)!r}")

    # ------------------------------------------------------------------
    # Sizes & text
    # ------------------------------------------------------------------
    @property
    def is_text(self) -> bool:
        return self.type == TEXT_TYPE

    @property
    def is_leaf(self) -> bool:
        """Return ``True`` for nodes that cannot hold content."""

        return self.is_text or self.type in LEAF_TYPES

    @property
    def content_size(self) -> int:
        return sum(child.node_size for child in self.content)

    @property
    def node_size(self) -> int:
        """Return the number of positions this node occupies in its parent."""

        if self.is_text:
            return len(self.text or "")
        if self.type in LEAF_TYPES:
            return 1
        return self.content_size + 2

    @property
    def text_content(self) -> str:
        """Return the concatenated text of all descendant text nodes."""

        if self.is_text:
            return self.text or ""
        return "".join(child.text_content for child in self.content)

    @property
    def child_count(self) -> int:
        return len(self.content)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def children_with_offsets(self) -> Iterator[tuple[Node, int]]:
        """Yield each child with its offset inside this node's content."""

        offset = 0
        for child in self.content:
            yield child, offset
            offset += child.node_size

    def nodes_between(self, start: int, end: int, *, node_start: int = 0) -> Iterator[NodeWithPos]:
        """Yield every descendant overlapping ``[start, end]`` in document order.

        A node qualifies when it starts before ``end`` and ends after
        ``start``, so a collapsed range still reports the nodes around it.
        """

        for child, offset in self.children_with_offsets():
            if offset >= end:
                break
            child_end = offset + child.node_size
            if child_end <= start:
                continue
            yield NodeWithPos(node=child, pos=node_start + offset)
            if child.content:
                inner = offset + 1
                yield from child.nodes_between(
                    max(0, start - inner),
                    min(child.content_size, end - inner),
                    node_start=node_start + inner,
                )

    def node_at(self, pos: int) -> Node | None:
        """Return the node starting at ``pos``, or ``None``."""

        current: Node = self
        while True:
            for child, offset in current.children_with_offsets():
                child_end = offset + child.node_size
                if pos < offset or pos >= child_end:
                    continue
                if pos == offset:
                    return child
                if child.is_leaf:
                    return None
                current = child
                pos -= offset + 1
                break
            else:
                return None

    # ------------------------------------------------------------------
    # Persistent updates
    # ------------------------------------------------------------------
    def with_attrs(self, **attrs: Any) -> Node:
        """Return a copy of this node with ``attrs`` merged in."""

        merged = dict(self.attrs)
        merged.update(attrs)
        return dataclasses.replace(self, attrs=merged)

    def with_content(self, content: Sequence[Node]) -> Node:
        return dataclasses.replace(self, content=tuple(content))

    def update_node_at(self, pos: int, update: Callable[[Node], Node]) -> Node:
        """Return a new tree where the node starting at ``pos`` is replaced by ``update(node)``."""

        for index, (child, offset) in enumerate(self.children_with_offsets()):
            child_end = offset + child.node_size
            if pos < offset or pos >= child_end:
                continue
            if pos == offset:
                updated = update(child)
            elif child.is_leaf:
                break
            else:
                updated = child.update_node_at(pos - offset - 1, update)
            content = list(self.content)
            content[index] = updated
            return self.with_content(content)
        raise StepApplyError(f"No node starts at position {pos}", reason="not_a_node", position=pos)

    def replace(self, start: int, end: int, content: Sequence[Node]) -> Node:
        """Return a new tree with ``[start, end)`` replaced by ``content``.

        Both bounds must share the same parent node; they may fall inside
        text nodes, which are split as needed.
        """

        size = self.content_size
        if start < 0 or end > size or end < start:
            raise StepApplyError(
                f"Replace range {start}-{end} is outside the document (size {size})",
                reason="position_out_of_range",
                position=start,
            )
        for index, (child, offset) in enumerate(self.children_with_offsets()):
            if child.is_leaf or child.is_text:
                continue
            inner = offset + 1
            if inner <= start and end <= inner + child.content_size:
                children = list(self.content)
                children[index] = child.replace(start - inner, end - inner, content)
                return self.with_content(children)
        return self.with_content(_splice(self, start, end, content))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        if self.attrs:
            payload["attrs"] = dict(self.attrs)
        if self.is_text:
            payload["text"] = self.text
            if self.marks:
                payload["marks"] = [mark.to_json() for mark in self.marks]
        elif self.content:
            payload["content"] = [child.to_json() for child in self.content]
        return payload

    @classmethod
    def from_json(cls, data: Mapping[str, Any] | str) -> Node:
        """Build a tree from JSON data, validating its shape first."""

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise DocumentSchemaError(f"Document is not valid JSON: {exc.msg}") from exc
        validator = jsonschema.Draft202012Validator(_NODE_SCHEMA)
        errors = [
            f"{'/'.join(str(part) for part in issue.absolute_path) or '<root>'}: {issue.message}"
            for issue in validator.iter_errors(data)
        ]
        if errors:
            raise DocumentSchemaError("Document does not match the node schema", errors=errors)
        return _node_from_payload(data)


@dataclass(slots=True, frozen=True)
class NodeWithPos:
    """A node paired with the absolute position where it starts."""

    node: Node
    pos: int

    @property
    def end(self) -> int:
        return self.pos + self.node.node_size


def _node_from_payload(data: Mapping[str, Any]) -> Node:
    marks = tuple(Mark(item["type"], item.get("attrs") or {}) for item in data.get("marks") or ())
    content = tuple(_node_from_payload(child) for child in data.get("content") or ())
    return Node(
        type=data["type"],
        attrs=data.get("attrs") or {},
        content=content,
        text=data.get("text"),
        marks=marks,
    )


def _splice(parent: Node, start: int, end: int, content: Sequence[Node]) -> list[Node]:
    before: list[Node] = []
    after: list[Node] = []
    for child, offset in parent.children_with_offsets():
        child_end = offset + child.node_size
        if child_end <= start:
            before.append(child)
        elif offset >= end:
            after.append(child)
        elif child.is_text:
            if offset < start:
                before.append(dataclasses.replace(child, text=child.text[: start - offset]))
            if child_end > end:
                after.append(dataclasses.replace(child, text=child.text[end - offset :]))
        elif offset < start or child_end > end:
            raise StepApplyError(
                f"Replace range {start}-{end} cuts through a {child.type!r} node",
                reason="mismatched_parents",
                position=start,
            )
    for item in content:
        if not isinstance(item, Node):
            raise StepApplyError("Replacement content must be Node instances", reason="invalid_content", position=start)
    return _normalize_text(before + list(content) + after)


def _normalize_text(children: Sequence[Node]) -> list[Node]:
    merged: list[Node] = []
    for child in children:
        if child.is_text and not child.text:
            continue
        previous = merged[-1] if merged else None
        if previous is not None and previous.is_text and child.is_text and previous.marks == child.marks:
            merged[-1] = dataclasses.replace(previous, text=f"{previous.text}{child.text}")
            continue
        merged.append(child)
    return merged


def text(value: str, marks: Sequence[Mark] = ()) -> Node:
    """Return a text node."""

    return Node(TEXT_TYPE, text=value, marks=tuple(marks))


def node(type_name: str, *content: Node | str, **attrs: Any) -> Node:
    """Return a node of ``type_name``; plain strings become text nodes."""

    children = tuple(text(item) if isinstance(item, str) else item for item in content)
    return Node(type_name, attrs=attrs, content=tuple(child for child in children if not (child.is_text and not child.text)))


def doc(*content: Node) -> Node:
    """Return a root ``doc`` node."""

    return Node("doc", content=tuple(content))
