"""Atomic edit steps applied to immutable documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .document_model import Node, StepApplyError
from .mapping import StepMap

__all__ = ["AttrStep", "ReplaceStep", "Step"]


class Step(Protocol):
    """Protocol implemented by every edit step."""

    def apply(self, doc: Node) -> Node:
        """Return the document produced by applying the step to ``doc``."""
        ...

    def get_map(self) -> StepMap:
        """Return how the step moves positions."""
        ...


@dataclass(slots=True, frozen=True)
class ReplaceStep:
    """Replace ``[start, end)`` with ``content``; both bounds share one parent."""

    start: int
    end: int
    content: tuple[Node, ...] = ()

    def apply(self, doc: Node) -> Node:
        return doc.replace(self.start, self.end, self.content)

    def get_map(self) -> StepMap:
        inserted = sum(item.node_size for item in self.content)
        removed = self.end - self.start
        if not inserted and not removed:
            return StepMap.empty()
        return StepMap(((self.start, removed, inserted),))


@dataclass(slots=True, frozen=True)
class AttrStep:
    """Set a single attribute on the node starting at ``pos``."""

    pos: int
    attr: str
    value: Any

    def apply(self, doc: Node) -> Node:
        target = doc.node_at(self.pos)
        if target is None:
            raise StepApplyError(f"No node starts at position {self.pos}", reason="not_a_node", position=self.pos)
        if target.is_text:
            raise StepApplyError("Text nodes have no attributes", reason="not_a_node", position=self.pos)
        return doc.update_node_at(self.pos, lambda current: current.with_attrs(**{self.attr: self.value}))

    def get_map(self) -> StepMap:
        return StepMap.empty()
