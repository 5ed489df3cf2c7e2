"""Selection model and command target resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ..core.ranges import Span

__all__ = ["PositionMapper", "Selection", "resolve_target"]


class PositionMapper(Protocol):
    """Anything that can map a position forward (step maps, mappings)."""

    def map(self, pos: int, assoc: int = 1) -> int:
        ...


@dataclass(slots=True, frozen=True)
class Selection:
    """Anchor/head selection; ``anchor == head`` is a caret."""

    anchor: int = 0
    head: int = 0

    @classmethod
    def caret(cls, pos: int) -> Selection:
        return cls(pos, pos)

    @property
    def start(self) -> int:
        return min(self.anchor, self.head)

    @property
    def end(self) -> int:
        return max(self.anchor, self.head)

    @property
    def empty(self) -> bool:
        return self.anchor == self.head

    @property
    def ranges(self) -> tuple[Span, ...]:
        return (Span(self.start, self.end),)

    def map(self, mapper: PositionMapper) -> Selection:
        return Selection(mapper.map(self.anchor), mapper.map(self.head))

    def clamp(self, size: int) -> Selection:
        return Selection(_clamp(self.anchor, size), _clamp(self.head, size))


def resolve_target(target: Any, selection: Selection, size: int) -> tuple[Span, ...]:
    """Return the spans a command should act on.

    ``None`` selects the active selection ranges; an ``int`` is a single
    position; anything :meth:`Span.from_value` accepts is an explicit span.
    Results are clamped to ``[0, size]``.
    """

    if target is None:
        spans = selection.ranges
    else:
        spans = (Span.from_value(target),)
    return tuple(span.clamp(upper=size) for span in spans)


def _clamp(value: int, size: int) -> int:
    return max(0, min(int(value), size))
