"""Structured helpers for representing document spans."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(slots=True, frozen=True)
class Span(Sequence[int]):
    """Canonical ``[start, end)`` span using absolute document positions."""

    start: int
    end: int

    def __post_init__(self) -> None:
        start = self._coerce_index(self.start, "start")
        end = self._coerce_index(self.end, "end")
        if end < start:
            start, end = end, start
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @staticmethod
    def _coerce_index(value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Span {label} must be an integer")
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Span {label} must be an integer") from exc
        if number < 0:
            return 0
        return number

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int | slice) -> int | tuple[int, ...]:
        if isinstance(index, slice):
            return self.to_tuple()[index]
        if index == 0:
            return self.start
        if index == 1:
            return self.end
        raise IndexError("Span index out of range")

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    @property
    def length(self) -> int:
        """Return the width of the span."""

        return self.end - self.start

    @property
    def is_collapsed(self) -> bool:
        """Return ``True`` when the span collapses to a single position."""

        return self.start == self.end

    def to_tuple(self) -> tuple[int, int]:
        """Return the span as a ``(start, end)`` tuple."""

        return (self.start, self.end)

    def to_dict(self) -> dict[str, int]:
        """Return the span as a ``{"from": ..., "to": ...}`` object."""

        return {"from": self.start, "to": self.end}

    def touches(self, other: Span) -> bool:
        """Return ``True`` when the spans overlap or share a boundary."""

        return self.start <= other.end and other.start <= self.end

    def union(self, other: Span) -> Span:
        return Span(min(self.start, other.start), max(self.end, other.end))

    def clamp(self, *, lower: int = 0, upper: int | None = None) -> Span:
        """Clamp the span to ``[lower, upper]`` bounds."""

        start = max(lower, self.start)
        end = max(lower, self.end)
        if upper is not None:
            start = min(start, upper)
            end = min(end, upper)
        return Span(start, end)

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        fallback: tuple[int, int] | None = None,
    ) -> Span:
        """Coerce ``value`` into a :class:`Span`.

        Accepts another span, a single position, a two-item sequence, a
        mapping keyed by ``from``/``to`` or ``start``/``end``, or any object
        exposing ``start``/``end`` attributes.
        """

        if isinstance(value, Span):
            return value
        if value is None:
            if fallback is None:
                raise ValueError("Span value is required")
            return cls(*fallback)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value, value)
        if isinstance(value, Mapping):
            start = value.get("from", value.get("start"))
            end = value.get("to", value.get("end"))
            if start is None or end is None:
                if fallback is None:
                    raise ValueError("Span mappings require from/to (or start/end) keys")
                if start is None:
                    start = fallback[0]
                if end is None:
                    end = fallback[1]
            return cls(start, end)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 2:
                raise ValueError("Span sequences must have exactly two entries")
            return cls(seq[0], seq[1])
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        if start is not None and end is not None:
            return cls(start, end)
        raise TypeError("Unsupported Span input")


@dataclass(slots=True, frozen=True)
class ChangedRange:
    """One region touched by an edit batch, in old and new coordinates."""

    old: Span
    new: Span

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"old": self.old.to_dict(), "new": self.new.to_dict()}


__all__ = ["ChangedRange", "Span"]
