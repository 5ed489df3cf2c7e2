"""Position maps describing how edit steps move document positions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

__all__ = ["Mapping", "StepMap"]


@dataclass(slots=True, frozen=True)
class StepMap:
    """Replaced regions of one step as ``(start, old_size, new_size)`` triples.

    ``start`` is expressed in the coordinates of the document the step was
    applied to; triples are sorted and never overlap.
    """

    ranges: tuple[tuple[int, int, int], ...] = ()

    @classmethod
    def empty(cls) -> StepMap:
        return cls(())

    @property
    def is_empty(self) -> bool:
        return not self.ranges

    def map(self, pos: int, assoc: int = 1) -> int:
        """Map ``pos`` through the step.

        ``assoc`` picks the side a position sticks to when content is
        inserted right at it: negative keeps it before the insertion.
        """

        diff = 0
        for start, old_size, new_size in self.ranges:
            if start > pos:
                break
            end = start + old_size
            if pos <= end:
                if not old_size:
                    side = assoc
                elif pos == start:
                    side = -1
                elif pos == end:
                    side = 1
                else:
                    side = assoc
                return start + diff + (0 if side < 0 else new_size)
            diff += new_size - old_size
        return pos + diff

    def changes(self) -> Iterator[tuple[int, int, int, int]]:
        """Yield ``(old_start, old_end, new_start, new_end)`` per replaced region."""

        diff = 0
        for start, old_size, new_size in self.ranges:
            new_start = start + diff
            yield start, start + old_size, new_start, new_start + new_size
            diff += new_size - old_size

    def invert(self) -> StepMap:
        """Return the map that undoes this one."""

        inverted = [
            (new_start, new_end - new_start, old_end - old_start)
            for old_start, old_end, new_start, new_end in self.changes()
        ]
        return StepMap(tuple(inverted))


@dataclass(slots=True)
class Mapping:
    """Ordered pipeline of step maps."""

    maps: list[StepMap] = field(default_factory=list)

    def append(self, step_map: StepMap) -> None:
        self.maps.append(step_map)

    def slice(self, start: int = 0, end: int | None = None) -> Mapping:
        return Mapping(list(self.maps[start:end]))

    def map(self, pos: int, assoc: int = 1) -> int:
        for step_map in self.maps:
            pos = step_map.map(pos, assoc)
        return pos

    def invert(self) -> Mapping:
        """Return a mapping from the final document back to the first one."""

        return Mapping([step_map.invert() for step_map in reversed(self.maps)])

    def __len__(self) -> int:
        return len(self.maps)
