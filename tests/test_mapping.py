"""Tests for step maps and mappings."""

from __future__ import annotations

from textdirection.editor.mapping import Mapping, StepMap


def test_insertion_respects_association() -> None:
    step_map = StepMap(((3, 0, 4),))

    assert step_map.map(3, -1) == 3
    assert step_map.map(3) == 7
    assert step_map.map(2) == 2
    assert step_map.map(10) == 14


def test_deletion_collapses_positions_inside() -> None:
    step_map = StepMap(((2, 5, 0),))

    assert step_map.map(2) == 2
    assert step_map.map(4) == 2
    assert step_map.map(7) == 2
    assert step_map.map(9) == 4


def test_changes_report_both_coordinate_systems() -> None:
    step_map = StepMap(((1, 2, 5), (10, 0, 3)))

    assert list(step_map.changes()) == [(1, 3, 1, 6), (10, 10, 13, 16)]


def test_invert_maps_back() -> None:
    step_map = StepMap(((3, 0, 4),))

    inverted = step_map.invert()

    assert inverted.ranges == ((3, 4, 0),)
    assert inverted.map(step_map.map(10)) == 10


def test_empty_map_is_identity() -> None:
    assert StepMap.empty().is_empty
    assert StepMap.empty().map(42) == 42


def test_mapping_composes_slices_and_inverts() -> None:
    mapping = Mapping()
    mapping.append(StepMap(((1, 0, 3),)))
    mapping.append(StepMap(((0, 2, 0),)))

    assert len(mapping) == 2
    assert mapping.map(5) == 6
    assert mapping.slice(1).map(5) == 3
    assert mapping.invert().map(6) == 5
