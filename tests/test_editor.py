"""Tests for the headless editor host."""

from __future__ import annotations

import pytest

from textdirection.editor.document_model import StepApplyError, doc, node
from textdirection.editor.editor import Editor
from textdirection.editor.keymap import Keymap, normalize_key_name
from textdirection.editor.selection import Selection, resolve_target
from textdirection.editor.state import EditorState


def test_insert_text_replaces_selection_and_moves_caret() -> None:
    editor = Editor(doc(node("paragraph", "hello world")))
    editor.set_selection(7, 12)

    editor.insert_text("there")

    assert editor.doc.content[0].text_content == "hello there"
    assert editor.selection == Selection(12, 12)


def test_selection_is_clamped_to_document() -> None:
    editor = Editor(doc(node("paragraph", "abc")), selection=Selection(2, 99))

    assert editor.selection == Selection(2, 5)


def test_undo_stack_is_bounded() -> None:
    editor = Editor(doc(node("paragraph")))

    for index in range(Editor.MAX_HISTORY + 5):
        editor.insert_text("x", 1 + index)

    assert editor.undo_depth == Editor.MAX_HISTORY


def test_new_edit_clears_redo_stack() -> None:
    editor = Editor(doc(node("paragraph")))
    editor.insert_text("a", 1)
    editor.undo()

    editor.insert_text("b", 1)

    assert not editor.redo()
    assert editor.doc.content[0].text_content == "b"


def test_listeners_observe_dispatch_and_undo() -> None:
    editor = Editor(doc(node("paragraph")))
    seen: list[int] = []
    editor.add_transaction_listener(lambda state, transactions: seen.append(len(transactions)))

    editor.insert_text("a", 1)
    editor.undo()

    assert seen == [1, 0]


def test_stale_transaction_is_rejected() -> None:
    state = EditorState(doc(node("paragraph")))
    stale = state.tr.insert_text("a", 1)
    newer = state.apply(state.tr.insert_text("b", 1))

    with pytest.raises(StepApplyError) as excinfo:
        newer.apply(stale)

    assert excinfo.value.reason == "stale_transaction"


def test_invalid_step_surfaces_error() -> None:
    editor = Editor(doc(node("paragraph", "abc")))

    with pytest.raises(StepApplyError) as excinfo:
        editor.state.tr.set_node_attribute(2, "dir", "rtl")

    assert excinfo.value.reason == "not_a_node"
    assert excinfo.value.details() == {"reason": "not_a_node", "position": 2}


def test_resolve_target_shapes() -> None:
    selection = Selection(4, 2)

    assert [span.to_tuple() for span in resolve_target(None, selection, 10)] == [(2, 4)]
    assert [span.to_tuple() for span in resolve_target(30, selection, 10)] == [(10, 10)]
    assert [span.to_tuple() for span in resolve_target({"from": 1, "to": 3}, selection, 10)] == [(1, 3)]


@pytest.mark.parametrize(
    "name, platform, expected",
    [
        ("Mod-Alt-l", "linux", "Alt-Ctrl-l"),
        ("Mod-Alt-L", "darwin", "Alt-Meta-l"),
        ("shift-ctrl-Enter", "linux", "Ctrl-Shift-Enter"),
        ("Ctrl--", "linux", "Ctrl--"),
    ],
)
def test_normalize_key_name(name: str, platform: str, expected: str) -> None:
    assert normalize_key_name(name, platform=platform) == expected


def test_normalize_key_name_rejects_unknown_modifiers() -> None:
    with pytest.raises(ValueError):
        normalize_key_name("Hyper-x", platform="linux")


def test_keymap_reports_bindings() -> None:
    keymap = Keymap(platform="linux")
    calls: list[str] = []
    keymap.bind("Mod-b", lambda: calls.append("bold") is None)

    assert keymap.bindings() == ("Ctrl-b",)
    assert keymap.handle("Ctrl-b")
    assert calls == ["bold"]


def test_delete_across_blocks_is_rejected() -> None:
    editor = Editor(doc(node("paragraph", "one"), node("paragraph", "two")))

    with pytest.raises(StepApplyError) as excinfo:
        editor.delete(3, 7)

    assert excinfo.value.reason == "mismatched_parents"
    assert editor.undo_depth == 0
