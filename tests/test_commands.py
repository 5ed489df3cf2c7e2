"""Tests for the direction override commands and shortcuts."""

from __future__ import annotations

import pytest

from textdirection.core.codec import effective_direction
from textdirection.direction.commands import set_text_direction, unset_text_direction
from textdirection.direction.extension import TextDirection
from textdirection.editor.document_model import doc, node
from textdirection.editor.editor import Editor
from textdirection.services.settings import TextDirectionOptions
from textdirection.utils.telemetry import TelemetryClient

from tests.helpers import block_dirs


def test_set_direction_overrides_detected_content(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "Hello"), node("paragraph", "world")))

    assert editor.commands.set_text_direction("rtl", {"from": 0, "to": 5}) is True
    assert block_dirs(editor.doc) == ["rtl", None]

    editor.insert_text("!", 13)
    editor.insert_text(" there", 6)

    assert block_dirs(editor.doc) == ["rtl", "ltr"]
    assert editor.doc.content[0].text_content == "Hello there"


def test_set_direction_rejects_unknown_value(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "Hello")))
    before = editor.doc

    assert editor.commands.set_text_direction("sideways", (0, 7)) is False
    assert editor.doc is before
    assert editor.undo_depth == 0


def test_set_direction_respects_restricted_allowed_set() -> None:
    extension = TextDirection(types={"paragraph"}, allowed_directions=("ltr", "rtl"))
    editor = Editor(doc(node("paragraph", "Hello")), extensions=[extension])

    assert editor.commands.set_text_direction("auto", (0, 7)) is False
    assert editor.commands.set_text_direction("rtl", (0, 7)) is True
    assert block_dirs(editor.doc) == ["rtl"]


def test_unset_direction_clears_attribute_until_next_edit() -> None:
    extension = TextDirection(types={"paragraph"}, default_direction="ltr")
    editor = Editor(doc(node("paragraph", "שלום", dir="rtl")), extensions=[extension])

    assert editor.commands.unset_text_direction({"from": 0, "to": 6}) is True

    current = editor.doc.content[0].attrs.get("dir")
    assert current is None
    assert effective_direction(current, extension.options) == "ltr"

    editor.insert_text("!", 5)
    assert block_dirs(editor.doc) == ["rtl"]


def test_commands_default_to_the_selection(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "one"), node("paragraph", "two"), node("paragraph", "three")))
    editor.set_selection(2, 8)

    assert editor.commands.set_text_direction("rtl")

    assert block_dirs(editor.doc) == ["rtl", "rtl", None]


def test_position_target_hits_enclosing_block(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "one"), node("paragraph", "two")))

    assert editor.commands.set_text_direction("auto", 7)

    assert block_dirs(editor.doc) == [None, "auto"]


def test_heading_and_paragraph_are_both_managed(make_editor) -> None:
    editor = make_editor(
        doc(
            node("heading", "Title", level=1),
            node("bullet_list", node("list_item", node("paragraph", "x"))),
        )
    )

    assert editor.commands.set_text_direction("rtl", (0, editor.doc.content_size))

    heading, bullets = editor.doc.content
    assert heading.attrs["dir"] == "rtl"
    assert "dir" not in bullets.attrs
    assert bullets.content[0].content[0].attrs["dir"] == "rtl"


def test_target_without_managed_nodes_is_a_successful_no_op(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "abc")))
    before = editor.doc

    assert editor.commands.set_text_direction("rtl", 500) is True
    assert editor.commands.unset_text_direction((0, 5)) is True
    assert editor.doc is before
    assert editor.undo_depth == 0


def test_repeated_set_does_not_grow_history(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "abc")))

    editor.commands.set_text_direction("rtl", (0, 5))
    editor.commands.set_text_direction("rtl", (0, 5))

    assert editor.undo_depth == 1
    assert editor.undo()
    assert block_dirs(editor.doc) == [None]


def test_can_checks_without_dispatching(make_editor) -> None:
    editor = make_editor(doc(node("paragraph", "abc")))

    assert editor.can("set_text_direction", "ltr", (0, 5))
    assert not editor.can("set_text_direction", "diagonal", (0, 5))
    assert not editor.can("missing_command")
    assert block_dirs(editor.doc) == [None]


def test_functions_work_without_an_editor(options: TextDirectionOptions) -> None:
    editor = Editor(doc(node("paragraph", "abc", dir="ltr")))
    dispatched = []

    assert set_text_direction(editor.state, dispatched.append, "rtl", (0, 5), options=options)
    assert unset_text_direction(editor.state, dispatched.append, (0, 5), options=options)

    assert [tr.doc.content[0].attrs["dir"] for tr in dispatched] == ["rtl", None]


def test_unknown_commands_raise(make_editor) -> None:
    editor = make_editor()

    with pytest.raises(KeyError):
        editor.run_command("toggle_everything")
    with pytest.raises(AttributeError):
        editor.commands.toggle_everything


@pytest.mark.parametrize(
    "platform, key, expected",
    [
        ("linux", "Ctrl-Alt-l", "ltr"),
        ("linux", "Alt-Ctrl-r", "rtl"),
        ("win32", "Mod-Alt-r", "rtl"),
        ("darwin", "Cmd-Alt-l", "ltr"),
        ("darwin", "Meta-Alt-r", "rtl"),
    ],
)
def test_keyboard_shortcuts_set_direction(options: TextDirectionOptions, platform: str, key: str, expected: str) -> None:
    editor = Editor(doc(node("paragraph", "abc")), extensions=[TextDirection(options)], platform=platform)
    editor.set_selection(1)

    assert editor.handle_key(key) is True
    assert block_dirs(editor.doc) == [expected]


def test_unbound_keys_are_not_handled(options: TextDirectionOptions) -> None:
    editor = Editor(doc(node("paragraph", "abc")), extensions=[TextDirection(options)], platform="darwin")
    editor.set_selection(1)

    assert editor.handle_key("Ctrl-Alt-l") is False
    assert editor.handle_key("Mod-Shift-z") is False
    assert block_dirs(editor.doc) == [None]


def test_commands_are_counted_by_telemetry(options: TextDirectionOptions) -> None:
    telemetry = TelemetryClient(enabled=False)
    editor = Editor(doc(node("paragraph", "abc")), extensions=[TextDirection(options, telemetry=telemetry)])

    editor.commands.set_text_direction("rtl", (0, 5))
    editor.commands.set_text_direction("up", (0, 5))
    editor.can("set_text_direction", "rtl", (0, 5))

    assert telemetry.counts() == {"text_direction.command": 2}
