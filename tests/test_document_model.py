"""Tests for the immutable document tree."""

from __future__ import annotations

import json

import pytest

from textdirection.editor.document_model import (
    DocumentSchemaError,
    Mark,
    Node,
    StepApplyError,
    doc,
    node,
    text,
)


def _sample() -> Node:
    return doc(
        node("heading", "Title", level=1),
        node("paragraph", "ab", node("hard_break"), "cd"),
        node("blockquote", node("paragraph", "quote")),
    )


def test_sizes_follow_position_rules() -> None:
    document = _sample()
    heading, paragraph, quote = document.content

    assert heading.node_size == 7
    assert paragraph.node_size == 7
    assert quote.node_size == 9
    assert document.content_size == 23
    assert text("abc").node_size == 3
    assert node("hard_break").node_size == 1


def test_text_content_concatenates_descendants() -> None:
    assert _sample().content[1].text_content == "abcd"
    assert node("paragraph").text_content == ""


def test_node_builder_drops_empty_strings() -> None:
    assert node("paragraph", "").content == ()


def test_node_rejects_inconsistent_shapes() -> None:
    with pytest.raises(ValueError):
        Node("text")
    with pytest.raises(ValueError):
        Node("paragraph", text="oops")
    with pytest.raises(TypeError):
        Node("paragraph", content=("raw",))  # type: ignore[arg-type]


def test_nodes_between_reports_overlapping_nodes_with_positions() -> None:
    document = _sample()

    found = [(item.node.type, item.pos) for item in document.nodes_between(8, 9)]

    assert found == [("paragraph", 7), ("text", 8)]


def test_nodes_between_descends_into_wrappers() -> None:
    document = _sample()

    found = [(item.node.type, item.pos) for item in document.nodes_between(16, 18)]

    assert found == [("blockquote", 14), ("paragraph", 15), ("text", 16)]


def test_collapsed_range_reports_enclosing_block() -> None:
    document = doc(node("paragraph"), node("paragraph", "x"))

    assert [(item.node.type, item.pos) for item in document.nodes_between(1, 1)] == [("paragraph", 0)]


def test_node_at_finds_nested_nodes() -> None:
    document = _sample()

    assert document.node_at(0).type == "heading"
    assert document.node_at(15).type == "paragraph"
    assert document.node_at(10).type == "hard_break"
    assert document.node_at(3) is None
    assert document.node_at(99) is None


def test_update_node_at_returns_new_tree() -> None:
    document = _sample()

    updated = document.update_node_at(15, lambda current: current.with_attrs(dir="rtl"))

    assert updated.node_at(15).attrs["dir"] == "rtl"
    assert "dir" not in document.node_at(15).attrs
    with pytest.raises(StepApplyError) as excinfo:
        document.update_node_at(3, lambda current: current)
    assert excinfo.value.reason == "not_a_node"


def test_replace_inserts_into_text_and_merges_runs() -> None:
    document = doc(node("paragraph", "held"))

    updated = document.replace(3, 3, (text("llo wor"),))

    assert updated.content[0].text_content == "hello world"
    assert updated.content[0].child_count == 1


def test_replace_keeps_differently_marked_runs_apart() -> None:
    bold = Mark("bold")
    document = doc(node("paragraph", "ab"))

    updated = document.replace(2, 2, (text("X", (bold,)),))

    assert [child.text for child in updated.content[0].content] == ["a", "X", "b"]
    assert updated.content[0].content[1].marks == (bold,)


def test_replace_can_delete_and_add_blocks() -> None:
    document = doc(node("paragraph", "one"), node("paragraph", "two"))

    removed = document.replace(0, 5, ())
    added = document.replace(10, 10, (node("paragraph", "three"),))

    assert [child.text_content for child in removed.content] == ["two"]
    assert [child.text_content for child in added.content] == ["one", "two", "three"]


def test_replace_rejects_invalid_ranges() -> None:
    document = doc(node("paragraph", "one"), node("paragraph", "two"))

    with pytest.raises(StepApplyError) as out_of_range:
        document.replace(0, 50, ())
    with pytest.raises(StepApplyError) as cut:
        document.replace(2, 7, ())

    assert out_of_range.value.reason == "position_out_of_range"
    assert cut.value.reason == "mismatched_parents"
    assert cut.value.details() == {"reason": "mismatched_parents", "position": 2}


def test_json_round_trip() -> None:
    document = doc(node("paragraph", text("hi", (Mark("link", {"href": "/x"}),)), dir="rtl"))

    payload = document.to_json()

    assert payload["content"][0]["attrs"] == {"dir": "rtl"}
    assert Node.from_json(json.dumps(payload)) == document


def test_from_json_reports_schema_errors() -> None:
    with pytest.raises(DocumentSchemaError) as excinfo:
        Node.from_json({"type": "doc", "content": [{"type": "text"}]})

    assert any("content/0" in message for message in excinfo.value.errors)

    with pytest.raises(DocumentSchemaError):
        Node.from_json("{broken")
