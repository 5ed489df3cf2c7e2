"""HTML and Markdown conversion for documents.

Node-level attributes registered by extensions (such as ``dir``) go through
their :class:`~textdirection.core.codec.GlobalAttributes` parse and render
rules; everything else uses a fixed tag table.
"""

from __future__ import annotations

import html
import logging
from typing import Any, Dict, Iterable, Mapping, Sequence

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from markdown_it import MarkdownIt

from ..core.codec import GlobalAttributes
from .document_model import LEAF_TYPES, Mark, Node, doc, text

__all__ = ["from_html", "from_markdown", "to_html"]

LOGGER = logging.getLogger(__name__)

_BLOCK_TAGS: Mapping[str, str] = {
    "paragraph": "p",
    "blockquote": "blockquote",
    "bullet_list": "ul",
    "ordered_list": "ol",
    "list_item": "li",
    "code_block": "pre",
    "hard_break": "br",
    "horizontal_rule": "hr",
    "image": "img",
}
_TAG_TYPES: Mapping[str, str] = {tag: type_name for type_name, tag in _BLOCK_TAGS.items()}
_HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}
_MARK_TAGS: Mapping[str, str] = {"bold": "strong", "italic": "em", "code": "code", "link": "a"}
_TAG_MARKS: Mapping[str, str] = {"strong": "bold", "b": "bold", "em": "italic", "i": "italic", "code": "code", "a": "link"}
_VOID_TAGS = {"br", "hr", "img"}
_TEXTBLOCK_TYPES = {"paragraph", "heading"}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------
def to_html(document: Node, attributes: Sequence[GlobalAttributes] = ()) -> str:
    """Render the children of ``document`` as an HTML fragment."""

    return "".join(_render_node(child, attributes) for child in document.content)


def _render_node(node: Node, attributes: Sequence[GlobalAttributes]) -> str:
    if node.is_text:
        return _render_text(node)
    if node.type == "heading":
        tag = f"h{int(node.attrs.get('level', 1))}"
        element_attrs: Dict[str, str] = {}
    else:
        tag = _BLOCK_TAGS.get(node.type, "div")
        element_attrs = {"src": str(node.attrs["src"])} if node.type == "image" and node.attrs.get("src") else {}
    for group in attributes:
        if not group.applies_to(node.type):
            continue
        for spec in group.attributes.values():
            element_attrs.update(spec.render(node.attrs))
    rendered_attrs = "".join(f' {name}="{html.escape(value, quote=True)}"' for name, value in element_attrs.items())
    if tag in _VOID_TAGS:
        return f"<{tag}{rendered_attrs}>"
    inner = "".join(_render_node(child, attributes) for child in node.content)
    if node.type == "code_block":
        inner = f"<code>{inner}</code>"
    return f"<{tag}{rendered_attrs}>{inner}</{tag}>"


def _render_text(node: Node) -> str:
    rendered = html.escape(node.text or "", quote=False)
    for mark in reversed(node.marks):
        tag = _MARK_TAGS.get(mark.type, "span")
        href = mark.attrs.get("href") if mark.type == "link" else None
        opening = f'<{tag} href="{html.escape(str(href), quote=True)}">' if href else f"<{tag}>"
        rendered = f"{opening}{rendered}</{tag}>"
    return rendered


# ---------------------------------------------------------------------------
# HTML parsing
# ---------------------------------------------------------------------------
_INLINE_TYPES = frozenset({"hard_break", "image"})


def from_html(markup: str, attributes: Sequence[GlobalAttributes] = ()) -> Node:
    """Parse an HTML fragment into a ``doc`` node.

    Blocks nested inside a paragraph or heading (an implicitly closed
    ``<p>`` for instance) are lifted out as siblings.
    """

    soup = BeautifulSoup(markup or "", "html.parser")
    return doc(*_wrap_inline(_convert_children(soup, attributes, ()), attributes))


def _convert_children(element: Tag, attributes: Sequence[GlobalAttributes], marks: tuple[Mark, ...]) -> list[Node]:
    items: list[Node] = []
    for child in element.children:
        if isinstance(child, Tag):
            items.extend(_convert_tag(child, attributes, marks))
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            if str(child):
                items.append(text(str(child), marks))
    return items


def _convert_tag(tag: Tag, attributes: Sequence[GlobalAttributes], marks: tuple[Mark, ...]) -> list[Node]:
    name = tag.name
    if name in _TAG_MARKS:
        href = tag.get("href") if name == "a" else None
        mark = Mark(_TAG_MARKS[name], {"href": str(href)} if href else {})
        return _convert_children(tag, attributes, (*marks, mark))
    element_attrs = _element_attrs(tag)
    if name == "pre":
        body = tag.get_text()
        node_attrs = _parse_node_attrs(attributes, "code_block", element_attrs)
        return [Node("code_block", attrs=node_attrs, content=(text(body),) if body else ())]
    type_name = "heading" if name in _HEADING_TAGS else _TAG_TYPES.get(name)
    if type_name is None:
        LOGGER.debug("Unwrapping unsupported tag <%s>", name)
        return _convert_children(tag, attributes, marks)
    node_attrs = _parse_node_attrs(attributes, type_name, element_attrs)
    if type_name == "heading":
        node_attrs["level"] = _HEADING_TAGS[name]
    if type_name == "image" and element_attrs.get("src"):
        node_attrs["src"] = element_attrs["src"]
    if type_name in LEAF_TYPES:
        return [Node(type_name, attrs=node_attrs)]
    children = _convert_children(tag, attributes, ())
    if type_name in _TEXTBLOCK_TYPES:
        return _split_textblock(type_name, node_attrs, children)
    return [Node(type_name, attrs=node_attrs, content=tuple(_wrap_inline(children, attributes)))]


def _element_attrs(tag: Tag) -> Dict[str, str]:
    # Multi-valued attributes such as ``class`` come back as lists.
    return {
        name: value if isinstance(value, str) else " ".join(value)
        for name, value in tag.attrs.items()
    }


def _is_inline(item: Node) -> bool:
    return item.is_text or item.type in _INLINE_TYPES


def _inline_run(items: Iterable[Node]) -> list[Node]:
    run: list[Node] = []
    for item in items:
        if item.is_text:
            _append_text(run, item.text or "", item.marks)
        else:
            run.append(item)
    return run


def _has_content(run: Sequence[Node]) -> bool:
    return any(not item.is_text or (item.text or "").strip() for item in run)


def _split_textblock(type_name: str, node_attrs: Dict[str, Any], items: Sequence[Node]) -> list[Node]:
    blocks: list[Node] = []
    run: list[Node] = []
    for item in items:
        if _is_inline(item):
            run.append(item)
            continue
        if _has_content(run):
            blocks.append(Node(type_name, attrs=node_attrs, content=tuple(_inline_run(run))))
        run = []
        blocks.append(item)
    if _has_content(run) or not blocks:
        blocks.append(Node(type_name, attrs=node_attrs, content=tuple(_inline_run(run))))
    return blocks


def _wrap_inline(items: Sequence[Node], attributes: Sequence[GlobalAttributes]) -> list[Node]:
    """Wrap loose inline content of a container in paragraphs; whitespace-only runs are dropped."""

    blocks: list[Node] = []
    run: list[Node] = []

    def _flush() -> None:
        if _has_content(run):
            paragraph_attrs = _parse_node_attrs(attributes, "paragraph", {})
            blocks.append(Node("paragraph", attrs=paragraph_attrs, content=tuple(_inline_run(run))))
        run.clear()

    for item in items:
        if _is_inline(item):
            run.append(item)
            continue
        _flush()
        blocks.append(item)
    _flush()
    return blocks


def _parse_node_attrs(
    attributes: Sequence[GlobalAttributes],
    type_name: str,
    element_attrs: Mapping[str, str],
) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for group in attributes:
        if not group.applies_to(type_name):
            continue
        for name, spec in group.attributes.items():
            parsed[name] = spec.parse(element_attrs)
    return parsed


# ---------------------------------------------------------------------------
# Markdown parsing
# ---------------------------------------------------------------------------
class _Frame:
    __slots__ = ("type", "attrs", "children")

    def __init__(self, type_name: str, attrs: Dict[str, Any]) -> None:
        self.type = type_name
        self.attrs = attrs
        self.children: list[Node] = []


_MD_BLOCKS: Mapping[str, str] = {
    "paragraph_open": "paragraph",
    "heading_open": "heading",
    "blockquote_open": "blockquote",
    "bullet_list_open": "bullet_list",
    "ordered_list_open": "ordered_list",
    "list_item_open": "list_item",
}
_MD_INLINE_MARKS: Mapping[str, str] = {"strong_open": "bold", "em_open": "italic", "link_open": "link"}


def from_markdown(source: str, attributes: Sequence[GlobalAttributes] = ()) -> Node:
    """Parse CommonMark ``source`` into a ``doc`` node using ``markdown-it-py``.

    Raw HTML blocks are parsed with :func:`from_html`, so ``dir`` attributes
    written inline in Markdown are honoured.
    """

    tokens = MarkdownIt("commonmark").parse(source or "")
    stack: list[_Frame] = [_Frame("doc", {})]
    for token in tokens:
        if token.type in _MD_BLOCKS:
            type_name = _MD_BLOCKS[token.type]
            node_attrs = _parse_node_attrs(attributes, type_name, {})
            if type_name == "heading":
                node_attrs["level"] = _HEADING_TAGS.get(token.tag, 1)
            stack.append(_Frame(type_name, node_attrs))
        elif token.type.endswith("_close") and token.type.replace("_close", "_open") in _MD_BLOCKS:
            frame = stack.pop()
            stack[-1].children.append(Node(frame.type, attrs=frame.attrs, content=tuple(frame.children)))
        elif token.type == "inline":
            stack[-1].children.extend(_inline_nodes(token.children or ()))
        elif token.type in {"fence", "code_block"}:
            node_attrs = _parse_node_attrs(attributes, "code_block", {})
            body = token.content.rstrip("\n")
            content = (text(body),) if body else ()
            stack[-1].children.append(Node("code_block", attrs=node_attrs, content=content))
        elif token.type == "hr":
            stack[-1].children.append(Node("horizontal_rule"))
        elif token.type == "html_block":
            stack[-1].children.extend(from_html(token.content, attributes).content)
    return doc(*stack[0].children)


def _inline_nodes(tokens: Iterable[Any]) -> list[Node]:
    nodes: list[Node] = []
    marks: list[Mark] = []
    for token in tokens:
        if token.type in _MD_INLINE_MARKS:
            mark_attrs = {"href": token.attrGet("href")} if token.type == "link_open" else {}
            marks.append(Mark(_MD_INLINE_MARKS[token.type], mark_attrs))
        elif token.type in {"strong_close", "em_close", "link_close"} and marks:
            marks.pop()
        elif token.type == "text" and token.content:
            _append_text(nodes, token.content, tuple(marks))
        elif token.type == "code_inline":
            _append_text(nodes, token.content, (*marks, Mark("code")))
        elif token.type == "softbreak":
            _append_text(nodes, " ", tuple(marks))
        elif token.type == "hardbreak":
            nodes.append(Node("hard_break"))
    return nodes


def _append_text(nodes: list[Node], value: str, marks: tuple[Mark, ...]) -> None:
    if nodes and nodes[-1].is_text and nodes[-1].marks == marks:
        nodes[-1] = text(f"{nodes[-1].text}{value}", marks)
        return
    nodes.append(text(value, marks))
