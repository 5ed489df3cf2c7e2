"""Headless editor host: document tree, steps, transactions and state."""

from .document_model import Mark, Node, doc, node, text
from .editor import Editor
from .state import EditorState

__all__ = ["Editor", "EditorState", "Mark", "Node", "doc", "node", "text"]
