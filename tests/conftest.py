"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from textdirection.direction.extension import TextDirection
from textdirection.editor.document_model import Node, doc, node
from textdirection.editor.editor import Editor
from textdirection.services.settings import TextDirectionOptions
from textdirection.utils.telemetry import TelemetryClient


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in (
        "TEXTDIRECTION_TYPES",
        "TEXTDIRECTION_ALLOWED_DIRECTIONS",
        "TEXTDIRECTION_DEFAULT_DIRECTION",
        "TEXTDIRECTION_LOG_LEVEL",
        "TEXTDIRECTION_TELEMETRY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TEXTDIRECTION_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TEXTDIRECTION_TELEMETRY_DIR", str(tmp_path / "telemetry"))


@pytest.fixture
def options() -> TextDirectionOptions:
    return TextDirectionOptions(types=frozenset({"paragraph", "heading"}))


@pytest.fixture
def telemetry() -> TelemetryClient:
    return TelemetryClient(enabled=False)


@pytest.fixture
def make_editor(options: TextDirectionOptions, telemetry: TelemetryClient):
    """Return a factory building an editor with the direction extension installed."""

    def _factory(content: Node | None = None, **kwargs) -> Editor:
        extension = TextDirection(options, telemetry=telemetry)
        return Editor(content if content is not None else doc(node("paragraph")), extensions=[extension], **kwargs)

    return _factory
