"""Opt-in telemetry for direction reconciliation and commands."""

from __future__ import annotations

import json
import os
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

__all__ = ["TelemetryClient", "TelemetryEvent", "telemetry_enabled"]

_DEFAULT_TELEMETRY_DIR = Path.home() / ".textdirection" / "telemetry"
_TELEMETRY_FILE = "direction-events.jsonl"
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class TelemetryEvent:
    """One recorded event, e.g. ``text_direction.reconciled``."""

    name: str
    properties: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_line(self, session_id: str) -> str:
        return json.dumps(
            {
                "session_id": session_id,
                "name": self.name,
                "timestamp": self.timestamp.isoformat(),
                "properties": self.properties,
            },
            ensure_ascii=False,
            default=str,
        )


@dataclass(slots=True)
class TelemetryClient:
    """Buffers events and appends them as JSONL once ``max_buffer`` is reached.

    Disabled clients drop events but still keep per-name counters, which is
    what tests and the benchmark read through :meth:`counts`.
    """

    enabled: bool = False
    storage_dir: Path | str | None = None
    max_buffer: int = 64
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    _buffer: list[TelemetryEvent] = field(default_factory=list, init=False, repr=False)
    _counts: Counter[str] = field(default_factory=Counter, init=False, repr=False)

    def track_event(self, name: str, **props: Any) -> None:
        self._counts[name] += 1
        if not self.enabled:
            return
        self._buffer.append(TelemetryEvent(name=name, properties=dict(props)))
        if len(self._buffer) >= self.max_buffer:
            self.flush()

    def flush(self) -> Path | None:
        """Append buffered events to the telemetry file and clear the buffer."""

        if not self.enabled or not self._buffer:
            return None
        target_dir = Path(self.storage_dir or os.environ.get("TEXTDIRECTION_TELEMETRY_DIR") or _DEFAULT_TELEMETRY_DIR)
        target_dir = target_dir.expanduser()
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / _TELEMETRY_FILE
        with log_path.open("a", encoding="utf-8") as handle:
            handle.writelines(f"{event.to_line(self.session_id)}\n" for event in self._buffer)
        self._buffer.clear()
        return log_path

    def pending_events(self) -> int:
        return len(self._buffer)

    def counts(self) -> Dict[str, int]:
        return dict(self._counts)


def telemetry_enabled() -> bool:
    """Return ``True`` when ``TEXTDIRECTION_TELEMETRY`` opts in."""

    value = os.environ.get("TEXTDIRECTION_TELEMETRY")
    return value is not None and value.strip().lower() in _TRUE_VALUES
