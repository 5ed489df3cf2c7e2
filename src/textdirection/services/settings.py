"""Text direction options and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import jsonschema

from ..core.direction import DIRECTIONS, is_direction

__all__ = [
    "OptionsError",
    "OptionsStore",
    "TextDirectionOptions",
    "OPTIONS_SCHEMA",
    "validate_options_payload",
]

LOGGER = logging.getLogger(__name__)
_DEFAULT_OPTIONS_PATH = Path.home() / ".textdirection" / "options.json"
_OPTIONS_VERSION = 1
_TYPES_ENV = "TEXTDIRECTION_TYPES"
_ALLOWED_ENV = "TEXTDIRECTION_ALLOWED_DIRECTIONS"
_DEFAULT_DIRECTION_ENV = "TEXTDIRECTION_DEFAULT_DIRECTION"
_NONE_VALUES = {"", "none", "null"}

OPTIONS_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "types": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "allowed_directions": {
            "type": "array",
            "items": {"enum": list(DIRECTIONS)},
            "minItems": 1,
        },
        "default_direction": {"enum": [*DIRECTIONS, None]},
    },
}


class OptionsError(ValueError):
    """Raised when a text direction configuration is inconsistent."""

    def __init__(self, message: str, *, reason: str = "invalid_options", value: Any = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "value": self.value}


@dataclass(slots=True, frozen=True)
class TextDirectionOptions:
    """Immutable configuration bound to one text direction extension.

    ``types`` names the node types whose ``dir`` attribute is managed; it is
    empty by default, which leaves the feature inert. ``allowed_directions``
    defaults to the permissive ``("ltr", "rtl", "auto")`` set and
    ``default_direction`` to ``None`` (no attribute implied).
    """

    types: frozenset[str] = field(default_factory=frozenset)
    allowed_directions: tuple[str, ...] = DIRECTIONS
    default_direction: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.types, str):
            raise OptionsError("Options types must be a collection of names", reason="invalid_types", value=self.types)
        object.__setattr__(self, "types", frozenset(self.types))
        allowed = _dedupe(self.allowed_directions)
        unknown = [value for value in allowed if not is_direction(value)]
        if unknown:
            raise OptionsError(
                f"Unknown direction(s) in allowed_directions: {', '.join(map(str, unknown))}",
                reason="unknown_direction",
                value=unknown,
            )
        if not allowed:
            raise OptionsError("allowed_directions may not be empty", reason="empty_allowed_directions")
        object.__setattr__(self, "allowed_directions", allowed)
        if self.default_direction is not None and self.default_direction not in allowed:
            raise OptionsError(
                f"default_direction {self.default_direction!r} is not an allowed direction",
                reason="default_not_allowed",
                value=self.default_direction,
            )

    def manages(self, type_name: str) -> bool:
        """Return ``True`` if nodes of ``type_name`` carry a managed ``dir``."""

        return type_name in self.types

    def allows(self, direction: Any) -> bool:
        return isinstance(direction, str) and direction in self.allowed_directions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": sorted(self.types),
            "allowed_directions": list(self.allowed_directions),
            "default_direction": self.default_direction,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> TextDirectionOptions:
        """Build options from a plain mapping, ignoring unknown keys."""

        if not data:
            return cls()
        kwargs: Dict[str, Any] = {}
        if data.get("types") is not None:
            kwargs["types"] = frozenset(data["types"])
        if data.get("allowed_directions") is not None:
            kwargs["allowed_directions"] = tuple(data["allowed_directions"])
        if "default_direction" in data:
            kwargs["default_direction"] = data["default_direction"]
        return cls(**kwargs)


class OptionsStore:
    """Persistence adapter for :class:`TextDirectionOptions`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_OPTIONS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> TextDirectionOptions:
        """Load options from disk, applying explicit and environment overrides."""

        payload = self._read_payload()
        data: Dict[str, Any] = {}
        if payload:
            errors = validate_options_payload(payload)
            if errors:
                LOGGER.warning("Options file %s is invalid (%s); using defaults", self._path, "; ".join(errors))
            else:
                data.update(payload)
        if overrides:
            data.update(overrides)
        data.update(_env_overrides())
        try:
            options = TextDirectionOptions.from_mapping(data)
        except OptionsError as exc:
            LOGGER.warning("Text direction options rejected (%s): %s", exc.reason, exc)
            options = TextDirectionOptions()
        LOGGER.debug("Text direction options loaded from %s: %s", self._path, options.to_dict())
        return options

    def save(self, options: TextDirectionOptions) -> Path:
        """Persist options to disk with atomic file writes."""

        payload = options.to_dict()
        payload["version"] = _OPTIONS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Text direction options saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Options file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Options file %s must contain a JSON object", self._path)
            return {}
        payload.pop("version", None)
        return payload


def validate_options_payload(payload: Mapping[str, Any]) -> list[str]:
    """Return human readable schema violations for an options payload."""

    validator = jsonschema.Draft202012Validator(OPTIONS_SCHEMA)
    messages: list[str] = []
    for issue in validator.iter_errors(dict(payload)):
        path = ".".join(str(part) for part in issue.absolute_path)
        messages.append(f"{path}: {issue.message}" if path else issue.message)
    return messages


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    types = os.environ.get(_TYPES_ENV)
    if types is not None:
        overrides["types"] = _split_list(types)
    allowed = os.environ.get(_ALLOWED_ENV)
    if allowed is not None:
        overrides["allowed_directions"] = _split_list(allowed)
    default = os.environ.get(_DEFAULT_DIRECTION_ENV)
    if default is not None:
        cleaned = default.strip().lower()
        overrides["default_direction"] = None if cleaned in _NONE_VALUES else cleaned
    return overrides


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _dedupe(values: Iterable[Any]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)
