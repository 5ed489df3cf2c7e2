"""Markup rules for the ``dir`` attribute."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping

if TYPE_CHECKING:
    from ..services.settings import TextDirectionOptions

__all__ = [
    "AttributeSpec",
    "DIR_ATTRIBUTE",
    "GlobalAttributes",
    "effective_direction",
    "global_attributes",
    "parse_direction",
    "render_direction",
]

LOGGER = logging.getLogger(__name__)
DIR_ATTRIBUTE = "dir"


def parse_direction(raw: Any, options: TextDirectionOptions) -> str | None:
    """Return the stored direction for a raw markup attribute value.

    Values outside ``options.allowed_directions`` (missing, empty, wrong case,
    unknown) fall back to ``options.default_direction``.
    """

    if options.allows(raw):
        return raw
    if raw not in (None, ""):
        LOGGER.debug("Ignoring unsupported dir attribute %r; using default %r", raw, options.default_direction)
    return options.default_direction


def render_direction(value: str | None, options: TextDirectionOptions) -> Dict[str, str]:
    """Return the markup attributes for ``value``; the default is elided."""

    if value is None or value == options.default_direction:
        return {}
    return {DIR_ATTRIBUTE: value}


def effective_direction(value: str | None, options: TextDirectionOptions) -> str | None:
    """Return the explicit value, or the configured default when absent."""

    return value if value is not None else options.default_direction


@dataclass(slots=True, frozen=True)
class AttributeSpec:
    """Default plus parse/render rules for one node attribute."""

    default: Any
    parse: Callable[[Mapping[str, str]], Any]
    render: Callable[[Mapping[str, Any]], Dict[str, str]]


@dataclass(slots=True, frozen=True)
class GlobalAttributes:
    """Attributes added to every node type listed in ``types``."""

    types: frozenset[str]
    attributes: Mapping[str, AttributeSpec]

    def applies_to(self, type_name: str) -> bool:
        return type_name in self.types


def global_attributes(options: TextDirectionOptions) -> GlobalAttributes:
    """Describe the ``dir`` attribute for every managed node type."""

    def _parse(element_attrs: Mapping[str, str]) -> str | None:
        return parse_direction(element_attrs.get(DIR_ATTRIBUTE), options)

    def _render(node_attrs: Mapping[str, Any]) -> Dict[str, str]:
        return render_direction(node_attrs.get(DIR_ATTRIBUTE), options)

    spec = AttributeSpec(default=None, parse=_parse, render=_render)
    return GlobalAttributes(types=options.types, attributes={DIR_ATTRIBUTE: spec})
