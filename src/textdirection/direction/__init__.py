"""Direction reconciliation, override commands and the editor extension."""

from .changes import combine_transaction_steps, find_children_in_range, get_changed_ranges
from .commands import set_text_direction, unset_text_direction
from .extension import TextDirection
from .reconcile import TextDirectionPlugin, reconcile_text_direction

__all__ = [
    "TextDirection",
    "TextDirectionPlugin",
    "combine_transaction_steps",
    "find_children_in_range",
    "get_changed_ranges",
    "reconcile_text_direction",
    "set_text_direction",
    "unset_text_direction",
]
