"""Script-based writing direction detection."""

from __future__ import annotations

import re
from typing import Literal

__all__ = [
    "AUTO",
    "DIRECTIONS",
    "Direction",
    "LTR",
    "RTL",
    "get_text_direction",
    "is_direction",
]

LTR = "ltr"
RTL = "rtl"
AUTO = "auto"
DIRECTIONS: tuple[str, ...] = (LTR, RTL, AUTO)
Direction = Literal["ltr", "rtl", "auto"]

_RTL_CHAR_RANGE = "\u0591-\u07FF\uFB1D-\uFDFD\uFE70-\uFEFC"
_LTR_CHAR_RANGE = (
    "A-Za-z\u00C0-\u00D6\u00D8-\u00F6"
    "\u00F8-\u02B8\u0300-\u0590\u0800-\u1FFF\u200E\u2C00-\uFB1C"
    "\uFE00-\uFE6F\uFEFD-\uFFFF"
)
# The two classes are disjoint, so the first match decides the direction.
_STRONG_CHAR_PATTERN = re.compile(f"(?P<rtl>[{_RTL_CHAR_RANGE}])|(?P<ltr>[{_LTR_CHAR_RANGE}])")


def get_text_direction(text: str) -> Literal["ltr", "rtl"] | None:
    """Return the direction of the first strongly directional character in ``text``.

    Digits, punctuation, whitespace and symbols are neutral and skipped.
    ``None`` means no strong character was found, including for ``""``.
    """

    if not text:
        return None
    match = _STRONG_CHAR_PATTERN.search(text)
    if match is None:
        return None
    return RTL if match.lastgroup == "rtl" else LTR


def is_direction(value: object) -> bool:
    """Return ``True`` when ``value`` names a known direction."""

    return isinstance(value, str) and value in DIRECTIONS
