"""Conversion between the tag text field and an ordered list of tag ids.

Both functions are defaults for the tag plugin's ``parse_tags`` and
``stringify_tags`` options and can be replaced independently.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

DEFAULT_DELIMITER = ","
JOINER = ", "


def parse_tags(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split a delimited tag string into tag ids, preserving order.

    Leading and trailing whitespace of the whole string is ignored, and an
    empty (or all-whitespace) string yields no tags. Each delimiter swallows
    the whitespace that follows it.

    Examples:
        >>> parse_tags("a, b, c")
        ['a', 'b', 'c']
        >>> parse_tags("   ")
        []
    """
    text = text.strip()
    if not text:
        return []
    return re.split(re.escape(delimiter) + r"\s*", text)


def stringify_tags(tags: Sequence[str], joiner: str = JOINER) -> str:
    """Join tag ids with ``joiner`` (``", "`` by default)."""
    return joiner.join(tags)
