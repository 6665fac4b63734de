"""Colour-to-identifier slugs for CSS class tokens."""

from __future__ import annotations

import re

_NON_WORD_RUN = re.compile(r"\W+", re.ASCII)


def slugify(color: str) -> str:
    """Strip every run of non-word characters from a colour expression.

    ``"#FF0000"`` becomes ``"FF0000"`` and ``"rgb(1, 2, 3)"`` becomes
    ``"rgb123"``. Two colours that differ only in punctuation map to the
    same slug; callers that need uniqueness must not rely on this.
    """
    return _NON_WORD_RUN.sub("", color)
