"""Exception hierarchy for annotator_extras.

Only the tag endpoint client raises these. The tag plugin catches them at
the refresh boundary, logs them, and keeps its cached tag list.
"""

from __future__ import annotations


class AnnotatorExtrasError(Exception):
    """Base class for errors raised by annotator_extras."""


class TagFetchError(AnnotatorExtrasError):
    """The tag endpoint could not be reached or answered with a failure status."""

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"GET {url} failed: {reason}")


class TagResponseError(AnnotatorExtrasError):
    """The tag endpoint answered with a payload of an unexpected shape."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Unexpected tag payload from {url}: {detail}")
