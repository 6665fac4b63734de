"""Shared fixtures for unit tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from annotator_extras.dom import Node
from annotator_extras.filtering import FilterPanel
from annotator_extras.host import Annotator
from annotator_extras.models import Annotation


class FakeTagSource:
    """TagSource double that replays queued payloads or errors.

    Each queued item is either a payload, an exception to raise, or an
    ``asyncio.Event`` paired with a payload (``(event, payload)``) that
    blocks the fetch until the event is set.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.urls: list[str] = []

    async def fetch_tags(self, url: str) -> Any:
        self.urls.append(url)
        item = self.responses.pop(0) if self.responses else {"ok": False}
        if isinstance(item, tuple):
            gate, item = item
            await gate.wait()
        if isinstance(item, BaseException):
            raise item
        return item


def tag_payload(**tags: str) -> dict[str, Any]:
    """Build an ``ok`` tag list payload from ``id=name`` pairs."""
    return {"ok": True, "tags": [{"_id": k, "name": v} for k, v in tags.items()]}


@pytest.fixture
def annotator() -> Annotator:
    return Annotator.headless(filters=FilterPanel())


@pytest.fixture
def highlights() -> list[Node]:
    return [Node("span", "first"), Node("span", "second")]


@pytest.fixture
def annotation(highlights: list[Node]) -> Annotation:
    return Annotation(quote="first second", highlights=highlights)


@pytest.fixture
def gate() -> asyncio.Event:
    return asyncio.Event()
