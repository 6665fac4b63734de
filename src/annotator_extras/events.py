"""Annotation lifecycle events and a synchronous event bus."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

type Handler = Callable[..., None]


class AnnotationEvent(StrEnum):
    """Names of the events the host engine publishes."""

    ANNOTATIONS_LOADED = "annotationsLoaded"
    ANNOTATION_CREATED = "annotationCreated"
    ANNOTATION_UPDATED = "annotationUpdated"
    ANNOTATION_DELETED = "annotationDeleted"
    EDITOR_SHOWN = "annotationEditorShown"
    VIEWER_SHOWN = "annotationViewerShown"


class EventBus:
    """Dispatches events synchronously to subscribers in subscription order.

    Handlers run on the caller's stack. A handler that raises stops the
    dispatch and the exception reaches the publisher.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[AnnotationEvent, list[Handler]] = defaultdict(
            list
        )

    def subscribe(self, event: AnnotationEvent, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def unsubscribe(self, event: AnnotationEvent, handler: Handler) -> None:
        """Remove ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: AnnotationEvent) -> list[Handler]:
        return list(self._handlers.get(event, []))

    def publish(self, event: AnnotationEvent, *args: Any) -> None:
        handlers = self.handlers(event)
        logger.debug("Publishing %s to %d handler(s)", event, len(handlers))
        for handler in handlers:
            handler(*args)
