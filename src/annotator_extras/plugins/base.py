"""Shared plugin lifecycle: capability guard and event table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from annotator_extras.events import AnnotationEvent, Handler
    from annotator_extras.host import Annotator

logger = logging.getLogger(__name__)


class Plugin:
    """Base class for annotator plugins.

    Subclasses list the events they react to in ``event_handlers()`` and
    register their fields in ``setup()``. The event table is built once,
    at construction, and subscribed when the plugin is initialised against
    a host that reports itself supported.
    """

    def __init__(self) -> None:
        self.host: Annotator | None = None
        self.handlers: dict[AnnotationEvent, Handler] = self.event_handlers()

    def event_handlers(self) -> dict[AnnotationEvent, Handler]:
        return {}

    def setup(self, host: Annotator) -> None:
        """Register this plugin's fields on ``host``.

        Template hook called once by ``initialize()``; every concrete plugin
        overrides it.
        """
        raise NotImplementedError

    def initialize(self, host: Annotator) -> bool:
        """Register fields and subscribe events on ``host``.

        Returns:
            False when the host reports the environment unsupported; the
            plugin then stays inert.

        Raises:
            ValueError: If the plugin is already attached to a host.
        """
        if self.host is not None:
            msg = f"{type(self).__name__} is already initialised"
            raise ValueError(msg)
        if not host.supported():
            logger.info("%s inactive: environment not supported", type(self).__name__)
            return False
        self.host = host
        self.setup(host)
        for event, handler in self.handlers.items():
            host.events.subscribe(event, handler)
        logger.debug("%s initialised", type(self).__name__)
        return True

    def destroy(self) -> None:
        """Unsubscribe from the host's events. Registered fields stay put."""
        if self.host is None:
            return
        for event, handler in self.handlers.items():
            self.host.events.unsubscribe(event, handler)
        self.host = None
