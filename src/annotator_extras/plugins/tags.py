"""Tag plugin.

Adds a tags field to the editor (free text, or a select fed from the
available-tags cache) and renders an annotation's tags in the viewer.
The cache is warmed from the remote tag endpoint a short delay after
every create, update or bulk load. Refreshes are best effort: each
trigger starts its own delayed fetch, overlapping fetches are not
coalesced, and the last response to arrive wins. A failed fetch leaves
the cache as it was.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict, Field

from annotator_extras.config import Settings, get_settings
from annotator_extras.dom import is_select
from annotator_extras.errors import AnnotatorExtrasError
from annotator_extras.events import AnnotationEvent
from annotator_extras.filtering import FilterSpec, tags_match
from annotator_extras.models import Annotation, FieldDescriptor, FieldType
from annotator_extras.plugins.base import Plugin
from annotator_extras.remote import AiohttpTagSource, TagSource, parse_tag_response
from annotator_extras.tagstring import parse_tags, stringify_tags

if TYPE_CHECKING:
    from annotator_extras.dom import Element, InputControl, SelectControl
    from annotator_extras.events import Handler
    from annotator_extras.host import Annotator, Editor

logger = logging.getLogger(__name__)

SELECT_CLASS = "annotator-tags-select"
VIEWER_CLASS = "annotator-tags"
TAG_CLASS = "annotator-tag"


class TagOptions(BaseModel):
    """Options recognised by ``TagsPlugin``.

    ``parse_tags``, ``stringify_tags`` and ``is_filtered`` are strategy
    functions and may be replaced independently of each other.
    ``parse_tags`` reads the free-text input only. A select control submits
    its selected option ids as they are, since each option already holds
    exactly one id.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    parse_tags: Callable[[str], list[str]] = parse_tags
    stringify_tags: Callable[[Sequence[str]], str] = stringify_tags
    is_filtered: Callable[[str, Sequence[str]], bool] = tags_match
    urls: dict[str, str] = Field(default_factory=lambda: {"read": "/tags"})
    prefix: str = ""
    available_tags: dict[str, str] = Field(default_factory=dict)
    input_type: FieldType = FieldType.TEXT
    multiple: bool = True
    refresh_delay: float = 0.5
    request_timeout: float = 10.0

    @property
    def read_url(self) -> str:
        return self.urls.get("read", "/tags")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TagOptions:
        cfg = (settings or get_settings()).tags
        return cls(
            parse_tags=functools.partial(parse_tags, delimiter=cfg.delimiter),
            stringify_tags=functools.partial(
                stringify_tags, joiner=f"{cfg.delimiter} "
            ),
            urls={"read": cfg.read_url},
            prefix=cfg.prefix,
            available_tags=dict(cfg.available_tags),
            input_type=FieldType(cfg.input_type),
            multiple=cfg.multiple,
            refresh_delay=cfg.refresh_delay,
            request_timeout=cfg.request_timeout,
        )


class TagsPlugin(Plugin):
    """Lets the author attach tags; keeps a cache of known tags."""

    def __init__(
        self,
        options: TagOptions | None = None,
        *,
        source: TagSource | None = None,
    ) -> None:
        self.options = options or TagOptions.from_settings()
        self._source = source or AiohttpTagSource(timeout=self.options.request_timeout)
        self._available_tags: dict[str, str] = dict(self.options.available_tags)
        self._previous_tags: list[str] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._torn_down = False
        self.field: Element | None = None
        self.input: InputControl | None = None
        super().__init__()

    def event_handlers(self) -> dict[AnnotationEvent, Handler]:
        return {
            AnnotationEvent.ANNOTATION_CREATED: self._on_annotation_saved,
            AnnotationEvent.ANNOTATION_UPDATED: self._on_annotation_saved,
            AnnotationEvent.ANNOTATIONS_LOADED: self._on_annotations_loaded,
        }

    def setup(self, host: Annotator) -> None:
        self.field = host.editor.add_field(
            FieldDescriptor(
                label=host.translate("Add some tags here…"),
                type=self.options.input_type,
                multiple=self.options.multiple,
                load=self.load_into_editor,
                submit=self.submit_from_editor,
            )
        )
        self.input = self.field.control
        if is_select(self.input):
            self.input.add_class(SELECT_CLASS)
        host.viewer.add_field(FieldDescriptor(load=self.load_into_viewer))
        if host.filters is not None:
            host.filters.add_filter(
                FilterSpec(
                    label=host.translate("Tag"),
                    property="tag_ids",
                    is_filtered=self.options.is_filtered,
                )
            )

    @property
    def available_tags(self) -> dict[str, str]:
        """Snapshot of the ``id -> display name`` cache."""
        return dict(self._available_tags)

    @property
    def previous_tags(self) -> list[str]:
        """Tags of the most recently submitted annotation."""
        return list(self._previous_tags)

    def register_available_tag(self, name: str) -> None:
        """Add a tag created inline by the author to the cache."""
        self._available_tags[name] = name

    # -- editor -------------------------------------------------------------

    def load_into_editor(self, field: Element, annotation: Annotation) -> None:
        tags = annotation.tag_ids or self._previous_tags
        if self.input is None:
            return
        if is_select(self.input):
            self._fill_select(self.input, tags)
        else:
            self.input.value = self.options.stringify_tags(tags)

    def _fill_select(self, select: SelectControl, tags: Sequence[str]) -> None:
        wanted = set(tags)
        select.clear_options()
        for tag_id, name in self._available_tags.items():
            select.add_option(tag_id, name, selected=tag_id in wanted)
        select.refresh()

    def submit_from_editor(self, field: Element, annotation: Annotation) -> None:
        if self.input is None:
            return
        if is_select(self.input):
            tags = list(self.input.selected_values)
        else:
            tags = self.options.parse_tags(self.input.value)
        annotation.tag_ids = tags
        self._previous_tags = list(tags)

    # -- viewer -------------------------------------------------------------

    def load_into_viewer(self, field: Element, annotation: Annotation) -> None:
        if not annotation.tag_ids:
            field.remove()
            return
        field.add_class(VIEWER_CLASS)
        for tag_id in annotation.tag_ids:
            tag = field.append("span", self._available_tags.get(tag_id, tag_id))
            tag.add_class(TAG_CLASS)

    # -- remote refresh -----------------------------------------------------

    def _on_annotation_saved(self, annotation: Annotation) -> None:
        self.schedule_refresh()

    def _on_annotations_loaded(self, annotations: list[Annotation]) -> None:
        self.schedule_refresh()

    @property
    def pending_refreshes(self) -> list[asyncio.Task[None]]:
        return list(self._tasks)

    def schedule_refresh(self) -> asyncio.Task[None] | None:
        """Start a delayed refresh of the available-tags cache.

        Each call starts an independent task; nothing is cancelled or
        coalesced. Returns None when called outside a running event loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; tag refresh skipped")
            return None
        task = loop.create_task(self._refresh_after_delay())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Tag refresh scheduled in %.3fs", self.options.refresh_delay)
        return task

    async def wait_for_refreshes(self) -> None:
        """Wait until every refresh scheduled so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _refresh_after_delay(self) -> None:
        await asyncio.sleep(self.options.refresh_delay)
        await self.refresh_now()

    async def refresh_now(self) -> bool:
        """Fetch the tag list and replace the cache.

        Returns:
            True if the cache was replaced. Failures are logged and leave
            the cache untouched.
        """
        url = f"{self.options.prefix}{self.options.read_url}"
        try:
            payload = await self._source.fetch_tags(url)
            tags = parse_tag_response(url, payload)
        except AnnotatorExtrasError as exc:
            logger.warning("Tag refresh failed: %s", exc)
            return False
        except Exception:
            logger.exception("Tag source raised unexpectedly; cache kept")
            return False
        if tags is None:
            logger.debug("Tag endpoint returned no tags; cache kept")
            return False
        if self._torn_down:
            logger.debug("Tag refresh finished after teardown; result dropped")
            return False
        self._available_tags = tags
        logger.debug("Tag cache refreshed with %d tag(s)", len(tags))
        return True

    def destroy(self) -> None:
        self._torn_down = True
        super().destroy()


class TagCreationBridge(Protocol):
    """Seam for an enhancement overlay that lets authors type new tags."""

    def add_new_tag(self, name: str) -> None: ...


class SelectTagBridge:
    """Adds a new tag straight to the open editor's tag select.

    Works on the editor, not on a plugin instance: the new option is
    appended, selected, and the overlay is told to refresh. Nothing
    happens if the editor is closed or has no tag select.
    """

    def __init__(self, editor: Editor) -> None:
        self._editor = editor

    def add_new_tag(self, name: str) -> None:
        select = self._editor.visible_control(SELECT_CLASS)
        if select is None or not is_select(select):
            logger.debug("No open tag select; %r not added", name)
            return
        select.add_option(name, name, selected=True)
        select.refresh()
