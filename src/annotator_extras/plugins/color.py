"""Highlight colour plugin.

Adds a colour field to the editor. The field shows a fixed strip of
swatches, one per configured colour; clicking a swatch makes it the
single active one and copies its colour into the (hidden) input. Saved
colours are painted onto the annotation's highlight elements whenever
annotations are created, updated or loaded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from annotator_extras.config import DEFAULT_COLOR_OPTIONS, Settings, get_settings
from annotator_extras.events import AnnotationEvent
from annotator_extras.models import Annotation, FieldDescriptor
from annotator_extras.plugins.base import Plugin
from annotator_extras.slug import slugify

if TYPE_CHECKING:
    from annotator_extras.dom import Element, InputControl
    from annotator_extras.events import Handler
    from annotator_extras.host import Annotator

logger = logging.getLogger(__name__)

SWATCH_STRIP_CLASS = "annotator-color-swatches"
SWATCH_CLASS = "annotator-color-swatch"
ACTIVE_CLASS = "active"
VIEWER_CLASS = "annotator-color"
BACKGROUND = "background"


def swatch_class(color: str) -> str:
    """CSS class that identifies the swatch for ``color``."""
    return f"{SWATCH_CLASS}-{slugify(color)}"


class ColorOptions(BaseModel):
    """Options recognised by ``ColorPlugin``."""

    default_color: str = DEFAULT_COLOR_OPTIONS[0]
    color_options: list[str] = Field(default_factory=lambda: list(DEFAULT_COLOR_OPTIONS))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ColorOptions:
        cfg = (settings or get_settings()).color
        return cls(default_color=cfg.default_color, color_options=list(cfg.color_options))


class ColorPlugin(Plugin):
    """Lets the author pick a highlight colour from a fixed palette."""

    def __init__(self, options: ColorOptions | None = None) -> None:
        self.options = options or ColorOptions.from_settings()
        self.field: Element | None = None
        self.input: InputControl | None = None
        self._strip: Element | None = None
        super().__init__()

    def event_handlers(self) -> dict[AnnotationEvent, Handler]:
        return {
            AnnotationEvent.ANNOTATIONS_LOADED: self.on_annotations_loaded,
            AnnotationEvent.ANNOTATION_CREATED: self.apply_highlight,
            AnnotationEvent.ANNOTATION_UPDATED: self.apply_highlight,
        }

    def setup(self, host: Annotator) -> None:
        self.field = host.editor.add_field(
            FieldDescriptor(
                label=host.translate("Choose a color…"),
                load=self.load_into_editor,
                submit=self.submit_from_editor,
            )
        )
        host.viewer.add_field(FieldDescriptor(load=self.load_into_viewer))
        self.input = self.field.control
        self._strip = None

    # -- editor -------------------------------------------------------------

    def load_into_editor(self, field: Element, annotation: Annotation) -> None:
        color = annotation.color or self.options.default_color
        if self._strip is None:
            self._strip = self._build_swatches(field)
        self.mark_active_swatch(color)
        if self.input is not None:
            self.input.value = color
            self.input.input_type = "hidden"

    def _build_swatches(self, field: Element) -> Element:
        strip = field.append("div")
        strip.add_class(SWATCH_STRIP_CLASS)
        for color in self.options.color_options:
            swatch = strip.append("span")
            swatch.add_class(SWATCH_CLASS, swatch_class(color))
            swatch.set_style(BACKGROUND, color)
            swatch.set_data("color", color)
            swatch.on_click(self.on_swatch_clicked)
        logger.debug("Built %d colour swatches", len(self.options.color_options))
        return strip

    def submit_from_editor(self, field: Element, annotation: Annotation) -> None:
        if self.input is not None:
            annotation.color = self.input.value

    def on_swatch_clicked(self, swatch: Element) -> None:
        color = swatch.get_data("color")
        if color is None:
            return
        self.mark_active_swatch(color)
        if self.input is not None:
            self.input.value = color

    def mark_active_swatch(self, color: str) -> None:
        """Make the swatch(es) for ``color`` the only active ones.

        A colour outside the palette leaves no swatch active.
        """
        if self._strip is None:
            return
        for swatch in self._strip.find(SWATCH_CLASS):
            swatch.remove_class(ACTIVE_CLASS)
        for swatch in self._strip.find(swatch_class(color)):
            swatch.add_class(ACTIVE_CLASS)

    @property
    def swatches(self) -> list[Element]:
        return [] if self._strip is None else self._strip.find(SWATCH_CLASS)

    # -- viewer -------------------------------------------------------------

    def load_into_viewer(self, field: Element, annotation: Annotation) -> None:
        field.add_class(VIEWER_CLASS)

    # -- highlights ---------------------------------------------------------

    def apply_highlight(self, annotation: Annotation) -> None:
        """Paint the annotation's colour onto each of its highlights."""
        if not annotation.color:
            return
        for highlight in annotation.highlights:
            highlight.set_style(BACKGROUND, annotation.color)

    def on_annotations_loaded(self, annotations: list[Annotation]) -> None:
        for annotation in annotations:
            self.apply_highlight(annotation)
