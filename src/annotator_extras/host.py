"""Host engine with editor and viewer surfaces.

The ``Annotator`` owns annotation records and publishes lifecycle events;
the ``Editor`` and ``Viewer`` own field elements and drive the plugins'
``load``/``submit`` hooks. Elements come from a ``Surface``: the headless
``NodeSurface`` here or the NiceGUI one in ``annotator_extras.ui``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol

from annotator_extras.dom import InputNode, Node, SelectNode
from annotator_extras.events import AnnotationEvent, EventBus
from annotator_extras.i18n import Translator, identity
from annotator_extras.models import Annotation, FieldDescriptor, FieldType

if TYPE_CHECKING:
    from annotator_extras.dom import Element, FieldElement, InputControl
    from annotator_extras.filtering import FilterRegistry
    from annotator_extras.plugins.base import Plugin

logger = logging.getLogger(__name__)

FIELD_CLASS = "annotator-item"
EDITOR_CLASS = "annotator-editor"
VIEWER_CLASS = "annotator-viewer"
VIEWER_ITEM_CLASS = "annotator-annotation"

type CapabilityCheck = Callable[[], bool]


def always_supported() -> bool:
    return True


class Surface(Protocol):
    """Creates the elements an editor or viewer is built from."""

    @property
    def root(self) -> Element: ...

    def create_container(self, css_class: str, parent: Element | None = None) -> Element:
        ...

    def create_field(
        self,
        descriptor: FieldDescriptor,
        parent: Element | None = None,
        *,
        with_control: bool = True,
    ) -> FieldElement:
        """Append a field element, with an input control when requested."""
        ...


class NodeSurface:
    """Surface backed by the in-memory ``Node`` tree."""

    def __init__(self, root: Node | None = None) -> None:
        self._root = root if root is not None else Node("div")

    @property
    def root(self) -> Node:
        return self._root

    def create_container(self, css_class: str, parent: Node | None = None) -> Node:
        container = (parent or self._root).append("ul")
        container.add_class(css_class)
        return container

    def create_field(
        self,
        descriptor: FieldDescriptor,
        parent: Node | None = None,
        *,
        with_control: bool = True,
    ) -> Node:
        field = (parent or self._root).append("li")
        field.add_class(FIELD_CLASS)
        if not with_control:
            return field
        control: InputNode | SelectNode
        if descriptor.type is FieldType.SELECT:
            control = SelectNode(multiple=descriptor.multiple)
        else:
            control = InputNode()
        control.set_data("placeholder", descriptor.label)
        field.adopt(control)
        field.control = control
        return field


class Editor:
    """Authoring surface: one field per registered descriptor."""

    def __init__(self, surface: Surface) -> None:
        self.surface = surface
        self.element = surface.create_container(EDITOR_CLASS)
        self.fields: list[tuple[FieldDescriptor, FieldElement]] = []
        self.annotation: Annotation | None = None

    @property
    def is_open(self) -> bool:
        return self.annotation is not None

    def add_field(self, descriptor: FieldDescriptor) -> FieldElement:
        field = self.surface.create_field(descriptor, self.element)
        self.fields.append((descriptor, field))
        logger.debug("Editor field registered (%s)", descriptor.label or descriptor.type)
        return field

    def load(self, annotation: Annotation) -> None:
        """Open the editor on ``annotation`` and run every ``load`` hook."""
        self.annotation = annotation
        for descriptor, field in self.fields:
            if descriptor.load is not None:
                descriptor.load(field, annotation)

    def submit(self) -> Annotation:
        """Run every ``submit`` hook and close the editor.

        Raises:
            RuntimeError: If the editor is not open.
        """
        if self.annotation is None:
            msg = "Editor.submit() called with no annotation loaded"
            raise RuntimeError(msg)
        annotation = self.annotation
        for descriptor, field in self.fields:
            if descriptor.submit is not None:
                descriptor.submit(field, annotation)
        self.annotation = None
        return annotation

    def cancel(self) -> None:
        self.annotation = None

    def visible_control(self, css_class: str) -> InputControl | None:
        """Return the open editor's control carrying ``css_class``, if any."""
        if not self.is_open:
            return None
        for _descriptor, field in self.fields:
            control = field.control
            if control is not None and control.has_class(css_class):
                return control
        return None


class Viewer:
    """Display surface: one item per shown annotation, fresh fields per item."""

    def __init__(self, surface: Surface) -> None:
        self.surface = surface
        self.element = surface.create_container(VIEWER_CLASS)
        self._templates = surface.create_container(f"{VIEWER_CLASS}-templates")
        self.descriptors: list[FieldDescriptor] = []
        self.items: list[tuple[Annotation, Element]] = []

    def add_field(self, descriptor: FieldDescriptor) -> FieldElement:
        """Register a display field and return its template element."""
        self.descriptors.append(descriptor)
        return self.surface.create_field(descriptor, self._templates, with_control=False)

    def load(self, annotations: Iterable[Annotation]) -> None:
        self.element.clear()
        self.items = []
        for annotation in annotations:
            item = self.element.append("li")
            item.add_class(VIEWER_ITEM_CLASS)
            for descriptor in self.descriptors:
                field = self.surface.create_field(descriptor, item, with_control=False)
                if descriptor.load is not None:
                    descriptor.load(field, annotation)
            self.items.append((annotation, item))


class Annotator:
    """In-process host engine.

    Keeps the current annotations in memory and publishes lifecycle events
    on ``events``. Persistence belongs to whoever calls it.
    """

    def __init__(
        self,
        editor: Editor,
        viewer: Viewer,
        *,
        capability_check: CapabilityCheck | None = None,
        filters: FilterRegistry | None = None,
        translate: Translator = identity,
    ) -> None:
        self.editor = editor
        self.viewer = viewer
        self.events = EventBus()
        self.filters = filters
        self.translate = translate
        self.annotations: list[Annotation] = []
        self.plugins: list[Plugin] = []
        self._capability_check = capability_check or always_supported

    @classmethod
    def headless(
        cls,
        *,
        capability_check: CapabilityCheck | None = None,
        filters: FilterRegistry | None = None,
        translate: Translator = identity,
    ) -> Annotator:
        """Build an annotator whose editor and viewer render to ``Node`` trees."""
        return cls(
            Editor(NodeSurface()),
            Viewer(NodeSurface()),
            capability_check=capability_check,
            filters=filters,
            translate=translate,
        )

    def supported(self) -> bool:
        """Whether the current environment can run annotation plugins."""
        return self._capability_check()

    def add_plugin(self, plugin: Plugin) -> Plugin:
        if plugin in self.plugins:
            msg = f"{type(plugin).__name__} is already registered"
            raise ValueError(msg)
        self.plugins.append(plugin)
        plugin.initialize(self)
        return plugin

    def load_annotations(self, annotations: Iterable[Annotation]) -> None:
        self.annotations = list(annotations)
        self.events.publish(AnnotationEvent.ANNOTATIONS_LOADED, list(self.annotations))

    def create_annotation(self, annotation: Annotation) -> Annotation:
        self.annotations.append(annotation)
        self.events.publish(AnnotationEvent.ANNOTATION_CREATED, annotation)
        return annotation

    def update_annotation(self, annotation: Annotation) -> Annotation:
        self.events.publish(AnnotationEvent.ANNOTATION_UPDATED, annotation)
        return annotation

    def delete_annotation(self, annotation: Annotation) -> None:
        if annotation in self.annotations:
            self.annotations.remove(annotation)
        self.events.publish(AnnotationEvent.ANNOTATION_DELETED, annotation)

    def edit(self, annotation: Annotation) -> None:
        """Open the editor on ``annotation``."""
        self.editor.load(annotation)
        self.events.publish(AnnotationEvent.EDITOR_SHOWN, self.editor, annotation)

    def save_editor(self) -> Annotation:
        """Submit the editor, then publish created or updated."""
        annotation = self.editor.submit()
        if any(a is annotation for a in self.annotations):
            return self.update_annotation(annotation)
        return self.create_annotation(annotation)

    def show(self, annotations: Iterable[Annotation]) -> None:
        """Render ``annotations`` in the viewer."""
        shown = list(annotations)
        self.viewer.load(shown)
        self.events.publish(AnnotationEvent.VIEWER_SHOWN, self.viewer, shown)
