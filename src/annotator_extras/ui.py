"""NiceGUI rendering of the editor and viewer surfaces, plus a demo page.

``NiceElement``, ``NiceInput`` and ``NiceSelect`` adapt NiceGUI elements
to the protocols in ``annotator_extras.dom`` so the plugins run unchanged
in a browser. Classes, styles and data attributes are mirrored on the
wrapper so reads never touch NiceGUI private state.

Route: ``/`` (registered on import).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from nicegui import app, ui

from annotator_extras.config import get_settings
from annotator_extras.dom import Option
from annotator_extras.filtering import FilterPanel
from annotator_extras.host import FIELD_CLASS, Annotator, Editor, Viewer
from annotator_extras.i18n import make_translator
from annotator_extras.models import Annotation, FieldType
from annotator_extras.plugins.color import ColorOptions, ColorPlugin
from annotator_extras.plugins.tags import SelectTagBridge, TagOptions, TagsPlugin

if TYPE_CHECKING:
    from nicegui.element import Element as NiceGuiElement

    from annotator_extras.dom import ClickHandler, InputControl
    from annotator_extras.models import FieldDescriptor

logger = logging.getLogger(__name__)


class NiceElement:
    """``dom.Element`` over a NiceGUI element."""

    def __init__(self, element: NiceGuiElement) -> None:
        self.element = element
        self.control: InputControl | None = None
        self._classes: list[str] = []
        self._style: dict[str, str] = {}
        self._data: dict[str, str] = {}
        self._children: list[NiceElement] = []
        self._parent: NiceElement | None = None

    @property
    def parent(self) -> NiceElement | None:
        return self._parent

    def add_class(self, *names: str) -> None:
        new = [n for n in names if n not in self._classes]
        if new:
            self._classes.extend(new)
            self.element.classes(add=" ".join(new))

    def remove_class(self, *names: str) -> None:
        gone = [n for n in names if n in self._classes]
        if gone:
            self._classes = [c for c in self._classes if c not in gone]
            self.element.classes(remove=" ".join(gone))

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def set_style(self, prop: str, value: str) -> None:
        self._style[prop] = value
        self.element.style(add=f"{prop}: {value}")

    def get_style(self, prop: str) -> str | None:
        return self._style.get(prop)

    def set_data(self, key: str, value: str) -> None:
        self._data[key] = value
        self.element.props(f'data-{key}="{value}"')

    def get_data(self, key: str) -> str | None:
        return self._data.get(key)

    def adopt(self, child: NiceElement) -> NiceElement:
        child._parent = self
        self._children.append(child)
        return child

    def append(self, tag: str = "div", text: str = "") -> NiceElement:
        with self.element:
            if text:
                el = ui.label(text)
                el.tag = tag
            else:
                el = ui.element(tag)
        return self.adopt(NiceElement(el))

    def find(self, css_class: str) -> list[NiceElement]:
        found = []
        for child in self._children:
            if child.has_class(css_class):
                found.append(child)
            found.extend(child.find(css_class))
        return found

    def on_click(self, handler: ClickHandler) -> None:
        self.element.on("click", lambda _e: handler(self))

    def clear(self) -> None:
        self.element.clear()
        for child in self._children:
            child._parent = None
        self._children = []

    def remove(self) -> None:
        self.element.delete()
        if self._parent is not None:
            self._parent._children.remove(self)
            self._parent = None


class NiceInput(NiceElement):
    """``dom.InputControl`` over ``ui.input``."""

    def __init__(self, element: ui.input) -> None:
        super().__init__(element)
        self._input_type = "text"

    @property
    def value(self) -> str:
        return self.element.value or ""

    @value.setter
    def value(self, value: str) -> None:
        self.element.value = value

    @property
    def input_type(self) -> str:
        return self._input_type

    @input_type.setter
    def input_type(self, input_type: str) -> None:
        self._input_type = input_type
        self.element.props(f"type={input_type}")
        self.element.set_visibility(input_type != "hidden")


class NiceSelect(NiceElement):
    """``dom.SelectControl`` over ``ui.select``."""

    def __init__(self, element: ui.select, *, multiple: bool) -> None:
        super().__init__(element)
        self.multiple = multiple
        self.input_type = "select"
        self._options: dict[str, str] = {}

    @property
    def selected_values(self) -> list[str]:
        value = self.element.value
        if self.multiple:
            return list(value or [])
        return [value] if value else []

    @property
    def options(self) -> list[Option]:
        selected = set(self.selected_values)
        return [Option(v, t, v in selected) for v, t in self._options.items()]

    @property
    def value(self) -> str:
        selected = self.selected_values
        return selected[0] if selected else ""

    @value.setter
    def value(self, value: str) -> None:
        self._sync([value] if value in self._options else [])

    def _sync(self, selected: list[str]) -> None:
        value: Any = selected if self.multiple else (selected[-1] if selected else None)
        self.element.set_options(dict(self._options), value=value)

    def clear_options(self) -> None:
        self._options = {}
        self._sync([])

    def add_option(self, value: str, text: str, *, selected: bool = False) -> None:
        current = self.selected_values
        self._options[value] = text
        if selected:
            current = [*current, value] if self.multiple else [value]
        self._sync(current)

    def refresh(self) -> None:
        self.element.update()


class NiceSurface:
    """``host.Surface`` that builds NiceGUI elements under ``root``."""

    def __init__(self, root: NiceGuiElement) -> None:
        self._root = NiceElement(root)

    @property
    def root(self) -> NiceElement:
        return self._root

    def create_container(
        self, css_class: str, parent: NiceElement | None = None
    ) -> NiceElement:
        container = (parent or self._root).append("ul")
        container.add_class(css_class)
        return container

    def create_field(
        self,
        descriptor: FieldDescriptor,
        parent: NiceElement | None = None,
        *,
        with_control: bool = True,
    ) -> NiceElement:
        field = (parent or self._root).append("li")
        field.add_class(FIELD_CLASS)
        if not with_control:
            return field
        control: NiceInput | NiceSelect
        with field.element:
            if descriptor.type is FieldType.SELECT:
                control = NiceSelect(
                    ui.select(
                        options={},
                        label=descriptor.label,
                        multiple=descriptor.multiple,
                        value=[] if descriptor.multiple else None,
                    ).classes("w-full"),
                    multiple=descriptor.multiple,
                )
            else:
                control = NiceInput(ui.input(placeholder=descriptor.label).classes("w-full"))
        field.adopt(control)
        field.control = control
        return field


# ---------------------------------------------------------------------------
# Demo page
# ---------------------------------------------------------------------------

_SAMPLE_PARAGRAPHS = (
    "The appellant was convicted on two counts following a jury trial.",
    "The primary judge declined to admit the tendency evidence.",
    "On appeal, the Crown argued that the ruling was unreasonable.",
    "The Court allowed the appeal and ordered a new trial.",
)

_SAMPLE_TAGS: list[dict[str, Any]] = [
    {"_id": 1, "name": "procedural history"},
    {"_id": 2, "name": "evidence"},
    {"_id": 3, "name": "decision"},
]


@app.get("/tags")
async def _tags_endpoint() -> dict[str, Any]:
    return {"ok": True, "tags": _SAMPLE_TAGS}


_PAGE_CSS = """
    .annotator-color-swatch {
        display: inline-block; width: 1.5rem; height: 1.5rem;
        margin: 0 0.2rem; border-radius: 50%; cursor: pointer;
    }
    .annotator-color-swatch.active { outline: 2px solid black; }
    .annotator-tag {
        display: inline-block; padding: 0 0.4rem; margin-right: 0.3rem;
        border-radius: 0.6rem; background: #eee;
    }
    .annotator-viewer-templates { display: none; }
"""


@ui.page("/")
async def annotate_page() -> None:
    """Sample document with colour and tag fields on each annotation."""
    settings = get_settings()
    translate = make_translator(settings.i18n.locale, settings.i18n.catalog)
    filters = FilterPanel()
    ui.add_css(_PAGE_CSS)

    with ui.row().classes("w-full no-wrap gap-8 p-4"):
        doc_col = ui.column().classes("w-1/2")
        with ui.column().classes("w-1/2"):
            ui.label("Editor").classes("text-lg font-bold")
            editor_root = ui.element("div").classes("w-full")
            editor_actions = ui.row()
            ui.label("Annotations").classes("text-lg font-bold mt-4")
            filter_row = ui.row()
            viewer_root = ui.element("div").classes("w-full")

    annotator = Annotator(
        Editor(NiceSurface(editor_root)),
        Viewer(NiceSurface(viewer_root)),
        filters=filters,
        translate=translate,
    )
    annotator.add_plugin(ColorPlugin(ColorOptions.from_settings(settings)))
    tag_options = TagOptions.from_settings(settings)
    if not tag_options.prefix:
        tag_options = tag_options.model_copy(
            update={"prefix": f"http://127.0.0.1:{settings.app.port}"}
        )
    tags = annotator.add_plugin(TagsPlugin(tag_options))
    bridge = SelectTagBridge(annotator.editor)

    def _show(keywords: str = "") -> None:
        annotator.show(filters.apply(annotator.annotations, translate("Tag"), keywords))

    def _save() -> None:
        if not annotator.editor.is_open:
            ui.notify("Pick a paragraph to annotate first", type="warning")
            return
        annotator.save_editor()
        _show(filter_input.value or "")

    def _add_tag() -> None:
        name = (new_tag_input.value or "").strip()
        if not name:
            return
        tags.register_available_tag(name)
        bridge.add_new_tag(name)
        new_tag_input.value = ""

    with doc_col:
        ui.label("Document").classes("text-lg font-bold")
        for text in _SAMPLE_PARAGRAPHS:
            with ui.row().classes("items-center no-wrap"):
                paragraph = NiceElement(ui.label(text).classes("p-1 rounded"))
                ui.button(
                    icon="edit_note",
                    on_click=lambda _e, p=paragraph, t=text: annotator.edit(
                        Annotation(quote=t, highlights=[p])
                    ),
                ).props("flat dense")

    with editor_actions:
        ui.button("Save", on_click=_save).props("color=primary")
        ui.button("Cancel", on_click=annotator.editor.cancel).props("flat")
        if isinstance(tags.input, NiceSelect):
            new_tag_input = ui.input("New tag").props("dense")
            ui.button("Add tag", on_click=_add_tag).props("flat")

    with filter_row:
        filter_input = ui.input(
            translate("Tag"), on_change=lambda e: _show(e.value or "")
        ).props("dense clearable")

    annotator.load_annotations([])
