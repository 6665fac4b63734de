"""Unit tests for the highlight colour plugin.

Runs the plugin against the headless host; swatches, inputs and
highlights are in-memory ``Node`` elements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from annotator_extras.dom import Node
from annotator_extras.host import Annotator
from annotator_extras.models import Annotation
from annotator_extras.plugins.color import (
    ACTIVE_CLASS,
    SWATCH_STRIP_CLASS,
    VIEWER_CLASS,
    ColorOptions,
    ColorPlugin,
)

if TYPE_CHECKING:
    from annotator_extras.events import AnnotationEvent

PALETTE = ["#FF0000", "#00FF00", "#0000FF"]


@pytest.fixture
def plugin(annotator: Annotator) -> ColorPlugin:
    plugin = ColorPlugin(ColorOptions(default_color="#00FF00", color_options=PALETTE))
    annotator.add_plugin(plugin)
    return plugin


def _active_colours(plugin: ColorPlugin) -> list[str | None]:
    return [s.get_data("color") for s in plugin.swatches if s.has_class(ACTIVE_CLASS)]


class TestInitialize:
    """Field registration and the capability guard."""

    def test_registers_one_editor_and_one_viewer_field(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Setup adds exactly one editor field and one viewer field."""
        assert len(annotator.editor.fields) == 1
        assert len(annotator.viewer.descriptors) == 1
        descriptor, field = annotator.editor.fields[0]
        assert descriptor.label == "Choose a color…"
        assert descriptor.load is not None
        assert descriptor.submit is not None
        assert annotator.viewer.descriptors[0].submit is None
        assert plugin.input is field.control

    def test_label_is_translated(self) -> None:
        """The editor label goes through the host's translator."""
        annotator = Annotator.headless(translate=lambda s: f"<{s}>")
        annotator.add_plugin(ColorPlugin(ColorOptions()))
        assert annotator.editor.fields[0][0].label == "<Choose a color…>"

    def test_unsupported_host_leaves_plugin_inert(self) -> None:
        """A failing capability check registers nothing."""
        annotator = Annotator.headless(capability_check=lambda: False)
        plugin = ColorPlugin(ColorOptions())
        annotator.add_plugin(plugin)
        assert annotator.editor.fields == []
        assert annotator.viewer.descriptors == []
        assert plugin.input is None
        assert plugin.host is None

    def test_subscribes_lifecycle_events(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Loaded, created and updated are the only subscribed events."""
        subscribed: set[AnnotationEvent] = {
            event for event in plugin.handlers if annotator.events.handlers(event)
        }
        assert {str(e) for e in subscribed} == {
            "annotationsLoaded",
            "annotationCreated",
            "annotationUpdated",
        }

    def test_initialising_twice_is_an_error(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Adding the same plugin again raises ValueError."""
        with pytest.raises(ValueError, match="already"):
            annotator.add_plugin(plugin)


class TestLoadIntoEditor:
    """Swatch strip construction and input state when the editor opens."""

    def test_builds_one_swatch_per_palette_colour(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Each palette colour gets a swatch with matching data and background."""
        annotator.edit(Annotation())
        assert [s.get_data("color") for s in plugin.swatches] == PALETTE
        assert [s.get_style("background") for s in plugin.swatches] == PALETTE

    def test_strip_follows_input(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """The swatch strip is inserted right after the input."""
        annotator.edit(Annotation())
        field = annotator.editor.fields[0][1]
        assert isinstance(field, Node)
        assert field.children[0] is plugin.input
        assert field.children[1].has_class(SWATCH_STRIP_CLASS)

    def test_strip_is_built_once(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """Reopening the editor reuses the existing strip."""
        annotator.edit(Annotation())
        annotator.edit(Annotation(color="#FF0000"))
        field = annotator.editor.fields[0][1]
        assert len(field.find(SWATCH_STRIP_CLASS)) == 1
        assert len(plugin.swatches) == len(PALETTE)

    def test_default_colour_when_annotation_has_none(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """An annotation without colour gets the default."""
        annotator.edit(Annotation())
        assert plugin.input is not None
        assert plugin.input.value == "#00FF00"
        assert _active_colours(plugin) == ["#00FF00"]

    def test_annotation_colour_wins(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """An annotation's own colour beats the default."""
        annotator.edit(Annotation(color="#0000FF"))
        assert plugin.input is not None
        assert plugin.input.value == "#0000FF"
        assert _active_colours(plugin) == ["#0000FF"]

    def test_reload_moves_active_swatch(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Loading another annotation moves the active mark."""
        annotator.edit(Annotation(color="#0000FF"))
        annotator.edit(Annotation(color="#FF0000"))
        assert _active_colours(plugin) == ["#FF0000"]

    def test_input_is_hidden(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """Opening the editor hides the raw colour input."""
        assert plugin.input is not None
        assert plugin.input.input_type == "text"
        annotator.edit(Annotation())
        assert plugin.input.input_type == "hidden"

    def test_colour_outside_palette_has_no_active_swatch(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """An unknown colour is kept but no swatch is active."""
        annotator.edit(Annotation(color="papayawhip"))
        assert plugin.input is not None
        assert plugin.input.value == "papayawhip"
        assert _active_colours(plugin) == []


class TestSwatches:
    """Clicking swatches and the single-active-swatch rule."""

    def test_click_activates_and_writes_input(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Clicking a swatch activates it and writes its colour."""
        annotator.edit(Annotation())
        blue = plugin.swatches[2]
        assert isinstance(blue, Node)
        blue.click()
        assert _active_colours(plugin) == ["#0000FF"]
        assert plugin.input is not None
        assert plugin.input.value == "#0000FF"

    def test_click_does_not_submit(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """A click only changes the input, not the annotation."""
        annotation = Annotation()
        annotator.edit(annotation)
        swatch = plugin.swatches[0]
        assert isinstance(swatch, Node)
        swatch.click()
        assert annotation.color is None

    def test_swatch_without_colour_is_ignored(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """A swatch lacking a colour attribute changes nothing."""
        annotator.edit(Annotation())
        plugin.on_swatch_clicked(Node("span"))
        assert _active_colours(plugin) == ["#00FF00"]

    @pytest.mark.parametrize("colour", [*PALETTE, "#123456", "", "not a colour"])
    def test_mark_active_swatch_leaves_at_most_the_matching_one(
        self, annotator: Annotator, plugin: ColorPlugin, colour: str
    ) -> None:
        """Only swatches matching the colour stay active."""
        annotator.edit(Annotation())
        plugin.mark_active_swatch(colour)
        expected = [colour] if colour in PALETTE else []
        assert _active_colours(plugin) == expected

    def test_matching_is_by_slug(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """Matching compares slugs, so the hash sign is irrelevant."""
        annotator.edit(Annotation())
        plugin.mark_active_swatch("FF0000")
        assert _active_colours(plugin) == ["#FF0000"]

    def test_slug_collisions_activate_every_colliding_swatch(self) -> None:
        """Colours with equal slugs are all marked active."""
        annotator = Annotator.headless()
        plugin = ColorPlugin(
            ColorOptions(default_color="#aaa", color_options=["#aaa", "aaa", "#bbb"])
        )
        annotator.add_plugin(plugin)
        annotator.edit(Annotation())
        assert _active_colours(plugin) == ["#aaa", "aaa"]

    def test_mark_before_editor_opened_is_a_no_op(self, plugin: ColorPlugin) -> None:
        """Marking before any swatches exist does nothing."""
        plugin.mark_active_swatch("#FF0000")
        assert plugin.swatches == []


class TestSubmit:
    """submit_from_editor() copies the input value verbatim."""

    def test_submit_writes_clicked_colour(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """Saving stores the clicked swatch's colour."""
        annotation = Annotation()
        annotator.edit(annotation)
        swatch = plugin.swatches[0]
        assert isinstance(swatch, Node)
        swatch.click()
        annotator.save_editor()
        assert annotation.color == "#FF0000"

    @pytest.mark.parametrize("raw", ["", "  ", "whatever", "#FFF"])
    def test_any_string_is_accepted(
        self, annotator: Annotator, plugin: ColorPlugin, raw: str
    ) -> None:
        """Submission copies the input value without validation."""
        annotation = Annotation()
        annotator.edit(annotation)
        assert plugin.input is not None
        plugin.input.value = raw
        annotator.save_editor()
        assert annotation.color == raw


class TestViewer:
    """The viewer field gets the display class only."""

    def test_viewer_field_tagged(self, annotator: Annotator, plugin: ColorPlugin) -> None:
        """The viewer field gets the colour class and no style."""
        annotator.show([Annotation(color="#FF0000")])
        _annotation, item = annotator.viewer.items[0]
        assert isinstance(item, Node)
        field = item.children[0]
        assert field.has_class(VIEWER_CLASS)
        assert field.get_style("background") is None


class TestHighlights:
    """Highlight backgrounds follow the saved colour."""

    def test_apply_highlight_paints_every_highlight(
        self, plugin: ColorPlugin, highlights: list[Node]
    ) -> None:
        """Every highlight gets the annotation's colour."""
        plugin.apply_highlight(Annotation(color="red", highlights=highlights))
        assert [h.get_style("background") for h in highlights] == ["red", "red"]

    def test_no_colour_leaves_highlights_alone(
        self, plugin: ColorPlugin, highlights: list[Node]
    ) -> None:
        """Without a colour, existing highlight styles stay."""
        highlights[0].set_style("background", "blue")
        plugin.apply_highlight(Annotation(highlights=highlights))
        assert highlights[0].get_style("background") == "blue"
        assert highlights[1].get_style("background") is None

    def test_created_event_paints(
        self, annotator: Annotator, plugin: ColorPlugin, annotation: Annotation
    ) -> None:
        """Creating an annotation paints its highlights."""
        annotation.color = "#00FF00"
        annotator.create_annotation(annotation)
        assert all(h.get_style("background") == "#00FF00" for h in annotation.highlights)

    def test_updated_event_repaints(
        self, annotator: Annotator, plugin: ColorPlugin, annotation: Annotation
    ) -> None:
        """Updating an annotation repaints with the new colour."""
        annotation.color = "#00FF00"
        annotator.create_annotation(annotation)
        annotation.color = "#0000FF"
        annotator.update_annotation(annotation)
        assert all(h.get_style("background") == "#0000FF" for h in annotation.highlights)

    def test_bulk_load_paints_each_annotation(
        self, annotator: Annotator, plugin: ColorPlugin
    ) -> None:
        """A bulk load paints each annotation that has a colour."""
        a = Annotation(color="red", highlights=[Node("span")])
        b = Annotation(highlights=[Node("span")])
        c = Annotation(color="blue", highlights=[Node("span"), Node("span")])
        annotator.load_annotations([a, b, c])
        assert a.highlights[0].get_style("background") == "red"
        assert b.highlights[0].get_style("background") is None
        assert [h.get_style("background") for h in c.highlights] == ["blue", "blue"]

    def test_editor_save_round_trip(
        self, annotator: Annotator, plugin: ColorPlugin, annotation: Annotation
    ) -> None:
        """Click, save and paint in one editor session."""
        annotator.edit(annotation)
        swatch = plugin.swatches[2]
        assert isinstance(swatch, Node)
        swatch.click()
        annotator.save_editor()
        assert annotation in annotator.annotations
        assert all(h.get_style("background") == "#0000FF" for h in annotation.highlights)

    def test_destroy_stops_painting(
        self, annotator: Annotator, plugin: ColorPlugin, annotation: Annotation
    ) -> None:
        """A destroyed plugin ignores later events."""
        plugin.destroy()
        annotation.color = "red"
        annotator.create_annotation(annotation)
        assert all(h.get_style("background") is None for h in annotation.highlights)
