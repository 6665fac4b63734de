"""Element protocols used by the field plugins, and an in-memory element tree.

Plugins never import a UI toolkit. They talk to the ``Element`` /
``InputControl`` / ``SelectControl`` protocols defined here, which are
implemented twice: by ``Node`` below (headless, used by the bundled host
and the test suite) and by the NiceGUI adapters in ``annotator_extras.ui``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol, Self, TypeGuard

type ClickHandler = Callable[[Element], None]


class Element(Protocol):
    """The DOM-like surface the plugins rely on."""

    @property
    def parent(self) -> Element | None: ...

    def add_class(self, *names: str) -> None: ...

    def remove_class(self, *names: str) -> None: ...

    def has_class(self, name: str) -> bool: ...

    def set_style(self, prop: str, value: str) -> None: ...

    def get_style(self, prop: str) -> str | None: ...

    def set_data(self, key: str, value: str) -> None: ...

    def get_data(self, key: str) -> str | None: ...

    def append(self, tag: str = "div", text: str = "") -> Element:
        """Create a child element at the end of this one and return it."""
        ...

    def find(self, css_class: str) -> list[Element]:
        """Return descendants carrying ``css_class``, in document order."""
        ...

    def on_click(self, handler: ClickHandler) -> None: ...

    def clear(self) -> None:
        """Remove all children."""
        ...

    def remove(self) -> None:
        """Detach this element from its parent."""
        ...


class InputControl(Element, Protocol):
    """A text-like input. ``input_type`` mirrors the HTML ``type`` attribute."""

    value: str
    input_type: str


@dataclass(frozen=True, slots=True)
class Option:
    """One option of a select control."""

    value: str
    text: str
    selected: bool = False


class SelectControl(InputControl, Protocol):
    """A select control whose options can be rebuilt in place."""

    multiple: bool

    @property
    def options(self) -> list[Option]: ...

    @property
    def selected_values(self) -> list[str]: ...

    def clear_options(self) -> None: ...

    def add_option(self, value: str, text: str, *, selected: bool = False) -> None: ...

    def refresh(self) -> None:
        """Tell any enhancement overlay that the options changed."""
        ...


class FieldElement(Element, Protocol):
    """Element returned by ``add_field``; ``control`` is None on viewers."""

    control: InputControl | None


def is_select(control: InputControl | None) -> TypeGuard[SelectControl]:
    """Whether ``control`` is a select (has rebuildable options)."""
    return control is not None and hasattr(control, "add_option")


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class Node:
    """Headless element: tag, classes, inline style, data attributes, children."""

    def __init__(self, tag: str = "div", text: str = "") -> None:
        self.tag = tag
        self.text = text
        self.classes: list[str] = []
        self.style: dict[str, str] = {}
        self.data: dict[str, str] = {}
        self.children: list[Node] = []
        self._parent: Node | None = None
        self._click_handlers: list[ClickHandler] = []
        self.control: InputControl | None = None

    def __repr__(self) -> str:
        cls = f" .{'.'.join(self.classes)}" if self.classes else ""
        return f"<{self.tag}{cls}>"

    @property
    def parent(self) -> Node | None:
        return self._parent

    def add_class(self, *names: str) -> None:
        for name in names:
            if name not in self.classes:
                self.classes.append(name)

    def remove_class(self, *names: str) -> None:
        self.classes = [c for c in self.classes if c not in names]

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def set_style(self, prop: str, value: str) -> None:
        self.style[prop] = value

    def get_style(self, prop: str) -> str | None:
        return self.style.get(prop)

    def set_data(self, key: str, value: str) -> None:
        self.data[key] = value

    def get_data(self, key: str) -> str | None:
        return self.data.get(key)

    def adopt(self, child: Node) -> Node:
        """Attach an existing node as the last child."""
        if child._parent is not None:
            child.remove()
        child._parent = self
        self.children.append(child)
        return child

    def append(self, tag: str = "div", text: str = "") -> Node:
        return self.adopt(Node(tag, text))

    def iter_descendants(self) -> Iterator[Node]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find(self, css_class: str) -> list[Node]:
        return [n for n in self.iter_descendants() if n.has_class(css_class)]

    def on_click(self, handler: ClickHandler) -> None:
        self._click_handlers.append(handler)

    def click(self) -> None:
        """Dispatch a click to this node's handlers."""
        for handler in list(self._click_handlers):
            handler(self)

    def clear(self) -> None:
        for child in self.children:
            child._parent = None
        self.children = []

    def remove(self) -> None:
        if self._parent is not None:
            self._parent.children.remove(self)
            self._parent = None


class InputNode(Node):
    """Headless text input."""

    def __init__(self, value: str = "", input_type: str = "text") -> None:
        super().__init__("input")
        self.value = value
        self.input_type = input_type


class SelectNode(Node):
    """Headless select. Options are ``option`` child nodes."""

    def __init__(self, *, multiple: bool = False) -> None:
        super().__init__("select")
        self.multiple = multiple
        self.input_type = "select"
        self.refresh_count = 0
        self._refresh_listeners: list[Callable[[Self], None]] = []

    def _option_nodes(self) -> list[Node]:
        return [c for c in self.children if c.tag == "option"]

    @property
    def options(self) -> list[Option]:
        return [
            Option(
                value=n.data["value"],
                text=n.text,
                selected=n.data.get("selected") == "true",
            )
            for n in self._option_nodes()
        ]

    @property
    def selected_values(self) -> list[str]:
        return [o.value for o in self.options if o.selected]

    @property
    def value(self) -> str:
        selected = self.selected_values
        return selected[0] if selected else ""

    @value.setter
    def value(self, value: str) -> None:
        for node in self._option_nodes():
            is_match = node.data["value"] == value
            if is_match or not self.multiple:
                node.data["selected"] = "true" if is_match else "false"

    def clear_options(self) -> None:
        for node in self._option_nodes():
            node.remove()

    def add_option(self, value: str, text: str, *, selected: bool = False) -> None:
        if selected and not self.multiple:
            for node in self._option_nodes():
                node.data["selected"] = "false"
        node = self.append("option", text)
        node.data["value"] = value
        node.data["selected"] = "true" if selected else "false"

    def on_refresh(self, listener: Callable[[Self], None]) -> None:
        """Subscribe an enhancement overlay to option refreshes."""
        self._refresh_listeners.append(listener)

    def refresh(self) -> None:
        self.refresh_count += 1
        for listener in list(self._refresh_listeners):
            listener(self)
