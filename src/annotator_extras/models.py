"""Annotation record and field registration types.

These are plain dataclasses. The host engine owns annotation lifetimes;
plugins read them and mutate them in place from their submit hooks.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from annotator_extras.dom import Element


class FieldType(StrEnum):
    """Kind of input control an editor field renders."""

    TEXT = "text"
    SELECT = "select"


@dataclass
class Annotation:
    """An annotation as seen by the field plugins.

    Attributes:
        id: Host-assigned identifier.
        quote: The highlighted source text.
        text: The annotation body.
        color: Highlight colour chosen in the editor, or None if never set.
        tag_ids: Ordered tag identifiers, or None if never set.
        highlights: Elements that render the highlighted ranges. Plugins
            only touch their background style.
    """

    id: str = field(default_factory=lambda: uuid4().hex)
    quote: str = ""
    text: str = ""
    color: str | None = None
    tag_ids: list[str] | None = None
    highlights: list[Element] = field(default_factory=list)


type FieldHook = Callable[[Element, Annotation], None]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """What a plugin hands to ``Editor.add_field`` / ``Viewer.add_field``.

    Attributes:
        label: Label or placeholder shown with the input.
        type: Input control kind (editor only).
        load: Called with the field element and annotation when the
            surface shows an annotation.
        submit: Called with the field element and annotation when the
            editor is saved (editor only).
        multiple: Whether a select control accepts several values.
    """

    label: str = ""
    type: FieldType = FieldType.TEXT
    load: FieldHook | None = None
    submit: FieldHook | None = None
    multiple: bool = False
