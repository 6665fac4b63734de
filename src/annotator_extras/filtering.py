"""Keyword filtering over annotation tags.

``tags_match`` is the predicate the tag plugin contributes to a filter
collaborator. ``FilterPanel`` is a small in-process collaborator that
holds registered filters and applies them to a batch of annotations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from annotator_extras.models import Annotation

logger = logging.getLogger(__name__)

type FilterPredicate = Callable[[str, Sequence[str]], bool]


def tags_match(keywords: str, values: Sequence[str]) -> bool:
    """Return True when every keyword is a substring of at least one value.

    Keywords are split on whitespace. No keywords means nothing to
    satisfy, so the result is True. An empty ``values`` list fails any
    non-empty keyword list.

    Examples:
        >>> tags_match("cat dog", ["cat", "dog"])
        True
        >>> tags_match("cat dog", ["cat"])
        False
    """
    words = keywords.split()
    matched = sum(1 for word in words if any(word in value for value in values))
    return matched == len(words)


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """One filter contribution.

    Attributes:
        label: Display label of the filter input.
        property: Annotation attribute whose values are matched.
        is_filtered: Predicate taking the raw keyword string and the
            attribute's values.
    """

    label: str
    property: str
    is_filtered: FilterPredicate


class FilterRegistry(Protocol):
    """Registration point exposed by a filter collaborator."""

    def add_filter(self, spec: FilterSpec) -> None:
        """Register a filter contribution."""
        ...


class FilterPanel:
    """In-process filter collaborator.

    Keeps registered filters in order and answers which annotations pass a
    given filter for a keyword string.
    """

    def __init__(self) -> None:
        self._filters: dict[str, FilterSpec] = {}

    @property
    def filters(self) -> list[FilterSpec]:
        return list(self._filters.values())

    def add_filter(self, spec: FilterSpec) -> None:
        if spec.label in self._filters:
            logger.debug("Replacing filter %r", spec.label)
        self._filters[spec.label] = spec

    def get(self, label: str) -> FilterSpec:
        """Return the filter registered under ``label``.

        Raises:
            KeyError: If no filter has that label.
        """
        return self._filters[label]

    def apply(
        self,
        annotations: Iterable[Annotation],
        label: str,
        keywords: str,
    ) -> list[Annotation]:
        """Return the annotations that satisfy the filter for ``keywords``.

        Blank keywords match everything. An annotation lacking the filter's
        property is matched against an empty value list.
        """
        spec = self.get(label)
        if not keywords.strip():
            return list(annotations)
        kept = []
        for annotation in annotations:
            values = getattr(annotation, spec.property, None) or []
            if spec.is_filtered(keywords, values):
                kept.append(annotation)
        return kept
