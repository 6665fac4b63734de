"""Pluggable translation lookup for field labels."""

from __future__ import annotations

from collections.abc import Callable, Mapping

type Translator = Callable[[str], str]

# English source strings are their own keys.
DEFAULT_CATALOG: dict[str, dict[str, str]] = {
    "en": {},
    "de": {
        "Choose a color…": "Farbe wählen…",
        "Add some tags here…": "Tags hier hinzufügen…",
        "Tag": "Tag",
    },
    "fr": {
        "Choose a color…": "Choisissez une couleur…",
        "Add some tags here…": "Ajoutez des tags ici…",
        "Tag": "Tag",
    },
}


def identity(text: str) -> str:
    return text


def make_translator(
    locale: str = "en",
    overrides: Mapping[str, str] | None = None,
) -> Translator:
    """Build a lookup over the built-in catalogue for ``locale``.

    ``overrides`` win over built-in entries. Unknown keys and unknown
    locales fall back to the key itself.
    """
    catalog = dict(DEFAULT_CATALOG.get(locale, {}))
    if overrides:
        catalog.update(overrides)
    if not catalog:
        return identity

    def translate(text: str) -> str:
        return catalog.get(text, text)

    return translate
