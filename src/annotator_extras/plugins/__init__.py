"""Field plugins for the annotator: highlight colour and tags."""

from annotator_extras.plugins.base import Plugin
from annotator_extras.plugins.color import ColorOptions, ColorPlugin
from annotator_extras.plugins.tags import SelectTagBridge, TagOptions, TagsPlugin

__all__ = [
    "ColorOptions",
    "ColorPlugin",
    "Plugin",
    "SelectTagBridge",
    "TagOptions",
    "TagsPlugin",
]
