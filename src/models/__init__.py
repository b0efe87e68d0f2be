"""
Models package for hikidown

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .blocks import BlockKind, ListType
from .tokens import PlaceholderToken, ModifierKind, ModifierSpan, BracketLink, TableCell
from .renderer import ContainerKind, RenderContainer, Renderer
from .plugins import PluginSpec, PluginCategory, PluginError

__all__ = [
    "ProgramState",
    "pipeline",
    "BlockKind",
    "ListType",
    "PlaceholderToken",
    "ModifierKind",
    "ModifierSpan",
    "BracketLink",
    "TableCell",
    "ContainerKind",
    "RenderContainer",
    "Renderer",
    "PluginSpec",
    "PluginCategory",
    "PluginError",
]
