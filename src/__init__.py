"""
hikidown - Hiki wiki markup to Jekyll Markdown converter

Compiles line-oriented Hiki wiki documents into Markdown posts.
"""

__version__ = "1.0.0"

from .lib import Compiler, MarkdownRenderer, PluginRegistry, to_markdown, LOG, state_connectToLogger

__all__ = [
    "Compiler",
    "MarkdownRenderer",
    "PluginRegistry",
    "to_markdown",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
