"""
hikidown - Hiki wiki markup to Jekyll Markdown converter

Compiles line-oriented Hiki wiki documents into Markdown posts.
"""

__version__ = "1.0.0"

from .compiler import Compiler, to_markdown
from .cursor import LineCursor
from .vault import PluginBlockVault, InvariantError
from .inline import InlineCompiler
from .markdown import MarkdownRenderer
from .plugins import PluginRegistry
from .log import LOG, state_connectToLogger

__all__ = [
    "Compiler",
    "to_markdown",
    "LineCursor",
    "PluginBlockVault",
    "InvariantError",
    "InlineCompiler",
    "MarkdownRenderer",
    "PluginRegistry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
