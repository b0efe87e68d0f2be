"""
Plugin specification and metadata models

Defines the structure and categories of {{plugin}} handlers for the
registry and for documentation generation.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List


class PluginCategory(Enum):
    """
    Categories of wiki plugins

    Used for organization and documentation generation.
    """
    LAYOUT = "layout"            # {{toc}}, {{br}}, {{backnumber}}
    FORMATTING = "formatting"    # {{sub}}, {{e}}, {{fn}}
    ATTACHMENT = "attachment"    # {{attach_view}}, {{attach_src}}
    BOOK = "book"                # {{isbn}}, {{isbn_image}}
    MEDIA = "media"              # {{youtube}}, {{speakerdeck}}
    OBSOLETE = "obsolete"        # {{comment}}, {{trackback}}


class PluginError(Exception):
    """Raised by a plugin handler that cannot render its arguments"""
    pass


@dataclass
class PluginSpec:
    """
    Specification for a wiki plugin

    Attributes:
        name: Plugin name as written in {{name ...}}
        category: Category for organization
        description: Human-readable description
        handler: Rendering function (renderer, *args) -> str
        examples: Example usage strings
        aliases: Alternative names for the plugin
    """
    name: str
    category: PluginCategory
    description: str
    handler: Callable[..., str]
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)

    def matches(self, plugin_name: str) -> bool:
        """Check if this spec handles a plugin name or one of its aliases"""
        return plugin_name == self.name or plugin_name in self.aliases
