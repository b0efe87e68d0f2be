"""
Plugin block vault

Protects {{plugin}} blocks from the block and inline grammars.

The vault operates in three steps:
1. escape(): every well-formed {{...}} block in the raw document is stored
   in a table and replaced by a placeholder token (sentinel, index, sentinel)
2. restore(): placeholders are turned back into literal {{...}} text, for
   preformatted blocks where plugin syntax is shown, not run
3. evaluate(): placeholders are resolved through Renderer.inline_plugin()
   while the literal text around them goes through Renderer.text()

A block is well-formed when its content, with escaped backslashes, escaped
quotes and complete '...' / "..." strings removed, holds no stray quote.
Quoted strings may span lines and may contain "}}", so a candidate that
fails the test is extended to the next "}}" instead of being cut short.

Example:
    >>> vault = PluginBlockVault()
    >>> vault.escape("see {{fn('a}}b')}} here")
    'see \\x000\\x00 here'
    >>> vault.blocks
    ["fn('a}}b')"]
"""

import re
from typing import Callable, List, Optional, Pattern

from ..config import appsettings
from ..models.renderer import RenderContainer, Renderer
from ..models.tokens import PlaceholderToken
from .log import LOG


OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"

ESCAPED_BACKSLASH_RE = re.compile(r"\\\\")
ESCAPED_QUOTE_RE = re.compile(r"\\['\"]")
QUOTED_STRING_RE = re.compile(r"'[^']*'|\"[^\"]*\"")
QUOTE_RE = re.compile(r"['\"]")


class InvariantError(RuntimeError):
    """Raised when the compiler's own bookkeeping is inconsistent"""
    pass


def plugin_syntaxIsValid(code: str) -> bool:
    """
    Check that plugin content has balanced quotes

    Args:
        code: Text between {{ and }}

    Returns:
        True if no unescaped quote is left once quoted strings are removed

    Example:
        >>> plugin_syntaxIsValid("fn('a}}b')")
        True
        >>> plugin_syntaxIsValid("fn('a")
        False
    """
    code = ESCAPED_BACKSLASH_RE.sub("", code)
    code = ESCAPED_QUOTE_RE.sub("", code)
    code = QUOTED_STRING_RE.sub("", code)
    return QUOTE_RE.search(code) is None


class PluginBlockVault:
    """
    Placeholder table for {{plugin}} blocks of one document

    The table is filled once by escape() and only read afterwards.

    Attributes:
        blocks: Extracted plugin sources, indexed by placeholder number
        sentinel: Marker framing placeholder indices in the escaped text
    """

    def __init__(self, plugin_syntax: Optional[Callable[[str], bool]] = None) -> None:
        """
        Args:
            plugin_syntax: Validity test for candidate block content;
                           defaults to plugin_syntaxIsValid
        """
        self.plugin_syntax = plugin_syntax or plugin_syntaxIsValid
        self.blocks: List[str] = []
        self.sentinel = appsettings.placeholder_sentinels[0]
        self._token_re = self.tokenPattern_make(self.sentinel)

    @staticmethod
    def tokenPattern_make(sentinel: str) -> Pattern[str]:
        marker = re.escape(sentinel)
        return re.compile(f"{marker}(\\d+){marker}")

    def escape(self, text: str) -> str:
        """
        Replace every well-formed plugin block with a placeholder

        An opening {{ with no valid closing }} is left as literal text.

        Args:
            text: Raw document

        Returns:
            Document with plugin blocks replaced by placeholder tokens
        """
        self.blocks = []
        self.sentinel = appsettings.sentinel_pick(text)
        self._token_re = self.tokenPattern_make(self.sentinel)

        result = []
        pos = 0
        while True:
            open_pos = text.find(OPEN_MARKER, pos)
            if open_pos == -1:
                break
            result.append(text[pos:open_pos])
            content_start = open_pos + len(OPEN_MARKER)

            close_pos = self.closeMarker_find(text, content_start)
            if close_pos is None:
                # Unterminated, keep the marker as text
                result.append(OPEN_MARKER)
                pos = content_start
                continue

            self.blocks.append(text[content_start:close_pos])
            result.append(str(PlaceholderToken(len(self.blocks) - 1, self.sentinel)))
            pos = close_pos + len(CLOSE_MARKER)

        result.append(text[pos:])
        LOG(f"Escaped {len(self.blocks)} plugin blocks", level=2)
        return ''.join(result)

    def closeMarker_find(self, text: str, content_start: int) -> Optional[int]:
        """
        Find the first }} whose preceding content is valid plugin syntax

        Args:
            text: Raw document
            content_start: Position just after the opening {{

        Returns:
            Position of the closing }}, or None if no candidate validates
        """
        search_pos = content_start
        while True:
            close_pos = text.find(CLOSE_MARKER, search_pos)
            if close_pos == -1:
                return None
            if self.plugin_syntax(text[content_start:close_pos]):
                return close_pos
            search_pos = close_pos + len(CLOSE_MARKER)

    def block_get(self, index: int) -> str:
        """
        Look up an extracted block

        Raises:
            InvariantError: If no block was stored under index
        """
        if not 0 <= index < len(self.blocks):
            raise InvariantError(f"Placeholder refers to unknown plugin block {index}")
        return self.blocks[index]

    def token_match(self, text: str) -> Optional[int]:
        """Return the index if text is exactly one placeholder token"""
        match = self._token_re.fullmatch(text)
        return int(match.group(1)) if match else None

    def restore(self, text: str) -> str:
        """Put the literal {{...}} source back in place of every placeholder"""
        return self._token_re.sub(
            lambda m: OPEN_MARKER + self.block_get(int(m.group(1))) + CLOSE_MARKER,
            text,
        )

    def evaluate(
        self, text: str, renderer: Renderer, container: Optional[RenderContainer] = None
    ) -> RenderContainer:
        """
        Append text to a container, running any placeholders as inline plugins

        Literal segments go through renderer.text(); plugin results are
        appended as returned. Empty literal segments are skipped.

        Args:
            text: Escaped text fragment
            renderer: Renderer providing text() and inline_plugin()
            container: Target container; a new one is requested if None

        Returns:
            The container that was appended to
        """
        if container is None:
            container = renderer.container()

        pos = 0
        for match in self._token_re.finditer(text):
            if match.start() > pos:
                container.append(renderer.text(text[pos:match.start()]))
            container.append(renderer.inline_plugin(self.block_get(int(match.group(1)))))
            pos = match.end()
        if pos < len(text):
            container.append(renderer.text(text[pos:]))
        return container
