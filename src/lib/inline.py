"""
Inline compiler

Tokenizes the text of a block into bracket links, autolinked URIs and span
modifiers, emitting Renderer calls as it goes. There is no inline tree:
each token is rendered the moment it is matched.

Scanning repeatedly takes the earliest of

    [[title|target]]                bracket link, lazy up to the first ]]
    https://example.org/            autolinked URI
    '''x'''  ''x''  ==x==  ``x``    span modifiers, longest delimiter first

and continues on the text after the match. Modifier content is compiled
recursively, and a link title is compiled for modifiers, so
'''[[a|b]]''' is a strong span holding a link. Text between tokens goes
through the plugin vault so placeholders resolve in reading order.
Unterminated delimiters never match and stay literal.
"""

import re
from typing import Any, Callable, Dict, List, Optional

from ..config import appsettings
from ..models.renderer import RenderContainer, Renderer
from ..models.tokens import BracketLink, ModifierKind, ModifierSpan
from .vault import InvariantError, PluginBlockVault


BRACKET_LINK_PATTERN = r"\[\[.+?\]\]"
URI_PATTERN = r"(?:https?|ftp|file|mailto):[A-Za-z0-9;/?:@&=+$,\-_.!~*'()#%]+"
MODIFIER_PATTERN = r"'''.+?'''|''.+?''|==.+?==|``.+?``"

INLINE_RE = re.compile(
    rf"(?P<link>{BRACKET_LINK_PATTERN})|(?P<uri>{URI_PATTERN})|(?P<modifier>{MODIFIER_PATTERN})"
)
MODIFIER_RE = re.compile(MODIFIER_PATTERN)
LINK_TITLE_RE = re.compile(r"(.*)\|")
SCHEME_RELATIVE_RE = re.compile(r"(?:https?|ftp|file):(?!//)")
SCHEME_RE = re.compile(r"\w+:")
EXTENSION_RE = re.compile(r"\.[^.]+\Z")

# Longest delimiter first so ''' is never read as ''
MODIFIER_KINDS: List[ModifierKind] = [
    ModifierKind.STRONG,
    ModifierKind.EM,
    ModifierKind.DEL,
    ModifierKind.TT,
]


def uri_fix(uri: str) -> str:
    """
    Drop the scheme from http:, https:, ftp: and file: targets without //

    Example:
        >>> uri_fix("http:index.html")
        'index.html'
        >>> uri_fix("http://example.org/")
        'http://example.org/'
    """
    if SCHEME_RELATIVE_RE.match(uri):
        return SCHEME_RE.sub("", uri, count=1)
    return uri


def image_is(uri: str, extensions: Optional[List[str]] = None) -> bool:
    """Check whether a target's last extension names a raster image"""
    if extensions is None:
        extensions = appsettings.image_extensions
    match = EXTENSION_RE.search(uri)
    return bool(match) and match.group(0).lower() in extensions


def bracketLink_split(content: str) -> BracketLink:
    """
    Split [[...]] content into title and target at the last '|'

    Example:
        >>> bracketLink_split("Ruby|http://www.ruby-lang.org/")
        BracketLink(target='http://www.ruby-lang.org/', title='Ruby')
    """
    match = LINK_TITLE_RE.match(content)
    if match:
        return BracketLink(target=content[match.end():], title=match.group(1))
    return BracketLink(target=content)


def modifier_split(chunk: str) -> ModifierSpan:
    """
    Split a matched modifier chunk into its kind and inner text

    Raises:
        InvariantError: If chunk does not start with a known delimiter
    """
    for kind in MODIFIER_KINDS:
        delimiter = kind.value
        if chunk.startswith(delimiter):
            return ModifierSpan(kind=kind, inner=chunk[len(delimiter):-len(delimiter)])
    raise InvariantError(f"Not a span modifier: {chunk!r}")


class InlineCompiler:
    """
    Turns inline wiki text into renderer containers

    Attributes:
        renderer: Output backend receiving inline calls
        vault: Plugin vault of the document being compiled
    """

    def __init__(self, renderer: Renderer, vault: PluginBlockVault) -> None:
        self.renderer = renderer
        self.vault = vault
        self.modifier_renderers: Dict[ModifierKind, Callable[[RenderContainer], Any]] = {
            ModifierKind.STRONG: renderer.strong,
            ModifierKind.EM: renderer.em,
            ModifierKind.DEL: renderer.deleted,
            ModifierKind.TT: renderer.tt,
        }

    def inline_compile(
        self, text: str, container: Optional[RenderContainer] = None
    ) -> RenderContainer:
        """
        Compile a text fragment into a container

        Args:
            text: Escaped inline text (may hold plugin placeholders)
            container: Target container; a new one is requested if None

        Returns:
            The container holding the rendered fragments
        """
        if container is None:
            container = self.renderer.container()

        while True:
            match = INLINE_RE.search(text)
            if not match:
                break
            self.vault.evaluate(text[:match.start()], self.renderer, container)
            container.append(self.markup_compile(match))
            text = text[match.end():]

        self.vault.evaluate(text, self.renderer, container)
        return container

    def markup_compile(self, match: "re.Match[str]") -> Any:
        kind = match.lastgroup
        token = match.group(0)
        if kind == "link":
            return self.bracketLink_compile(token[2:-2])
        if kind == "uri":
            return self.uriAutolink_compile(token)
        if kind == "modifier":
            return self.modifiers_compile(token)
        raise InvariantError(f"Inline token matched no known alternative: {token!r}")

    def bracketLink_compile(self, content: str) -> Any:
        """
        Render [[...]] content as a hyperlink or an image

        A titled link compiles its title for span modifiers; an untitled
        one shows the raw content as text. Image targets become embeds,
        with the title (if any) as alt text. Plugin blocks in targets and
        alt text are put back as literal {{...}} source.
        """
        link = bracketLink_split(content)
        raw_target = self.vault.restore(link.target)
        target = uri_fix(raw_target)

        if link.title is None:
            if image_is(raw_target):
                return self.renderer.image_hyperlink(target)
            return self.renderer.hyperlink(target, self.renderer.text(raw_target))

        if image_is(raw_target):
            return self.renderer.image_hyperlink(target, self.vault.restore(link.title))
        return self.renderer.hyperlink(target, self.modifiers_compile(link.title))

    def uriAutolink_compile(self, uri: str) -> Any:
        if image_is(uri):
            return self.renderer.image_hyperlink(uri_fix(uri))
        return self.renderer.hyperlink(uri_fix(uri), self.renderer.text(uri))

    def modifiers_compile(self, text: str) -> RenderContainer:
        """
        Compile span modifiers only (no links or URIs at this level)

        Each modifier's inner text is fully inline-compiled.
        """
        container = self.renderer.container()
        while True:
            match = MODIFIER_RE.search(text)
            if not match:
                break
            self.vault.evaluate(text[:match.start()], self.renderer, container)
            span = modifier_split(match.group(0))
            render = self.modifier_renderers[span.kind]
            container.append(render(self.inline_compile(span.inner)))
            text = text[match.end():]

        self.vault.evaluate(text, self.renderer, container)
        return container
