"""
Renderer capability contract

The compiler never produces output syntax itself. It drives a Renderer
through the calls declared here; MarkdownRenderer is the shipped
implementation and tests use a recording one.
"""

from enum import Enum
from typing import Any, List, Optional, Protocol

from .blocks import ListType


class ContainerKind(Enum):
    """Hint passed to Renderer.container()"""
    INLINE = "inline"
    PARAGRAPH = "paragraph"


class RenderContainer:
    """
    Accumulator for rendered fragments

    Inline containers join their fragments directly; paragraph containers
    hold one inline container per source line and join them with newlines.
    Fragments may be strings, nested containers, or whatever a renderer
    returns from its inline calls; str() renders them all.

    Example:
        >>> c = RenderContainer()
        >>> c.append("a").append("b")
        RenderContainer(inline, ['a', 'b'])
        >>> str(c)
        'ab'
    """

    def __init__(self, kind: ContainerKind = ContainerKind.INLINE) -> None:
        self.kind = kind
        self.parts: List[Any] = []

    def append(self, fragment: Any) -> "RenderContainer":
        self.parts.append(fragment)
        return self

    def is_empty(self) -> bool:
        return not str(self)

    def __str__(self) -> str:
        separator = "\n" if self.kind == ContainerKind.PARAGRAPH else ""
        return separator.join(str(part) for part in self.parts)

    def __repr__(self) -> str:
        return f"RenderContainer({self.kind.value}, {self.parts!r})"


class Renderer(Protocol):
    """
    Calls the compiler makes into its output backend

    Lifecycle:
        reset() before a pass, finish() -> output text after it.

    Structural calls write to the renderer's own output buffer. Inline
    calls return fragments that the compiler appends to containers.
    """

    # Lifecycle
    def reset(self) -> None: ...
    def finish(self) -> str: ...

    # Structural
    def fileheader(self, text: str) -> None: ...
    def headline(self, level: int, title: RenderContainer) -> None: ...
    def list_start(self) -> None: ...
    def listitem(self, list_type: ListType, item: RenderContainer, level: int) -> None: ...
    def list_end(self) -> None: ...
    def dlist_item(self, term: RenderContainer, definition: RenderContainer) -> None: ...
    def table_open(self) -> None: ...
    def table_record_open(self) -> None: ...
    def table_data(
        self, item: RenderContainer, rowspan: Optional[int], colspan: Optional[int]
    ) -> None: ...
    def table_record_close(self) -> None: ...
    def table_head_line(self, columns: int) -> None: ...
    def table_close(self) -> None: ...
    def blockquote_open(self) -> None: ...
    def blockquote_line(self, line: RenderContainer) -> None: ...
    def blockquote_close(self) -> None: ...
    def block_preformatted(self, text: str, language: Optional[str]) -> None: ...
    def preformatted(self, text: str) -> None: ...
    def paragraph(self, lines: RenderContainer) -> None: ...
    def block_plugin(self, source: str) -> None: ...

    # Inline
    def container(self, kind: ContainerKind = ContainerKind.INLINE) -> RenderContainer: ...
    def text(self, raw: str) -> Any: ...
    def hyperlink(self, target: str, title: Any) -> Any: ...
    def image_hyperlink(self, target: str, alt: Optional[str] = None) -> Any: ...
    def strong(self, content: RenderContainer) -> Any: ...
    def em(self, content: RenderContainer) -> Any: ...
    def deleted(self, content: RenderContainer) -> Any: ...
    def tt(self, content: RenderContainer) -> Any: ...
    def inline_plugin(self, source: str) -> Any: ...
