"""
Shared test fixtures

RecordingRenderer implements the Renderer contract with a tiny HTML-ish
syntax and records every call, so tests can assert both on the produced
text and on the sequence of calls the compiler made.
"""

from typing import Any, List, Optional, Tuple

import pytest

from hikidown.lib.compiler import Compiler
from hikidown.models.blocks import ListType
from hikidown.models.renderer import ContainerKind, RenderContainer


class RecordingRenderer:
    """Renderer that records calls and renders inline markup as tags"""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.resets = 0

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def reset(self) -> None:
        self.resets += 1
        self.calls = []

    def finish(self) -> str:
        return "\n".join(repr(call) for call in self.calls)

    def fileheader(self, text: str) -> None:
        self.calls.append(("fileheader", text))

    def headline(self, level: int, title: RenderContainer) -> None:
        self.calls.append(("headline", level, str(title)))

    def list_start(self) -> None:
        self.calls.append(("list_start",))

    def listitem(self, list_type: ListType, item: RenderContainer, level: int) -> None:
        self.calls.append(("listitem", list_type, str(item), level))

    def list_end(self) -> None:
        self.calls.append(("list_end",))

    def dlist_item(self, term: RenderContainer, definition: RenderContainer) -> None:
        self.calls.append(("dlist_item", str(term), str(definition)))

    def table_open(self) -> None:
        self.calls.append(("table_open",))

    def table_record_open(self) -> None:
        self.calls.append(("table_record_open",))

    def table_data(self, item: RenderContainer, rowspan: Optional[int], colspan: Optional[int]) -> None:
        self.calls.append(("table_data", str(item), rowspan, colspan))

    def table_record_close(self) -> None:
        self.calls.append(("table_record_close",))

    def table_head_line(self, columns: int) -> None:
        self.calls.append(("table_head_line", columns))

    def table_close(self) -> None:
        self.calls.append(("table_close",))

    def blockquote_open(self) -> None:
        self.calls.append(("blockquote_open",))

    def blockquote_line(self, line: RenderContainer) -> None:
        self.calls.append(("blockquote_line", str(line)))

    def blockquote_close(self) -> None:
        self.calls.append(("blockquote_close",))

    def block_preformatted(self, text: str, language: Optional[str]) -> None:
        self.calls.append(("block_preformatted", text, language))

    def preformatted(self, text: str) -> None:
        self.calls.append(("preformatted", text))

    def paragraph(self, lines: RenderContainer) -> None:
        self.calls.append(("paragraph", [str(line) for line in lines.parts]))

    def block_plugin(self, source: str) -> None:
        self.calls.append(("block_plugin", source))

    def container(self, kind: ContainerKind = ContainerKind.INLINE) -> RenderContainer:
        return RenderContainer(kind)

    def text(self, raw: str) -> str:
        return raw

    def hyperlink(self, target: str, title: Any) -> str:
        self.calls.append(("hyperlink", target, title))
        return f'<a href="{target}">{title}</a>'

    def image_hyperlink(self, target: str, alt: Optional[str] = None) -> str:
        self.calls.append(("image_hyperlink", target, alt))
        return f'<img src="{target}" alt="{alt or ""}">'

    def strong(self, content: RenderContainer) -> str:
        self.calls.append(("strong", content))
        return f"<strong>{content}</strong>"

    def em(self, content: RenderContainer) -> str:
        self.calls.append(("em", content))
        return f"<em>{content}</em>"

    def deleted(self, content: RenderContainer) -> str:
        self.calls.append(("deleted", content))
        return f"<del>{content}</del>"

    def tt(self, content: RenderContainer) -> str:
        self.calls.append(("tt", content))
        return f"<tt>{content}</tt>"

    def inline_plugin(self, source: str) -> str:
        self.calls.append(("inline_plugin", source))
        return f"<plugin>{source}</plugin>"


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def compile_doc(renderer):
    """Compile a document body (a title line is prepended) and return the renderer"""

    def run(body: str) -> RecordingRenderer:
        Compiler(renderer).compile("Title\n" + body)
        return renderer

    return run
