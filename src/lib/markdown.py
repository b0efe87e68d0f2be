"""
Markdown renderer for Jekyll sites

Implements the Renderer contract on top of kramdown-flavoured Markdown
with Liquid tags where Markdown falls short (code highlighting, post
lists, book covers). Output is collected line by line and returned by
finish(), followed by any footnotes the document defined.
"""

import re
from pathlib import Path
from typing import Any, List, Optional, Tuple
from urllib.parse import quote_plus

import yaml

from ..config import appsettings
from ..models.blocks import ListType
from ..models.plugins import PluginError
from ..models.renderer import ContainerKind, RenderContainer
from .lexer import HikiLexer, hiki_highlight, language_resolve
from .log import LOG
from .pluginutil import methodwords
from .plugins import PluginRegistry


FOOTNOTE_LINK_RE = re.compile(r"\[\[([^|]+?)\|(.+?)\]\]")
FOOTNOTE_PLUGIN_RE = re.compile(r"\{\{(.+?)\}\}")
HEADING_HASH_RE = re.compile(r"^(\s*)#")
ISSUE_FILE_RE = re.compile(r"\d{4}\Z")

BLADE_URL = "http://blade.nagaokaut.ac.jp/cgi-bin/scat.rb/ruby"

# Legacy wiki link names and the URLs they stand for
LEGACY_LINKS: List[Tuple[re.Pattern, Any]] = [
    (re.compile(r"ruby-list:(\d+)"), lambda m: f"{BLADE_URL}/ruby-list/{m.group(1)}"),
    (re.compile(r"ruby-dev:(\d+)"), lambda m: f"{BLADE_URL}/ruby-dev/{m.group(1)}"),
    (re.compile(r"ruby-talk:(\d+)"), lambda m: f"{BLADE_URL}/ruby-talk/{m.group(1)}"),
    (re.compile(r"ruby-core:(\d+)"), lambda m: f"{BLADE_URL}/ruby-core/{m.group(1)}"),
    (re.compile(r"RAA:(.+)"), lambda m: f"http://raa.ruby-lang.org/project/{m.group(1)}"),
    (
        re.compile(r"RWiki:(.+)"),
        lambda m: (
            "http://pub.cozmixng.org/~the-rwiki/rw-cgi.rb?cmd=view;name="
            + quote_plus(m.group(1), encoding="euc-jp", errors="replace")
        ),
    ),
    (
        re.compile(r"FirstStepRuby\Z"),
        lambda m: "https://github.com/rubima/rubima/blob/master/first_step_ruby/first-step-ruby-2.0.md",
    ),
]
BBS_LINK_RE = re.compile(r"\d{4}-bbs\Z")


def escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_htmlParam(text: str) -> str:
    return escape_html(text).replace('"', "&quot;")


def escape_markdown(text: str) -> str:
    """Keep a quoted line starting with # from becoming a heading"""
    return HEADING_HASH_RE.sub(r"\1\\#", text, count=1)


class MarkdownRenderer:
    """
    Renders compiler calls as Jekyll Markdown

    Responsibilities:
    - Front matter from the document's first line and file name
    - Block and inline Markdown syntax
    - Plugin dispatch through PluginRegistry with a fallback for unknown names
    - Footnote collection
    - Attachment paths and attached source files
    """

    def __init__(self, filename: str = "", registry: Optional[PluginRegistry] = None) -> None:
        """
        Args:
            filename: Source file name, e.g. "0042-FirstStep.hiki"
            registry: Plugin registry (default: built-in plugins)
        """
        self.filename = filename
        self.registry = registry or PluginRegistry()
        self.output: List[str] = []
        self.footnotes: List[str] = []
        self.footnote_count = 0

    # Lifecycle

    def reset(self) -> None:
        self.output = []
        self.footnotes = []
        self.footnote_count = 0

    def finish(self) -> str:
        self.puts()
        self.puts("\n".join(self.footnotes))
        return "".join(self.output)

    def puts(self, text: str = "") -> None:
        """Write text as a line (no extra newline if it already ends in one)"""
        self.output.append(text if text.endswith("\n") else text + "\n")

    def write(self, text: str) -> None:
        self.output.append(text)

    # Document naming

    def attachDir_name(self) -> str:
        name = Path(self.filename).name
        return name[:-len(".hiki")] if name.endswith(".hiki") else name

    def issue_is(self) -> bool:
        """Issue index pages are named by their four-digit issue number alone"""
        return bool(ISSUE_FILE_RE.match(self.attachDir_name()))

    def tags_make(self) -> str:
        parts = self.attachDir_name().split("-")
        if self.issue_is():
            return f"{parts[0]} index"
        return " ".join(parts[:2])

    def attach_path(self, name: str) -> str:
        return f"{appsettings.images_baseurl}/{self.attachDir_name()}/{name}"

    def attach_read(self, name: str) -> str:
        """
        Read an attached file of this document

        Raises:
            PluginError: If the file cannot be read
        """
        path = Path(appsettings.attach_dir) / self.attachDir_name() / name
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PluginError(f"Cannot read attachment {path}: {e}") from e

    # Structural

    def fileheader(self, text: str) -> None:
        """Emit YAML front matter; the first line is the post title"""
        front_matter = {
            "layout": appsettings.jekyll_layout,
            "title": text,
            "short_title": text,
        }
        if self.filename:
            front_matter["tags"] = self.tags_make()

        self.puts("---")
        self.write(yaml.safe_dump(front_matter, allow_unicode=True, sort_keys=False))
        self.puts("---")
        self.puts()

    def headline(self, level: int, title: RenderContainer) -> None:
        self.puts()
        self.puts("#" * (level + 1) + f" {title}")

    def list_start(self) -> None:
        self.puts()

    def listitem(self, list_type: ListType, item: RenderContainer, level: int) -> None:
        marker = "*" if list_type == ListType.UNORDERED else "1."
        self.puts(" " * (2 * level - 2) + f"{marker} {item}")

    def list_end(self) -> None:
        self.puts()

    def dlist_item(self, term: RenderContainer, definition: RenderContainer) -> None:
        if definition.is_empty():
            self.puts()
            self.puts(str(term))
        elif term.is_empty():
            self.puts(f": {definition}")
        else:
            self.puts()
            self.puts(str(term))
            self.puts(f": {definition}")

    def table_open(self) -> None:
        self.puts()

    def table_record_open(self) -> None:
        pass

    def table_data(
        self, item: RenderContainer, rowspan: Optional[int], colspan: Optional[int]
    ) -> None:
        if rowspan or colspan:
            LOG(f"Table cell spans dropped (rowspan={rowspan}, colspan={colspan})", level=2)
        self.write(f"| {item}")

    def table_record_close(self) -> None:
        self.puts("|")

    def table_head_line(self, columns: int) -> None:
        self.write("|---" * columns + "|\n")

    def table_close(self) -> None:
        self.puts()

    def blockquote_open(self) -> None:
        self.puts()

    def blockquote_line(self, line: RenderContainer) -> None:
        self.puts(f"> {escape_markdown(str(line))}")

    def blockquote_close(self) -> None:
        self.puts()

    def block_preformatted(self, text: str, language: Optional[str]) -> None:
        language = language_resolve(language)
        if language == HikiLexer.aliases[0]:
            self.htmlHighlight_write(text)
        else:
            self.highlight_write(text, language)

    def preformatted(self, text: str) -> None:
        self.highlight_write(text, "text")

    def highlight_write(self, text: str, language: str) -> None:
        self.puts()
        self.puts(f"{{% highlight {language} %}}")
        self.puts("{% raw %}")
        self.puts(text)
        self.puts("{% endraw %}")
        self.puts("{% endhighlight %}")
        self.puts()

    def htmlHighlight_write(self, text: str) -> None:
        """Pre-highlighted HTML, kept away from Liquid by a raw block"""
        self.puts()
        self.puts("{% raw %}")
        self.write(hiki_highlight(text))
        self.puts("{% endraw %}")
        self.puts()

    def paragraph(self, lines: RenderContainer) -> None:
        # Blank line before only, so consecutive paragraphs are not double spaced
        self.puts()
        self.puts(str(lines))

    def block_plugin(self, source: str) -> None:
        self.puts(self.plugin_render(source, "block_plugin"))

    # Inline

    def container(self, kind: ContainerKind = ContainerKind.INLINE) -> RenderContainer:
        return RenderContainer(kind)

    def text(self, raw: str) -> str:
        return escape_html(raw)

    def hyperlink(self, target: str, title: Any) -> str:
        if BBS_LINK_RE.match(target):
            return f" ~~{title}~~ "
        for pattern, rewrite in LEGACY_LINKS:
            match = pattern.match(target)
            if match:
                return f"[{title}]({rewrite(match)})"
        return f"[{title}]({target})"

    def image_hyperlink(self, target: str, alt: Optional[str] = None) -> str:
        if alt is None:
            alt = target.split("/")[-1]
        return f"![{escape_html(alt)}]({escape_htmlParam(target)})"

    def strong(self, content: RenderContainer) -> str:
        return f"__{content}__"

    def em(self, content: RenderContainer) -> str:
        return f"_{content}_"

    def deleted(self, content: RenderContainer) -> str:
        return f" ~~{content}~~ "

    def tt(self, content: RenderContainer) -> str:
        return f"`{content}`"

    def inline_plugin(self, source: str) -> str:
        return self.plugin_render(source, "inline_plugin")

    # Plugins

    def plugin_render(self, source: str, css_class: str) -> str:
        """
        Run a plugin through the registry

        Unknown names and handlers raising PluginError render the source
        inside a <div> so nothing from the document is lost. Any other
        exception from a handler propagates.
        """
        name, args = methodwords(source)
        handler = self.registry.get(name)
        if handler is None:
            LOG(f"Warning: Unknown plugin '{name}' in {self.filename}", level=1)
            return f'<div class="plugin {css_class}">{{{{{escape_html(source)}}}}}</div>'

        try:
            return handler(self, *args)
        except PluginError as e:
            LOG(f"Warning: plugin '{name}' failed in {self.filename}: {e}", level=1)
            return f'<div class="plugin {css_class}">{{{{{escape_html(source)}}}}}</div>'

    def footnote_add(self, text: str) -> str:
        """
        Record a footnote and return its reference

        Links and plugins inside the note are rendered here, since the
        note text is a plugin argument and never passes the compiler.
        """
        text = text.replace("&quot;", '"')
        text = FOOTNOTE_LINK_RE.sub(lambda m: self.hyperlink(m.group(2), m.group(1)), text)
        text = FOOTNOTE_PLUGIN_RE.sub(lambda m: self.inline_plugin(m.group(1)), text)
        self.footnote_count += 1
        self.footnotes.append(f"[^{self.footnote_count}]: {text}")
        return f"[^{self.footnote_count}]"
