"""
Block compiler for Hiki-style wiki markup

Drives a Renderer over a whole document.

Compilation runs in three phases:
1. Escaping: plugin blocks are moved into the vault (see vault.py)
2. Classification: each line is matched against the block patterns below,
   in order, and the matching block routine consumes every following line
   of its kind
3. Inline: block routines hand their text fragments to the InlineCompiler

Block syntax:
    // comment               ignored (also between dlist/table/quote lines)
    ! !! !!!                 headers
    * ** # ##                unordered / ordered list items
    :term:definition         definition list
    ||cell||!head||>^span    table rows
    ""quoted                 blockquote
    <space>text              indented preformatted
    <<<lang ... >>>          fenced preformatted
    (blank)                  separator
    anything else            paragraph

The first line of a document is always its file header.

Example:
    >>> compiler = Compiler(MarkdownRenderer("0001-intro.hiki"))
    >>> markdown = compiler.compile("Intro\\n!Title\\n'''bold''' text\\n")
"""

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from ..config import appsettings
from ..models.blocks import BlockKind, ListType
from ..models.renderer import ContainerKind, RenderContainer, Renderer
from ..models.tokens import TableCell
from .cursor import LineCursor
from .inline import BRACKET_LINK_PATTERN, InlineCompiler
from .log import LOG
from .markdown import MarkdownRenderer
from .vault import InvariantError, PluginBlockVault


WHITESPACE = " \t\r\n\v\f"

COMMENT_RE = re.compile(r"//")
HEADER_RE = re.compile(r"!+")
LIST_RE = re.compile(r"[*#]+")
DLIST_RE = re.compile(r":")
TABLE_RE = re.compile(r"\|\|")
BLOCKQUOTE_RE = re.compile(r"\"\"[ \t]?")
INDENTED_PRE_RE = re.compile(r"[ \t]")
BLOCK_PRE_OPEN_RE = re.compile(r"<<<\s*(\w+)?")
BLOCK_PRE_CLOSE_RE = re.compile(r">>>")
BLANK_RE = re.compile(r"$")

PARAGRAPH_END_RE = re.compile(
    "|".join(
        f"(?:{pattern.pattern})"
        for pattern in (
            BLANK_RE,
            HEADER_RE,
            LIST_RE,
            DLIST_RE,
            BLOCKQUOTE_RE,
            TABLE_RE,
            INDENTED_PRE_RE,
            BLOCK_PRE_OPEN_RE,
        )
    )
)

# Classification order; PARAGRAPH is the fallback
BLOCK_PATTERNS: List[Tuple[BlockKind, Pattern[str]]] = [
    (BlockKind.COMMENT, COMMENT_RE),
    (BlockKind.HEADER, HEADER_RE),
    (BlockKind.LIST, LIST_RE),
    (BlockKind.DLIST, DLIST_RE),
    (BlockKind.TABLE, TABLE_RE),
    (BlockKind.BLOCKQUOTE, BLOCKQUOTE_RE),
    (BlockKind.INDENTED_PRE, INDENTED_PRE_RE),
    (BlockKind.BLOCK_PRE, BLOCK_PRE_OPEN_RE),
    (BlockKind.BLANK, BLANK_RE),
]

BRACKET_LINK_RE = re.compile(BRACKET_LINK_PATTERN)
TABLE_SPAN_RE = re.compile(r"[\^>]*")


def strip(text: str) -> str:
    return text.strip(WHITESPACE)


def lstrip(text: str) -> str:
    return text.lstrip(WHITESPACE)


def rstrip(text: str) -> str:
    return text.rstrip(WHITESPACE)


def chomp(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def block_classify(line: str) -> BlockKind:
    """
    Decide which block routine handles a line

    Example:
        >>> block_classify("||a||b")
        <BlockKind.TABLE: 'table'>
        >>> block_classify("plain words")
        <BlockKind.PARAGRAPH: 'paragraph'>
    """
    for kind, pattern in BLOCK_PATTERNS:
        if pattern.match(line):
            return kind
    return BlockKind.PARAGRAPH


def dlitem_split(text: str) -> Tuple[str, str]:
    """
    Split a definition line at the first ':' outside a [[...]] link

    Example:
        >>> dlitem_split("[[Ruby|http://ruby-lang.org]]:a language")
        ('[[Ruby|http://ruby-lang.org]]', 'a language')
        >>> dlitem_split("no separator")
        ('no separator', '')
    """
    pos = 0
    while pos < len(text):
        if text.startswith("[[", pos):
            link = BRACKET_LINK_RE.match(text, pos)
            if link:
                pos = link.end()
                continue
        if text[pos] == ":":
            return text[:pos], text[pos + 1:]
        pos += 1
    return text, ""


def columns_split(text: str) -> List[str]:
    """
    Split a table row (without its leading ||) into raw cells

    A trailing || does not open an extra empty cell.

    Example:
        >>> columns_split("a||b||\\n")
        ['a', 'b']
    """
    columns = text.split("||")
    while columns and columns[-1] == "":
        columns.pop()
    if columns and not chomp(columns[-1]):
        columns.pop()
    return columns


def span_count(prefix: str, marker: str) -> Optional[int]:
    """1 + occurrences of marker in prefix, or None when it does not occur"""
    count = prefix.count(marker)
    return count + 1 if count else None


def cell_parse(column: str) -> TableCell:
    """
    Parse the header flag and span prefix of one table cell

    Example:
        >>> cell_parse(">^^foo")
        TableCell(text='foo', header=False, rowspan=3, colspan=2)
    """
    text = chomp(column)
    header = text.startswith("!")
    if header:
        text = text[1:]
    prefix = TABLE_SPAN_RE.match(text).group(0)
    return TableCell(
        text=text[len(prefix):],
        header=header,
        rowspan=span_count(prefix, "^"),
        colspan=span_count(prefix, ">"),
    )


class Compiler:
    """
    Compiles one wiki document per compile() call into renderer output

    Handles:
    - Ordered block classification with lookahead/pushback
    - Grouping of consecutive lines into one block
    - Comment lines inside definition lists, tables and blockquotes
    - Whole-paragraph plugins rendered as block plugins
    """

    def __init__(
        self,
        renderer: Renderer,
        level: Optional[int] = None,
        plugin_syntax: Optional[Callable[[str], bool]] = None,
    ) -> None:
        """
        Initialize compiler with its output backend

        Args:
            renderer: Renderer receiving structural and inline calls
            level: Heading level of a single '!' (default: settings)
            plugin_syntax: Validity test for {{...}} content (default:
                           balanced quotes)
        """
        self.renderer = renderer
        self.level = level if level is not None else appsettings.header_level
        if not 1 <= self.level <= 6:
            raise ValueError(f"Header level must be between 1 and 6, got {self.level}")
        self.header_re = re.compile(f"!{{1,{7 - self.level}}}")
        self.vault = PluginBlockVault(plugin_syntax)
        self.inline = InlineCompiler(renderer, self.vault)

        self.routines: Dict[BlockKind, Callable[[LineCursor], None]] = {
            BlockKind.COMMENT: self.comment_compile,
            BlockKind.HEADER: self.header_compile,
            BlockKind.LIST: self.list_compile,
            BlockKind.DLIST: self.dlist_compile,
            BlockKind.TABLE: self.table_compile,
            BlockKind.BLOCKQUOTE: self.blockquote_compile,
            BlockKind.INDENTED_PRE: self.indentedPre_compile,
            BlockKind.BLOCK_PRE: self.blockPre_compile,
            BlockKind.BLANK: self.blank_compile,
            BlockKind.PARAGRAPH: self.paragraph_compile,
        }

    def compile(self, source: str) -> str:
        """
        Compile a complete document

        Resets the renderer first, so consecutive calls are independent.

        Args:
            source: Raw wiki text

        Returns:
            Whatever renderer.finish() produces

        Raises:
            InvariantError: On internal placeholder or token inconsistencies
        """
        LOG("Starting compilation...", level=2)
        self.renderer.reset()

        escaped = self.vault.escape(source)
        self.blocks_compile(LineCursor.from_text(escaped))
        return self.renderer.finish()

    def blocks_compile(self, cursor: LineCursor) -> None:
        first = cursor.gets()
        if first is None:
            return
        self.fileheader_compile(first)

        while True:
            line = cursor.peek()
            if line is None:
                break
            kind = block_classify(line)
            LOG(f"Line {cursor.lineno + 1}: {kind.value}", level=3)
            self.routines[kind](cursor)

    def inline_compile(self, text: str, container: Optional[RenderContainer] = None) -> RenderContainer:
        return self.inline.inline_compile(text, container)

    def fileheader_compile(self, line: str) -> None:
        self.renderer.fileheader(self.vault.restore(chomp(line)))

    def comments_skip(self, cursor: LineCursor) -> None:
        for _ in cursor.each_while(COMMENT_RE):
            pass

    def comment_compile(self, cursor: LineCursor) -> None:
        cursor.gets()

    def blank_compile(self, cursor: LineCursor) -> None:
        cursor.gets()

    def header_compile(self, cursor: LineCursor) -> None:
        """! is self.level, each further ! one deeper (capped at level 6)"""
        line = cursor.gets()
        marks = self.header_re.match(line).group(0)
        level = self.level + len(marks) - 1
        self.renderer.headline(level, self.inline_compile(strip(line[len(marks):])))

    def list_compile(self, cursor: LineCursor) -> None:
        """
        Render consecutive list lines as one list

        The marker run length is the nesting level; the first marker
        character alone decides between ordered and unordered.
        """
        self.renderer.list_start()
        for line in cursor.each_while(LIST_RE):
            marks = LIST_RE.match(line).group(0)
            list_type = ListType.UNORDERED if marks[0] == "*" else ListType.ORDERED
            item = strip(line[len(marks):])
            self.renderer.listitem(list_type, self.inline_compile(item), len(marks))
        self.renderer.list_end()

    def dlist_compile(self, cursor: LineCursor) -> None:
        for line in cursor.each_while(DLIST_RE):
            term, definition = dlitem_split(chomp(line)[1:])
            self.renderer.dlist_item(
                self.inline_compile(term), self.inline_compile(definition)
            )
            self.comments_skip(cursor)

    def table_compile(self, cursor: LineCursor) -> None:
        """
        Render consecutive || rows as one table

        A row with any '!' cell is followed by a header separator line
        sized to that row's cell count.
        """
        rows = []
        for line in cursor.each_while(TABLE_RE):
            rows.append(line)
            self.comments_skip(cursor)

        self.renderer.table_open()
        for row in rows:
            self.renderer.table_record_open()
            cells = [cell_parse(column) for column in columns_split(row[2:])]
            for cell in cells:
                self.renderer.table_data(
                    self.inline_compile(cell.text), cell.rowspan, cell.colspan
                )
            self.renderer.table_record_close()
            if any(cell.header for cell in cells):
                self.renderer.table_head_line(len(cells))
        self.renderer.table_close()

    def blockquote_compile(self, cursor: LineCursor) -> None:
        """Quoted lines get plugin evaluation but no inline markup"""
        self.renderer.blockquote_open()
        for line in cursor.each_while(BLOCKQUOTE_RE):
            quoted = chomp(line[BLOCKQUOTE_RE.match(line).end():])
            self.renderer.blockquote_line(self.vault.evaluate(quoted, self.renderer))
            self.comments_skip(cursor)
        self.renderer.blockquote_close()

    def indentedPre_compile(self, cursor: LineCursor) -> None:
        lines = [rstrip(line[1:]) for line in cursor.lines_while(INDENTED_PRE_RE)]
        self.renderer.preformatted(self.vault.restore("\n".join(lines)))

    def blockPre_compile(self, cursor: LineCursor) -> None:
        """
        Render <<<lang ... >>> as one literal block

        A missing >>> runs the block to the end of the document.
        """
        match = BLOCK_PRE_OPEN_RE.match(cursor.gets() or "")
        if not match:
            raise InvariantError("Fenced block dispatched without an opening <<<")
        text = chomp("".join(cursor.lines_until(BLOCK_PRE_CLOSE_RE)))
        cursor.gets()
        self.renderer.block_preformatted(self.vault.restore(text), match.group(1))

    def paragraph_compile(self, cursor: LineCursor) -> None:
        """
        Render lines up to the next block start as one paragraph

        A paragraph that is a single placeholder and nothing else becomes a
        block plugin instead.
        """
        lines = [
            line for line in cursor.lines_until(PARAGRAPH_END_RE)
            if not COMMENT_RE.match(line)
        ]

        if len(lines) == 1:
            index = self.vault.token_match(strip(lines[0]))
            if index is not None:
                self.renderer.block_plugin(self.vault.block_get(index))
                return

        paragraph = self.renderer.container(ContainerKind.PARAGRAPH)
        for line in lines:
            paragraph.append(self.inline_compile(chomp(lstrip(line))))
        self.renderer.paragraph(paragraph)


def to_markdown(filename: str, source: str, level: Optional[int] = None) -> str:
    """
    Convert one wiki document to Jekyll Markdown

    Args:
        filename: Source file name (drives front matter tags and attachments)
        source: Raw wiki text
        level: Optional base heading level

    Returns:
        Markdown document
    """
    return Compiler(MarkdownRenderer(filename), level=level).compile(source)
