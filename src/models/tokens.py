"""
Token models for the escape and inline stages

Type-safe structures passed between the plugin vault, the block compiler
and the inline compiler. None of them outlive a single compilation pass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class PlaceholderToken:
    """
    Stand-in for an extracted {{...}} plugin block

    The vault replaces every well-formed plugin block with one of these,
    rendered into the escaped text as sentinel + index + sentinel. The
    sentinel is chosen per document so it never occurs in the source.

    Attributes:
        index: Position of the block source in the vault's table
        sentinel: Marker character framing the index

    Example:
        >>> str(PlaceholderToken(index=3, sentinel="\\x00"))
        '\\x003\\x00'
    """
    index: int
    sentinel: str

    def __str__(self) -> str:
        return f"{self.sentinel}{self.index}{self.sentinel}"


class ModifierKind(Enum):
    """Span modifier delimiters, longest first"""
    STRONG = "'''"
    EM = "''"
    DEL = "=="
    TT = "``"


@dataclass
class ModifierSpan:
    """
    A span modifier split into its delimiter kind and inner text

    Example:
        "'''bold'''" -> ModifierSpan(kind=ModifierKind.STRONG, inner="bold")
    """
    kind: ModifierKind
    inner: str


@dataclass
class BracketLink:
    """
    Content of a [[...]] link

    Attributes:
        target: Link target as written (before scheme normalisation)
        title: Text before the last '|', or None when the link has no title
    """
    target: str
    title: Optional[str] = None


@dataclass
class TableCell:
    """
    One || separated table cell after prefix parsing

    Attributes:
        text: Cell content with header and span prefixes removed
        header: Cell was prefixed with '!'
        rowspan: 1 + number of '^' in the span prefix, None when absent
        colspan: 1 + number of '>' in the span prefix, None when absent

    Example:
        ">^^foo" -> TableCell(text="foo", header=False, rowspan=3, colspan=2)
    """
    text: str
    header: bool = False
    rowspan: Optional[int] = None
    colspan: Optional[int] = None
