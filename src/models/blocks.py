"""
Block kinds recognised by the line classifier

Each kind is tried against the next line in the order the members are
declared; PARAGRAPH is the fallback and has no pattern of its own.
"""

from enum import Enum


class BlockKind(Enum):
    """
    Structural kinds of a wiki block

    Declaration order is classification priority.
    """
    COMMENT = "comment"            # // ...
    HEADER = "header"              # ! ... !!!!!!
    LIST = "list"                  # * / # runs
    DLIST = "dlist"                # :term:definition
    TABLE = "table"                # ||cell||cell
    BLOCKQUOTE = "blockquote"      # ""quoted
    INDENTED_PRE = "indented_pre"  # leading space or tab
    BLOCK_PRE = "block_pre"        # <<<lang ... >>>
    BLANK = "blank"
    PARAGRAPH = "paragraph"


class ListType(Enum):
    """List flavour, decided by the first marker character of an item"""
    UNORDERED = "*"
    ORDERED = "#"
