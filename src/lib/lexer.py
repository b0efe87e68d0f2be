"""
Pygments support for Hiki wiki markup

Provides a lexer for the wiki dialect itself (so <<<hiki blocks that show
wiki source can be highlighted) and resolves the language tag of fenced
blocks to a canonical Pygments alias.

Token types:
- Comment.Single: // comment lines
- Generic.Heading: ! header lines
- Keyword: list, definition, table and quote markers
- Name.Function: {{plugin}} blocks
- Name.Tag: [[links]] and bare URIs
- Generic.Strong / Generic.Emph / Generic.Deleted / String.Backtick: spans
"""

from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import RegexLexer, bygroups, default
from pygments.lexers import get_lexer_by_name
from pygments.token import (
    Text,
    Comment,
    Generic,
    Keyword,
    Name,
    Punctuation,
    String,
)
from pygments.util import ClassNotFound

from .log import LOG


class HikiLexer(RegexLexer):
    """
    Lexer for Hiki wiki markup

    Example:
        !Title
        * item with [[a link|http://example.org/]]
        {{toc}}

    Tokens:
        !Title → Generic.Heading
        * → Keyword
        [[a link|http://example.org/]] → Name.Tag
        {{toc}} → Name.Function
    """

    name = 'Hiki'
    aliases = ['hiki', 'hikidoc']
    filenames = ['*.hiki']

    tokens = {
        'root': [
            (r'//.*?$', Comment.Single),
            (r'!+.*?$', Generic.Heading),
            (r"<<<[ \t]*\w*[ \t]*\n", Punctuation, "preformatted"),
            (r'^[*#]+', Keyword),
            (r'^:', Keyword),
            (r'^""', Keyword),
            (r'\|\|[!^>]*', Keyword),
            (r'\n', Text),
            default("inline"),
        ],

        'inline': [
            (r'\n', Text, '#pop'),
            (r'\{\{.*?\}\}', Name.Function),
            (r'\[\[.+?\]\]', Name.Tag),
            (r"(?:https?|ftp|file|mailto):[A-Za-z0-9;/?:@&=+$,\-_.!~*'()#%]+", Name.Tag),
            (r"'''.+?'''", Generic.Strong),
            (r"''.+?''", Generic.Emph),
            (r'==.+?==', Generic.Deleted),
            (r'``.+?``', String.Backtick),
            (r'\|\|[!^>]*', Keyword),
            (r"[^\n{\[hfm'=`|]+", Text),
            (r'.', Text),
        ],

        'preformatted': [
            (r'(>>>)(.*?$)', bygroups(Punctuation, Text), '#pop'),
            (r".*\n", String),
            (r".+", String),
        ],
    }


def language_resolve(tag: Optional[str]) -> str:
    """
    Map a fenced block's language tag to a Pygments alias

    Args:
        tag: Text after <<< (may be None)

    Returns:
        Canonical alias ('python' for 'py'), or 'text' when no lexer knows it

    Example:
        >>> language_resolve("RB")
        'ruby'
        >>> language_resolve(None)
        'text'
    """
    if not tag:
        return 'text'
    name = tag.lower()
    if name in HikiLexer.aliases:
        return HikiLexer.aliases[0]
    try:
        return get_lexer_by_name(name).aliases[0]
    except ClassNotFound:
        LOG(f"Warning: no lexer for code block language '{tag}'", level=1)
        return 'text'


def hiki_highlight(text: str) -> str:
    """
    Highlight wiki source as self-contained HTML

    Jekyll's highlighter has no lexer for the wiki dialect, so <<<hiki
    blocks are highlighted here, with inline styles so no stylesheet is
    needed.
    """
    formatter = HtmlFormatter(style='monokai', noclasses=True)
    return highlight(text, HikiLexer(), formatter)
