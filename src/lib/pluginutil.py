"""
Plugin source tokenizer

Splits the text of a {{...}} block into a plugin name and its arguments.
Both call styles of the wiki are accepted:

    {{isbn_image '4774123456', 'Ruby book'}}
    {{isbn_image('4774123456', 'Ruby book')}}
"""

import re
from typing import Any, List, Tuple


NAME_RE = re.compile(r"\s*([A-Za-z_]\w*[?!]?)")
ARG_RE = re.compile(
    r"""
    \s*(?:
        "(?P<dq>(?:[^"\\]|\\.)*)"
      | '(?P<sq>(?:[^'\\]|\\.)*)'
      | (?P<float>[-+]?\d+\.\d+)(?![\w.])
      | (?P<int>[-+]?\d+)(?![\w.])
      | (?P<word>[^\s,()'"]+)
    )
    """,
    re.VERBOSE | re.DOTALL,
)
OPEN_PAREN_RE = re.compile(r"\s*\(")
SEPARATOR_RE = re.compile(r"\s*,?")
BACKSLASH_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

WORD_CONSTANTS = {"nil": None, "true": True, "false": False}


def quoted_unescape(text: str) -> str:
    return BACKSLASH_ESCAPE_RE.sub(r"\1", text)


def methodwords(source: str) -> Tuple[str, List[Any]]:
    """
    Tokenize plugin source into name and arguments

    Strings lose their quotes and backslash escapes, numbers become int or
    float, nil/true/false become None/True/False and any other bare word is
    kept as a string. Scanning stops at the first closing parenthesis or at
    text that is not an argument.

    Args:
        source: Text between {{ and }}

    Returns:
        (name, args); name is "" when the source does not start with one

    Example:
        >>> methodwords("isbn_image('4774123456', \\"Ruby book\\")")
        ('isbn_image', ['4774123456', 'Ruby book'])
        >>> methodwords("e 9829")
        ('e', [9829])
        >>> methodwords("toc")
        ('toc', [])
    """
    name_match = NAME_RE.match(source)
    if not name_match:
        return "", []
    name = name_match.group(1)
    pos = name_match.end()

    paren = OPEN_PAREN_RE.match(source, pos)
    if paren:
        pos = paren.end()

    args: List[Any] = []
    while pos < len(source):
        match = ARG_RE.match(source, pos)
        if not match:
            break
        if match.group("dq") is not None:
            args.append(quoted_unescape(match.group("dq")))
        elif match.group("sq") is not None:
            args.append(quoted_unescape(match.group("sq")))
        elif match.group("float") is not None:
            args.append(float(match.group("float")))
        elif match.group("int") is not None:
            args.append(int(match.group("int")))
        else:
            word = match.group("word")
            args.append(WORD_CONSTANTS.get(word, word))
        pos = SEPARATOR_RE.match(source, match.end()).end()

    return name, args
