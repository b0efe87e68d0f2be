"""
Lexer tests

Tests the Pygments lexer for wiki markup and code block language
resolution.
"""

from pygments.token import Comment, Generic, Keyword, Name, String

from hikidown.lib.lexer import HikiLexer, hiki_highlight, language_resolve


def tokens_of(text):
    return [(token, value) for token, value in HikiLexer().get_tokens(text) if value.strip()]


class TestHikiLexer:
    """Test token types produced by HikiLexer"""

    def test_header_and_comment(self):
        tokens = tokens_of("!Title\n// note\n")
        assert (Generic.Heading, "!Title") in tokens
        assert (Comment.Single, "// note") in tokens

    def test_list_marker_and_link(self):
        tokens = tokens_of("* see [[Ruby|http://www.ruby-lang.org/]]\n")
        assert (Keyword, "*") in tokens
        assert (Name.Tag, "[[Ruby|http://www.ruby-lang.org/]]") in tokens

    def test_plugin_and_spans(self):
        tokens = tokens_of("{{toc}} '''b''' ''e'' ==d== ``t``\n")
        assert (Name.Function, "{{toc}}") in tokens
        assert (Generic.Strong, "'''b'''") in tokens
        assert (Generic.Emph, "''e''") in tokens
        assert (Generic.Deleted, "==d==") in tokens
        assert (String.Backtick, "``t``") in tokens

    def test_fenced_block_is_literal(self):
        tokens = tokens_of("<<<ruby\n'''not strong'''\n>>>\n")
        assert (Generic.Strong, "'''not strong'''") not in tokens
        assert any(token is String and "not strong" in value for token, value in tokens)

    def test_text_is_preserved(self):
        """Lexing loses no characters"""
        source = "Title\n!Head\n||!a||b\n\"\"quote\n<<<\ncode\n>>>\nplain http://x.org/ text\n"
        assert "".join(value for _, value in HikiLexer().get_tokens(source)) == source


class TestLanguageResolve:
    """Test language_resolve()"""

    def test_known_language(self):
        assert language_resolve("ruby") == "ruby"
        assert language_resolve("RB") == "ruby"
        assert language_resolve("py") == "python"

    def test_missing_tag(self):
        assert language_resolve(None) == "text"
        assert language_resolve("") == "text"

    def test_unknown_language(self):
        assert language_resolve("nosuchlanguage") == "text"

    def test_wiki_itself(self):
        assert language_resolve("hikidoc") == "hiki"


class TestHikiHighlight:
    """Test HTML highlighting of wiki source"""

    def test_inline_styles(self):
        html = hiki_highlight("!Title\n")
        assert html.startswith('<div class="highlight"')
        assert "style=" in html
        assert "Title" in html
