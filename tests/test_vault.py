"""
Plugin vault tests

Tests escaping of {{...}} blocks with the quote-balance rule, restoring
them as literal text and evaluating them through a renderer.
"""

import pytest

from hikidown.config import AppSettings
from hikidown.lib.vault import InvariantError, PluginBlockVault, plugin_syntaxIsValid


class TestSyntaxCheck:
    """Test the plugin content validity rule"""

    def test_plain_call_is_valid(self):
        assert plugin_syntaxIsValid("toc")

    def test_balanced_quotes_are_valid(self):
        """Quoted strings may contain the closing marker"""
        assert plugin_syntaxIsValid("fn('a}}b')")
        assert plugin_syntaxIsValid('fn("x", \'y\')')

    def test_stray_quote_is_invalid(self):
        assert not plugin_syntaxIsValid("fn('a")
        assert not plugin_syntaxIsValid('say "hi')

    def test_escaped_quote_is_ignored(self):
        """Backslash-escaped quotes do not need a partner"""
        assert plugin_syntaxIsValid(r"fn('it\'s')")
        assert plugin_syntaxIsValid(r"fn(\")")


class TestEscape:
    """Test PluginBlockVault.escape()"""

    def test_block_replaced_by_token(self):
        """A well-formed block is stored and replaced"""
        vault = PluginBlockVault()
        escaped = vault.escape("see {{toc}} here")
        assert vault.blocks == ["toc"]
        assert "{{" not in escaped
        assert escaped == f"see {vault.sentinel}0{vault.sentinel} here"

    def test_quote_aware_close(self):
        """A }} inside a quoted string does not close the block"""
        vault = PluginBlockVault()
        escaped = vault.escape("x {{fn('a}}b')}} y")
        assert vault.blocks == ["fn('a}}b')"]
        assert escaped.endswith(" y")

    def test_multiline_block(self):
        """A quoted string may span lines"""
        vault = PluginBlockVault()
        vault.escape("{{fn('first\nsecond')}}\n")
        assert vault.blocks == ["fn('first\nsecond')"]

    def test_unterminated_block_stays_literal(self):
        """An opening marker without a valid close is kept as text"""
        vault = PluginBlockVault()
        assert vault.escape("a {{toc") == "a {{toc"
        assert vault.escape("a {{'open}} b") == "a {{'open}} b"
        assert vault.blocks == []

    def test_indices_follow_document_order(self):
        vault = PluginBlockVault()
        vault.escape("{{a}} and {{b}}")
        assert vault.blocks == ["a", "b"]
        assert vault.token_match(f"{vault.sentinel}1{vault.sentinel}") == 1

    def test_escape_resets_table(self):
        """Each escape() starts a new document"""
        vault = PluginBlockVault()
        vault.escape("{{a}}")
        vault.escape("{{b}}")
        assert vault.blocks == ["b"]

    def test_sentinel_avoids_document_text(self):
        """The sentinel never occurs in the source"""
        vault = PluginBlockVault()
        source = "nul \x00 inside {{toc}}"
        escaped = vault.escape(source)
        assert vault.sentinel not in source
        assert vault.restore(escaped) == source


class TestRestoreAndEvaluate:
    """Test turning placeholders back into text or plugin output"""

    def test_restore_round_trip(self):
        vault = PluginBlockVault()
        source = "a {{fn('x')}} b {{br}}"
        assert vault.restore(vault.escape(source)) == source

    def test_evaluate_orders_text_and_plugins(self, renderer):
        vault = PluginBlockVault()
        escaped = vault.escape("a {{br}} b")
        container = vault.evaluate(escaped, renderer)
        assert container.parts == ["a ", "<plugin>br</plugin>", " b"]

    def test_evaluate_skips_empty_segments(self, renderer):
        vault = PluginBlockVault()
        escaped = vault.escape("{{br}}")
        container = vault.evaluate(escaped, renderer)
        assert container.parts == ["<plugin>br</plugin>"]
        assert vault.evaluate("", renderer).parts == []

    def test_unknown_index_raises(self, renderer):
        """A token with no stored block is an internal error"""
        vault = PluginBlockVault()
        vault.escape("plain")
        with pytest.raises(InvariantError):
            vault.evaluate(f"{vault.sentinel}7{vault.sentinel}", renderer)
        with pytest.raises(InvariantError):
            vault.block_get(-1)


class TestSentinelPick:
    """Test AppSettings.sentinel_pick()"""

    def test_first_free_candidate(self):
        settings = AppSettings(placeholder_sentinels="\x00\ufdd0")
        assert settings.sentinel_pick("text") == "\x00"
        assert settings.sentinel_pick("te\x00xt") == "\ufdd0"

    def test_no_candidate_left(self):
        settings = AppSettings(placeholder_sentinels="\x00")
        with pytest.raises(ValueError):
            settings.sentinel_pick("\x00")
