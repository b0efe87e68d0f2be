"""
Plugin tests

Tests plugin source tokenizing, the registry and the built-in handlers.
"""

import pytest

from hikidown.lib.markdown import MarkdownRenderer
from hikidown.lib.pluginutil import methodwords
from hikidown.lib.plugins import PluginRegistry, escape_jekyllTag
from hikidown.models.plugins import PluginCategory, PluginError, PluginSpec


class TestMethodwords:
    """Test methodwords() tokenizing"""

    def test_name_only(self):
        assert methodwords("toc") == ("toc", [])

    def test_paren_call(self):
        assert methodwords("isbn_image('4774123456', \"Ruby book\")") == (
            "isbn_image", ["4774123456", "Ruby book"]
        )

    def test_space_call(self):
        assert methodwords("attach_anchor_string 'sources', 'src.tar.gz'") == (
            "attach_anchor_string", ["sources", "src.tar.gz"]
        )

    def test_numbers_and_constants(self):
        assert methodwords("e(9829)") == ("e", [9829])
        assert methodwords("f 1.5, -2, nil, true, false") == ("f", [1.5, -2, None, True, False])

    def test_escapes_in_strings(self):
        assert methodwords(r"fn('it\'s')") == ("fn", ["it's"])

    def test_string_keeps_markup(self):
        assert methodwords("fn('see [[a|b]], ok')") == ("fn", ["see [[a|b]], ok"])

    def test_bare_word(self):
        assert methodwords("backnumber Ruby") == ("backnumber", ["Ruby"])

    def test_no_name(self):
        assert methodwords("'just a string'") == ("", [])
        assert methodwords("") == ("", [])


class TestRegistry:
    """Test PluginRegistry lookups"""

    def test_builtin_names(self):
        registry = PluginRegistry()
        for name in ["toc", "br", "fn", "e", "sub", "isbn_image", "attach_view", "youtube"]:
            assert registry.get(name) is not None

    def test_aliases_share_spec(self):
        registry = PluginRegistry()
        assert registry.spec_get("amazon") is registry.spec_get("isbn_image")
        assert registry.spec_get("attach_pre").matches("attach_src")
        assert registry.spec_get("toc_here").matches("toc_here")

    def test_unknown_name(self):
        assert PluginRegistry().get("no_such_plugin") is None

    def test_list_by_category(self):
        registry = PluginRegistry()
        names = [spec.name for spec in registry.plugins_listByCategory(PluginCategory.BOOK)]
        assert sorted(names) == ["isbn", "isbn_image", "isbn_image_left", "isbn_image_right"]

    def test_register_custom(self):
        registry = PluginRegistry()
        registry.register(PluginSpec(
            name="shout",
            category=PluginCategory.FORMATTING,
            description="Upper case",
            handler=lambda renderer, text: text.upper(),
            aliases=["yell"],
        ))
        assert registry.get("yell")(None, "hi") == "HI"


class TestHandlers:
    """Test built-in handler output"""

    def run(self, source, filename="0042-Sample.hiki"):
        renderer = MarkdownRenderer(filename)
        return renderer, renderer.inline_plugin(source)

    def test_toc(self):
        _, result = self.run("toc")
        assert "{:toc}" in result

    def test_br_and_entity(self):
        assert self.run("br")[1] == "<br />"
        assert self.run("e(9829)")[1] == "&#9829;"
        assert self.run("sub('2')")[1] == "<sub>2</sub>"

    def test_attach_view(self):
        _, result = self.run("attach_view('fig.png')")
        assert result == "![fig.png]({{site.baseurl}}/images/0042-Sample/fig.png)"

    def test_attach_anchor_string(self):
        _, result = self.run("attach_anchor_string('code', 'src.zip')")
        assert result == "[code]({{site.baseurl}}/images/0042-Sample/src.zip)"

    def test_isbn_image(self):
        assert self.run("isbn_image('4774123456')")[1] == "{% isbn_image('4774123456', '') %}"
        assert self.run("isbnImgLeft('4774123456')")[1] == "{% isbn_image_left('4774123456') %}"

    def test_backnumber(self):
        _, result = self.run("backnumber('Ruby')")
        assert "site.tags.Ruby" in result

    def test_obsolete_render_nothing(self):
        assert self.run("comment")[1] == ""
        assert self.run("trackback")[1] == ""

    def test_footnote(self):
        renderer, result = self.run("fn('See [[docs|http://example.org/]]')")
        assert result == "[^1]"
        assert renderer.footnotes == ["[^1]: See [docs](http://example.org/)"]

    def test_attach_src_reads_file(self, tmp_path, monkeypatch):
        from hikidown.config import appsettings

        folder = tmp_path / "0042-Sample"
        folder.mkdir()
        (folder / "hello.rb").write_text("puts '{{x}}'\n", encoding="utf-8")
        monkeypatch.setattr(appsettings, "attach_dir", str(tmp_path))

        _, result = self.run("attach_rb('hello.rb')")
        assert result == "\n```ruby\nputs '\\{\\{x\\}\\}'\n\n```\n"

    def test_missing_attachment_falls_back(self, tmp_path, monkeypatch):
        from hikidown.config import appsettings

        monkeypatch.setattr(appsettings, "attach_dir", str(tmp_path))
        _, result = self.run("attach_src('missing.txt')")
        assert result == "<div class=\"plugin inline_plugin\">{{attach_src('missing.txt')}}</div>"

    def test_missing_argument_falls_back(self):
        _, result = self.run("youtube")
        assert result.startswith('<div class="plugin inline_plugin">')

    def test_handler_raises_plugin_error_directly(self):
        handler = PluginRegistry().get("fn")
        with pytest.raises(PluginError):
            handler(MarkdownRenderer())

    def test_handler_bug_propagates(self):
        """Only PluginError is turned into the fallback markup"""
        def broken(renderer, *args):
            raise TypeError("bug")

        registry = PluginRegistry()
        registry.register(PluginSpec(
            name="broken",
            category=PluginCategory.FORMATTING,
            description="Always fails",
            handler=broken,
        ))
        renderer = MarkdownRenderer("0042-Sample.hiki", registry=registry)
        with pytest.raises(TypeError):
            renderer.inline_plugin("broken")


class TestJekyllEscaping:
    def test_escape_jekyll_tag(self):
        assert escape_jekyllTag("{{ a }}") == "\\{\\{ a \\}\\}"
