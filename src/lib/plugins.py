"""
Plugin implementations for Markdown output

Each plugin turns the arguments of a {{name args}} block into Markdown
(or Liquid/HTML where Markdown has no equivalent). Handlers take the
renderer first so they can reach attachments and footnotes.
"""

import re
from typing import Any, Callable, Dict, List, Optional

from ..models.plugins import PluginSpec, PluginCategory, PluginError


ANSI_GREEN_RE = re.compile(r"\x1b\[32m(.+?)\x1b\[0m", re.DOTALL)
ANSI_RED_RE = re.compile(r"\x1b\[31m(.+?)\x1b\[0m", re.DOTALL)


def escape_jekyllTag(text: str) -> str:
    """Keep Liquid from interpreting {{ }} inside attached sources"""
    return text.replace("{{", "\\{\\{").replace("}}", "\\}\\}")


def arg_get(args: tuple, index: int, default: Any = None) -> Any:
    return args[index] if len(args) > index else default


class PluginRegistry:
    """
    Registry of plugin specifications and handlers

    Maps plugin names (and aliases) to PluginSpec objects. Names that are
    not registered resolve to None and are rendered by the renderer's
    fallback.
    """

    def __init__(self) -> None:
        """Initialize the registry and register all built-in plugins"""
        self.specs: Dict[str, PluginSpec] = {}
        self.layoutPlugins_register()
        self.formattingPlugins_register()
        self.attachmentPlugins_register()
        self.bookPlugins_register()
        self.mediaPlugins_register()
        self.obsoletePlugins_register()

    def register(self, spec: PluginSpec) -> None:
        """Register a plugin specification under its name and aliases"""
        self.specs[spec.name] = spec
        for alias in spec.aliases:
            self.specs[alias] = spec

    def get(self, name: str) -> Optional[Callable[..., str]]:
        """
        Get plugin handler by name

        Args:
            name: Plugin name or alias

        Returns:
            Handler function or None if not registered
        """
        spec = self.specs.get(name)
        return spec.handler if spec else None

    def spec_get(self, name: str) -> Optional[PluginSpec]:
        return self.specs.get(name)

    def plugins_listByCategory(self, category: PluginCategory) -> List[PluginSpec]:
        """Get all plugins in a category, once each"""
        unique = {id(spec): spec for spec in self.specs.values()}
        return [spec for spec in unique.values() if spec.category == category]

    def layoutPlugins_register(self) -> None:
        """Register document layout plugins"""

        def toc_handler(renderer: Any, *args: Any) -> str:
            return "\n* Table of content\n{:toc}\n\n"

        def backnumber_handler(renderer: Any, *args: Any) -> str:
            tag = arg_get(args, 0)
            if tag is None:
                raise PluginError("backnumber needs a tag")
            return (
                f"\n{{% for post in site.tags.{tag} %}}\n"
                "  - [{{ post.title }}]({{ post.url }})\n"
                "{% endfor %}\n"
            )

        def br_handler(renderer: Any, *args: Any) -> str:
            return "<br />"

        self.register(PluginSpec(
            name='toc',
            category=PluginCategory.LAYOUT,
            description='Kramdown table of contents',
            handler=toc_handler,
            aliases=['toc_here'],
            examples=['{{toc}}'],
        ))

        self.register(PluginSpec(
            name='backnumber',
            category=PluginCategory.LAYOUT,
            description='List of posts carrying a tag',
            handler=backnumber_handler,
            examples=["{{backnumber('Ruby')}}"],
        ))

        self.register(PluginSpec(
            name='br',
            category=PluginCategory.LAYOUT,
            description='Line break',
            handler=br_handler,
            examples=['{{br}}'],
        ))

    def formattingPlugins_register(self) -> None:
        """Register inline formatting plugins"""

        def fn_handler(renderer: Any, *args: Any) -> str:
            """Footnote reference; the note text is collected by the renderer"""
            text = arg_get(args, 0)
            if text is None:
                raise PluginError("fn needs the footnote text")
            return renderer.footnote_add(str(text))

        def sub_handler(renderer: Any, *args: Any) -> str:
            return f"<sub>{arg_get(args, 0, '')}</sub>"

        def entity_handler(renderer: Any, *args: Any) -> str:
            code = arg_get(args, 0)
            if code is None:
                raise PluginError("e needs a character code")
            return f"&#{code};"

        self.register(PluginSpec(
            name='fn',
            category=PluginCategory.FORMATTING,
            description='Footnote',
            handler=fn_handler,
            examples=["{{fn('See the manual')}}"],
        ))

        self.register(PluginSpec(
            name='sub',
            category=PluginCategory.FORMATTING,
            description='Subscript',
            handler=sub_handler,
            examples=["H{{sub('2')}}O"],
        ))

        self.register(PluginSpec(
            name='e',
            category=PluginCategory.FORMATTING,
            description='Numeric character reference',
            handler=entity_handler,
            examples=['{{e(9829)}}'],
        ))

    def attachmentPlugins_register(self) -> None:
        """Register plugins that refer to files attached to the document"""

        def image_handler(renderer: Any, *args: Any) -> str:
            name = arg_get(args, 0)
            if name is None:
                raise PluginError("attachment image needs a file name")
            return f"![{name}]({renderer.attach_path(name)})"

        def anchor_handler(renderer: Any, *args: Any) -> str:
            name = arg_get(args, 0)
            if name is None:
                raise PluginError("attach_anchor needs a file name")
            return f"[{name}]({renderer.attach_path(name)})"

        def anchor_string_handler(renderer: Any, *args: Any) -> str:
            label, name = arg_get(args, 0), arg_get(args, 1)
            if name is None:
                raise PluginError("attach_anchor_string needs a label and a file name")
            return f"[{label}]({renderer.attach_path(name)})"

        def make_source_handler(language: str) -> Callable[..., str]:
            """Factory for plugins embedding an attached file as a code fence"""
            def handler(renderer: Any, *args: Any) -> str:
                name = arg_get(args, 0)
                if name is None:
                    raise PluginError("attached source needs a file name")
                source = renderer.attach_read(name)
                return f"\n```{language}\n{escape_jekyllTag(source)}\n```\n"
            return handler

        def ansi_screen_handler(renderer: Any, *args: Any) -> str:
            name = arg_get(args, 0)
            if name is None:
                raise PluginError("ansi_screen needs a file name")
            contents = renderer.attach_read(name)
            contents = ANSI_GREEN_RE.sub(r"<span style='color: lime'>\1</span>\n", contents)
            contents = ANSI_RED_RE.sub(r"<span style='color: red'>\1</span>\n", contents)
            return (
                '<pre class="screen" style="color: white; background-color: black; '
                'padding: 0.5em; width: 40.0em">\n'
                f"{contents}</pre>"
            )

        self.register(PluginSpec(
            name='attach_view',
            category=PluginCategory.ATTACHMENT,
            description='Attached image',
            handler=image_handler,
            aliases=['attach_image_anchor', 'attach_expandimg'],
            examples=["{{attach_view('figure1.png')}}"],
        ))

        self.register(PluginSpec(
            name='attach_anchor',
            category=PluginCategory.ATTACHMENT,
            description='Link to an attached file',
            handler=anchor_handler,
            examples=["{{attach_anchor('sample.tar.gz')}}"],
        ))

        self.register(PluginSpec(
            name='attach_anchor_string',
            category=PluginCategory.ATTACHMENT,
            description='Labelled link to an attached file',
            handler=anchor_string_handler,
            examples=["{{attach_anchor_string('the sources', 'sample.tar.gz')}}"],
        ))

        source_specs = [
            ('attach_rb', 'ruby', [], 'Attached Ruby source'),
            ('attach_src', '', ['attach_pre'], 'Attached source, no highlighting'),
            ('attach_html', 'html', [], 'Attached HTML source'),
        ]

        for name, language, aliases, desc in source_specs:
            self.register(PluginSpec(
                name=name,
                category=PluginCategory.ATTACHMENT,
                description=desc,
                handler=make_source_handler(language),
                aliases=aliases,
                examples=[f"{{{{{name}('sample')}}}}"],
            ))

        self.register(PluginSpec(
            name='ansi_screen',
            category=PluginCategory.ATTACHMENT,
            description='Attached terminal capture with ANSI colours',
            handler=ansi_screen_handler,
            examples=["{{ansi_screen('session.log')}}"],
        ))

    def bookPlugins_register(self) -> None:
        """Register book reference plugins (rendered by Liquid tags)"""

        def isbn_handler(renderer: Any, *args: Any) -> str:
            return f"{{% isbn('{arg_get(args, 0, '')}', '{arg_get(args, 1, '')}') %}}"

        def isbn_image_handler(renderer: Any, *args: Any) -> str:
            label = arg_get(args, 1) or ''
            return f"{{% isbn_image('{arg_get(args, 0, '')}', '{label}') %}}"

        def make_aligned_handler(tag: str) -> Callable[..., str]:
            def handler(renderer: Any, *args: Any) -> str:
                return f"{{% {tag}('{arg_get(args, 0, '')}') %}}"
            return handler

        self.register(PluginSpec(
            name='isbn',
            category=PluginCategory.BOOK,
            description='Book reference by ISBN',
            handler=isbn_handler,
            examples=["{{isbn('4774123456', 'Ruby book')}}"],
        ))

        self.register(PluginSpec(
            name='isbn_image',
            category=PluginCategory.BOOK,
            description='Book cover by ISBN',
            handler=isbn_image_handler,
            aliases=['isbnImg', 'amazon'],
            examples=["{{isbn_image('4774123456')}}"],
        ))

        for name, alias in [('isbn_image_left', 'isbnImgLeft'), ('isbn_image_right', 'isbnImgRight')]:
            self.register(PluginSpec(
                name=name,
                category=PluginCategory.BOOK,
                description=f'Book cover by ISBN, floated {name.rsplit("_", 1)[1]}',
                handler=make_aligned_handler(name),
                aliases=[alias],
            ))

    def mediaPlugins_register(self) -> None:
        """Register embedded media plugins"""

        def youtube_handler(renderer: Any, *args: Any) -> str:
            video = arg_get(args, 0)
            if video is None:
                raise PluginError("youtube needs a video id")
            return (
                '<object width="560" height="315">'
                f'<param name="movie" value="http://www.youtube.com/v/{video}"></param>'
                f'<embed src="http://www.youtube.com/v/{video}" '
                'type="application/x-shockwave-flash" width="560" height="315"></embed>'
                '</object>'
            )

        def speakerdeck_handler(renderer: Any, *args: Any) -> str:
            return f"\n[{arg_get(args, 0, '')}]({arg_get(args, 1, '')})"

        self.register(PluginSpec(
            name='youtube',
            category=PluginCategory.MEDIA,
            description='Embedded YouTube video',
            handler=youtube_handler,
            examples=["{{youtube('dQw4w9WgXcQ')}}"],
        ))

        self.register(PluginSpec(
            name='speakerdeck',
            category=PluginCategory.MEDIA,
            description='Link to a Speaker Deck presentation',
            handler=speakerdeck_handler,
            examples=["{{speakerdeck('Slides', 'https://speakerdeck.com/u/talk')}}"],
        ))

    def obsoletePlugins_register(self) -> None:
        """Register plugins for retired site features; they render nothing"""

        def empty_handler(renderer: Any, *args: Any) -> str:
            return ''

        for name, desc in [('comment', 'Comment form'), ('trackback', 'Trackback list')]:
            self.register(PluginSpec(
                name=name,
                category=PluginCategory.OBSOLETE,
                description=desc,
                handler=empty_handler,
            ))
