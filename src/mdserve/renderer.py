"""
Markdown to HTML conversion with code highlighting.
"""

import html
import logging
import os
from functools import lru_cache
from typing import Union

from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import RenderError

logger = logging.getLogger(__name__)

LIGHT_CODE_STYLE = 'default'
DARK_CODE_STYLE = 'github-dark'
HIGHLIGHT_CLASS = 'highlight'


def highlight_code(code: str, lang: str, attrs: str) -> str:
    """Highlight a fenced code block, or return '' to let markdown-it escape it."""
    if not lang:
        return ''

    if lang == 'mermaid':
        # Rendered client side by mermaid.js
        return f'<pre class="mermaid">{html.escape(code)}</pre>'

    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return ''

    formatter = HtmlFormatter(nowrap=True)
    highlighted = highlight(code, lexer, formatter)
    return (
        f'<pre class="{HIGHLIGHT_CLASS}"><code class="language-{html.escape(lang)}">'
        f'{highlighted}</code></pre>'
    )


def create_parser() -> MarkdownIt:
    """CommonMark with raw HTML, GFM tables and strikethrough."""
    md = MarkdownIt('commonmark', {'html': True, 'highlight': highlight_code})
    md.enable(['table', 'strikethrough'])
    return md


def decode_markdown(data: bytes) -> str:
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise RenderError(f"Document is not valid UTF-8: {e}") from e


class MarkdownRenderer:
    """Converts markdown documents to HTML fragments."""

    def __init__(self):
        self.md = create_parser()

    def render(self, content: Union[bytes, str]) -> str:
        """
        Convert markdown content to HTML.

        Raises:
            RenderError: If the content is not UTF-8 or conversion fails.
        """
        if isinstance(content, bytes):
            content = decode_markdown(content)

        try:
            return self.md.render(content)
        except Exception as e:
            raise RenderError(f"Error rendering markdown: {e}") from e


def get_document_title(content: str, file_path: str) -> str:
    """Extract title from markdown content, fallback to filename."""
    first_line = content.lstrip().split('\n', 1)[0].strip()
    if first_line.startswith('# '):
        return first_line[2:].strip()

    return os.path.splitext(os.path.basename(file_path))[0]


@lru_cache(maxsize=None)
def get_code_css(style: str) -> str:
    """Pygments stylesheet for highlighted code blocks in the given style."""
    return HtmlFormatter(style=style).get_style_defs(f'.{HIGHLIGHT_CLASS}')
