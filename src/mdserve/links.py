"""
Link rewriting for served documents.

Two passes keep links working once files are served over HTTP:

1. Wiki links (``[[Some Page]]``) are expanded in the markdown source before
   rendering. They always point at the serving root.
2. Relative ``href`` values that target markdown files are resolved in the
   rendered HTML against the web path of the page being served.
"""

import posixpath
from dataclasses import dataclass
from typing import Iterator, List
from urllib.parse import quote, urlsplit

MARKDOWN_SUFFIX = '.md'


@dataclass(frozen=True)
class WikiLink:
    start: int
    end: int
    label: str


@dataclass(frozen=True)
class HrefAttribute:
    value_start: int
    value_end: int
    value: str


class WikiLinkMatcher:
    """Finds ``[[Text]]`` spans in markdown source."""

    OPEN = '[['
    CLOSE = ']]'
    FORBIDDEN = frozenset('[]\n')

    def iter_matches(self, text: str) -> Iterator[WikiLink]:
        position = 0
        while True:
            start = text.find(self.OPEN, position)
            if start == -1:
                return
            label_start = start + len(self.OPEN)
            close = text.find(self.CLOSE, label_start)
            if close == -1:
                return

            label = text[label_start:close]
            if any(char in self.FORBIDDEN for char in label):
                position = start + 1
                continue

            yield WikiLink(start=start, end=close + len(self.CLOSE), label=label)
            position = close + len(self.CLOSE)


class HrefMatcher:
    """Finds quoted ``href`` attribute values in an HTML fragment."""

    ATTRIBUTE = 'href='
    QUOTES = ('"', "'")

    def iter_matches(self, html: str) -> Iterator[HrefAttribute]:
        position = 0
        while True:
            found = html.find(self.ATTRIBUTE, position)
            if found == -1:
                return
            position = found + len(self.ATTRIBUTE)

            # must be a whole attribute name, e.g. not "data-href="
            if found > 0 and not html[found - 1].isspace():
                continue
            if position >= len(html) or html[position] not in self.QUOTES:
                continue

            quote_char = html[position]
            value_start = position + 1
            value_end = html.find(quote_char, value_start)
            if value_end == -1:
                return

            yield HrefAttribute(value_start=value_start, value_end=value_end, value=html[value_start:value_end])
            position = value_end + 1


def is_markdown_href(href: str) -> bool:
    """True for hrefs whose path ends in .md, with an optional #fragment."""
    path = href.partition('#')[0]
    return path.lower().endswith(MARKDOWN_SUFFIX)


def slugify(text: str) -> str:
    """
    Turn wiki link text into a file slug.

    Lowercases, maps every run of characters outside ``[a-z0-9-]`` to a
    single hyphen and trims hyphens from both ends. Empty text gives an
    empty slug.
    """
    chars: List[str] = []
    for char in text.lower():
        allowed = char == '-' or ('a' <= char <= 'z') or ('0' <= char <= '9')
        if not allowed:
            char = '-'
        if char == '-' and chars and chars[-1] == '-':
            continue
        chars.append(char)
    return ''.join(chars).strip('-')


def expand_wiki_links(source: str) -> str:
    """Replace every ``[[Text]]`` with ``[Text](/<slug>.md)``."""
    matcher = WikiLinkMatcher()
    parts: List[str] = []
    position = 0
    for link in matcher.iter_matches(source):
        parts.append(source[position:link.start])
        parts.append(f"[{link.label}](/{slugify(link.label)}{MARKDOWN_SUFFIX})")
        position = link.end
    parts.append(source[position:])
    return ''.join(parts)


def resolve_href(href: str, current_path: str) -> str:
    """
    Resolve a markdown href against the web path currently being served.

    Absolute paths, URLs with a scheme or host, and non-markdown hrefs are
    returned unchanged. A current path ending in '/' is treated as a
    directory.
    """
    if not is_markdown_href(href) or href.startswith('/'):
        return href
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return href

    path, sep, fragment = href.partition('#')
    base_directory = posixpath.dirname(quote(current_path or '/', safe='/'))
    resolved = posixpath.normpath(posixpath.join('/', base_directory, path))
    return '/' + resolved.lstrip('/') + sep + fragment


def resolve_relative_links(html: str, current_path: str) -> str:
    """Rewrite relative markdown hrefs in rendered HTML to absolute web paths."""
    matcher = HrefMatcher()
    parts: List[str] = []
    position = 0
    for attribute in matcher.iter_matches(html):
        resolved = resolve_href(attribute.value, current_path)
        if resolved == attribute.value:
            continue
        parts.append(html[position:attribute.value_start])
        parts.append(resolved)
        position = attribute.value_end
    parts.append(html[position:])
    return ''.join(parts)
