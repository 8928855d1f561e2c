"""
Table of contents generation for scanned directories.

The TOC is plain markdown and goes through the same renderer as any
authored document.
"""

from itertools import groupby
from typing import List
from urllib.parse import quote

from .directory import DirectoryIndex, MarkdownFile

TOC_TITLE = 'Directory Contents'
MARKDOWN_SPECIAL = frozenset('\\`*_[]<>#')


def _escape_text(text: str) -> str:
    return ''.join('\\' + char if char in MARKDOWN_SPECIAL else char for char in text)


def _link(md_file: MarkdownFile, link_prefix: str) -> str:
    # "#", "?", ":" and "%" are legal in file names but not in a bare href;
    # "./" keeps a relative "x:y.md" from reading as a URL scheme
    return quote(link_prefix or './', safe='/') + quote(md_file.relative_path, safe='/')


def generate_toc_markdown(index: DirectoryIndex, link_prefix: str = '/') -> str:
    """
    Generate markdown content listing every file in a directory index.

    Args:
        index: Scan result to list
        link_prefix: Prepended to each file's relative path. The default
            gives web-absolute links for the serving root; pass '' to get
            links relative to the listed directory. Paths are
            percent-encoded.

    Returns:
        Markdown text
    """
    lines: List[str] = [
        f"# 📁 {TOC_TITLE}",
        "",
        f"**Base Path:** `{index.root_path}`",
        "",
        f"**Total Markdown Files:** {len(index.files)}",
        "",
        "---",
        "",
    ]

    if index.root_readme is not None:
        readme = index.root_readme
        lines += [
            "## 📄 Main Documentation",
            "",
            f"- [**{_escape_text(readme.title)}**]({_link(readme, link_prefix)}) (Project README)",
            "",
        ]

    lines += ["## 📚 All Markdown Files", ""]

    # files are already ordered by directory, so grouping keeps that order
    for directory, files in groupby(index.files, key=lambda f: f.directory):
        if directory:
            lines.append(f"### 📂 {_escape_text(directory)}")
        else:
            lines.append("### 📂 Root Directory")
        lines.append("")

        for md_file in files:
            if md_file.is_index:
                lines.append(f"- 📖 [**{_escape_text(md_file.title)}**]({_link(md_file, link_prefix)})")
            else:
                lines.append(f"- 📄 [{_escape_text(md_file.title)}]({_link(md_file, link_prefix)})")
        lines.append("")

    if not index.files:
        lines += ["_No markdown files found._", ""]

    lines += [
        "---",
        "",
        "## 🔍 Navigation Tips",
        "",
        "- Click any file name to view its rendered content",
        "- Use your browser's back button to return to this index",
        "- Files are organized by directory structure",
        "- **Bold** entries are README or index files",
        "",
    ]
    return "\n".join(lines)
