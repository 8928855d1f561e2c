"""
mdserve - serve a directory of markdown documents as rendered HTML.

Example:
    >>> from mdserve import ServeContext, create_app
    >>> app = create_app(ServeContext(root_directory="/path/to/docs"))
"""

from .config import Config, ServeContext
from .directory import DirectoryIndex, MarkdownFile, scan_markdown_files
from .errors import (
    BindError,
    MdserveError,
    PathNotFound,
    RenderError,
    RequestFault,
    ScanError,
)
from .links import expand_wiki_links, resolve_relative_links
from .network import bind_listener
from .paths import resolve_target
from .routes import create_app
from .toc import generate_toc_markdown

__version__ = "0.1.0"

__all__ = [
    "BindError",
    "Config",
    "DirectoryIndex",
    "MarkdownFile",
    "MdserveError",
    "PathNotFound",
    "RenderError",
    "RequestFault",
    "ScanError",
    "ServeContext",
    "bind_listener",
    "create_app",
    "expand_wiki_links",
    "generate_toc_markdown",
    "resolve_relative_links",
    "resolve_target",
    "scan_markdown_files",
]
