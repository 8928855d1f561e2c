#!/usr/bin/env python3
"""
Request routing for the documentation server.

Every request path is classified into exactly one route before anything is
read or rendered:

- DirectoryRequest: "/" or an existing directory, answered with a TOC
- MarkdownFileRequest: an existing ``*.md`` file, rendered to HTML
- StaticFileRequest: any other existing file, sent as-is
- AssetRequest: ``/static/...`` not shadowed by a user file
- NotFound: everything else

Directories are checked before the markdown suffix, so a directory named
``notes.md`` is listed rather than rendered.
"""

import html
import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from flask import Flask, Response, abort, request, send_file, send_from_directory
from werkzeug.exceptions import HTTPException
from werkzeug.security import safe_join

from .config import RELOAD_ENDPOINT, STATIC_PREFIX, ServeContext
from .directory import is_markdown_name, scan_markdown_files
from .errors import RenderError, RequestFault, ScanError
from .links import expand_wiki_links, resolve_relative_links
from .reload import ReloadNotifier
from .renderer import MarkdownRenderer, decode_markdown, get_document_title
from .templates import render_page
from .toc import TOC_TITLE, generate_toc_markdown

logger = logging.getLogger(__name__)

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'static')


@dataclass(frozen=True)
class DirectoryRequest:
    directory: str
    web_path: str
    is_root: bool = False


@dataclass(frozen=True)
class MarkdownFileRequest:
    file_path: str
    web_path: str


@dataclass(frozen=True)
class StaticFileRequest:
    file_path: str


@dataclass(frozen=True)
class AssetRequest:
    asset_path: str


@dataclass(frozen=True)
class NotFound:
    web_path: str


Route = Union[DirectoryRequest, MarkdownFileRequest, StaticFileRequest, AssetRequest, NotFound]


def classify_request(root_directory: str, web_path: str) -> Route:
    """Decide how a URL path under the serving root should be answered."""
    relative = web_path.lstrip('/')
    if not relative:
        return DirectoryRequest(directory=root_directory, web_path='/', is_root=True)

    # safe_join refuses paths that climb out of the root
    local_path = safe_join(root_directory, relative)
    if local_path is not None:
        if os.path.isdir(local_path):
            return DirectoryRequest(directory=local_path, web_path=web_path)
        if os.path.isfile(local_path):
            if is_markdown_name(local_path):
                return MarkdownFileRequest(file_path=local_path, web_path=web_path)
            return StaticFileRequest(file_path=local_path)

    if web_path.startswith(STATIC_PREFIX):
        return AssetRequest(asset_path=web_path[len(STATIC_PREFIX):])

    return NotFound(web_path=web_path)


def read_file(file_path: str) -> bytes:
    with open(file_path, 'rb') as f:
        return f.read()


class DocRoutes:
    """Handles all documentation routes for one serving root."""

    def __init__(self, context: ServeContext, renderer: Optional[MarkdownRenderer] = None,
                 notifier: Optional[ReloadNotifier] = None):
        self.context = context
        self.renderer = renderer or MarkdownRenderer()
        self.notifier = notifier
        self.handlers = {
            DirectoryRequest: self.serve_directory,
            MarkdownFileRequest: self.serve_markdown,
            StaticFileRequest: self.serve_static_file,
            AssetRequest: self.serve_asset,
            NotFound: self.serve_not_found,
        }

    def dispatch(self, url_path: str = '') -> Response:
        """Serve any path below the root."""
        route = classify_request(self.context.root_directory, request.path)
        logger.debug(f"{request.path} -> {type(route).__name__}")
        return self.handlers[type(route)](route)

    def _page(self, content: str, title: str) -> str:
        return render_page(
            content,
            title=title,
            theme=self.context.theme,
            bounding_box=self.context.bounding_box,
            live_reload=self.context.live_reload and self.notifier is not None,
        )

    def serve_directory(self, route: DirectoryRequest) -> str:
        """Generate a table of contents for a directory."""
        index = scan_markdown_files(route.directory)

        if route.is_root:
            toc = generate_toc_markdown(index)
            current_path = '/'
        else:
            # links relative to the listed directory, resolved below
            toc = generate_toc_markdown(index, link_prefix='')
            current_path = route.web_path.rstrip('/') + '/'

        html_content = resolve_relative_links(self.renderer.render(toc), current_path)
        return self._page(html_content, TOC_TITLE)

    def serve_markdown(self, route: MarkdownFileRequest) -> str:
        """Render a markdown file to HTML."""
        try:
            source = decode_markdown(read_file(route.file_path))
        except FileNotFoundError:
            abort(404, f"File {route.web_path} not found")

        html_content = self.renderer.render(expand_wiki_links(source))
        html_content = resolve_relative_links(html_content, route.web_path)
        return self._page(html_content, get_document_title(source, route.file_path))

    def serve_static_file(self, route: StaticFileRequest) -> Response:
        """Send a non-markdown file with a guessed content type."""
        try:
            return send_file(route.file_path)
        except FileNotFoundError:
            abort(404)

    def serve_asset(self, route: AssetRequest) -> Response:
        """Serve bundled CSS and JavaScript."""
        return send_from_directory(ASSETS_DIR, route.asset_path)

    def serve_not_found(self, route: NotFound):
        abort(404, f"{route.web_path} not found")

    def reload_events(self) -> Response:
        """Server-Sent Events stream that fires when files under the root change."""
        if self.notifier is None:
            abort(404)
        return Response(
            self.notifier.stream(),
            mimetype='text/event-stream',
            headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
        )


def create_app(context: ServeContext, notifier: Optional[ReloadNotifier] = None,
               renderer: Optional[MarkdownRenderer] = None) -> Flask:
    """Build the Flask application for a serving root."""
    # /static/ is resolved by the router so user files can shadow the bundle
    app = Flask(__name__, static_folder=None)
    routes = DocRoutes(context, renderer=renderer, notifier=notifier)

    app.add_url_rule(RELOAD_ENDPOINT, 'reload_events', routes.reload_events)
    app.add_url_rule('/', 'index', routes.dispatch)
    app.add_url_rule('/<path:url_path>', 'document', routes.dispatch)

    @app.errorhandler(ScanError)
    @app.errorhandler(RenderError)
    def handle_render_failure(error):
        logger.error(f"Error serving {request.path}: {error}")
        return html.escape(f"Error serving {request.path}: {error}"), 500

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return error
        fault = RequestFault(f"Unexpected error serving {request.path}: {error}")
        logger.exception(str(fault))
        return html.escape(str(fault)), 500

    return app
