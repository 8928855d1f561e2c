"""Tests for request classification and the HTTP surface."""

import os

from mdserve import ServeContext, create_app
from mdserve.errors import RenderError, ScanError
from mdserve.reload import ReloadNotifier
from mdserve.routes import (
    AssetRequest,
    DirectoryRequest,
    MarkdownFileRequest,
    NotFound,
    StaticFileRequest,
    classify_request,
)

from conftest import write_file


class TestClassifyRequest:
    """Tests for classify_request."""

    def test_root(self, tmp_path):
        route = classify_request(str(tmp_path), "/")
        assert route == DirectoryRequest(directory=str(tmp_path), web_path="/", is_root=True)

    def test_empty_path_is_root(self, tmp_path):
        assert isinstance(classify_request(str(tmp_path), ""), DirectoryRequest)

    def test_directory(self, tmp_path):
        (tmp_path / "guide").mkdir()
        route = classify_request(str(tmp_path), "/guide")
        assert isinstance(route, DirectoryRequest)
        assert not route.is_root
        assert route.web_path == "/guide"

    def test_directory_takes_precedence_over_markdown_suffix(self, tmp_path):
        """A directory named like a markdown file is listed, not rendered."""
        write_file(tmp_path, "notes.md/inner.md")
        route = classify_request(str(tmp_path), "/notes.md")
        assert isinstance(route, DirectoryRequest)

    def test_markdown_file(self, tmp_path):
        write_file(tmp_path, "docs/GUIDE.MD")
        route = classify_request(str(tmp_path), "/docs/GUIDE.MD")
        assert route == MarkdownFileRequest(file_path=os.path.join(str(tmp_path), "docs", "GUIDE.MD"),
                                            web_path="/docs/GUIDE.MD")

    def test_static_file(self, tmp_path):
        write_file(tmp_path, "img/logo.png", b"\x89PNG")
        route = classify_request(str(tmp_path), "/img/logo.png")
        assert isinstance(route, StaticFileRequest)

    def test_bundled_asset(self, tmp_path):
        route = classify_request(str(tmp_path), "/static/css/markdown.css")
        assert route == AssetRequest(asset_path="css/markdown.css")

    def test_user_file_shadows_bundled_asset(self, tmp_path):
        write_file(tmp_path, "static/css/markdown.css", "body {}")
        route = classify_request(str(tmp_path), "/static/css/markdown.css")
        assert isinstance(route, StaticFileRequest)

    def test_missing(self, tmp_path):
        assert classify_request(str(tmp_path), "/missing.md") == NotFound(web_path="/missing.md")

    def test_traversal_outside_root(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        write_file(tmp_path, "secret.md")
        assert isinstance(classify_request(str(root), "/../secret.md"), NotFound)


class TestDirectoryPages:
    """Tests for TOC responses."""

    def test_root_lists_documents(self, client):
        """The root TOC shows the README prominently and groups files by directory."""
        response = client.get("/")
        assert response.status_code == 200
        body = response.get_data(as_text=True)

        main_section = body.index("Main Documentation")
        notes_section = body.index("📂 notes")
        assert body.index('href="/README.md"', main_section) < notes_section
        assert body.index('href="/notes/design.md"') > notes_section
        assert "<title>Directory Contents</title>" in body

    def test_subdirectory_links_resolve_from_directory(self, client):
        for path in ("/notes", "/notes/"):
            response = client.get(path)
            assert response.status_code == 200
            body = response.get_data(as_text=True)
            assert 'href="/notes/design.md"' in body
            assert 'href="design.md"' not in body
            assert 'href="./design.md"' not in body

    def test_file_names_with_url_characters(self, client, docs_root):
        """TOC links to files named with '#' or ':' reach those files."""
        write_file(docs_root, "c#.md", "# C Sharp")
        write_file(docs_root, "sub/c#.md", "# Nested C Sharp")
        write_file(docs_root, "sub/x:y.md", "# Ratio")

        root_body = client.get("/").get_data(as_text=True)
        assert 'href="/c%23.md"' in root_body
        assert 'href="/sub/x%3Ay.md"' in root_body

        sub_body = client.get("/sub/").get_data(as_text=True)
        assert 'href="/sub/c%23.md"' in sub_body
        assert 'href="/sub/x%3Ay.md"' in sub_body

        response = client.get("/c%23.md")
        assert response.status_code == 200
        assert "<h1>C Sharp</h1>" in response.get_data(as_text=True)
        assert client.get("/sub/x%3Ay.md").status_code == 200

    def test_directory_named_like_markdown(self, client, docs_root):
        write_file(docs_root, "archive.md/old.md", "# Old")
        response = client.get("/archive.md")
        assert response.status_code == 200
        assert 'href="/archive.md/old.md"' in response.get_data(as_text=True)


class TestMarkdownPages:
    """Tests for rendered markdown responses."""

    def test_renders_document(self, client):
        response = client.get("/README.md")
        assert response.status_code == 200
        assert response.mimetype == "text/html"
        body = response.get_data(as_text=True)
        assert "<title>Project</title>" in body
        assert "<h1>Project</h1>" in body

    def test_relative_and_wiki_links(self, client):
        body = client.get("/README.md").get_data(as_text=True)
        assert 'href="/notes/design.md"' in body
        assert 'href="/getting-started.md"' in body

    def test_parent_links_in_nested_document(self, client):
        body = client.get("/notes/design.md").get_data(as_text=True)
        assert 'href="/README.md#top"' in body

    def test_case_insensitive_suffix(self, client, docs_root):
        write_file(docs_root, "LOUD.MD", "# Loud")
        response = client.get("/LOUD.MD")
        assert response.status_code == 200
        assert "<h1>Loud</h1>" in response.get_data(as_text=True)

    def test_invalid_utf8_is_server_error(self, client, docs_root):
        write_file(docs_root, "broken.md", b"\xff\xfe\xfa")
        assert client.get("/broken.md").status_code == 500

    def test_missing_document(self, client):
        assert client.get("/missing.md").status_code == 404


class TestStaticFiles:
    """Tests for raw files and bundled assets."""

    def test_user_file(self, client, docs_root):
        write_file(docs_root, "img/logo.png", b"\x89PNG\r\n")
        response = client.get("/img/logo.png")
        assert response.status_code == 200
        assert response.mimetype == "image/png"
        assert response.data == b"\x89PNG\r\n"
        response.close()

    def test_bundled_stylesheet(self, client):
        response = client.get("/static/css/markdown.css")
        assert response.status_code == 200
        assert response.mimetype == "text/css"
        response.close()

    def test_user_file_shadows_bundle(self, client, docs_root):
        write_file(docs_root, "static/css/markdown.css", "/* mine */")
        response = client.get("/static/css/markdown.css")
        assert response.data == b"/* mine */"
        response.close()

    def test_missing_asset(self, client):
        assert client.get("/static/css/nope.css").status_code == 404


class FailingRenderer:
    """Renderer stand-in that fails on demand."""

    def __init__(self, error):
        self.error = error

    def render(self, content):
        raise self.error


class TestErrorHandling:
    """Failures stay inside the request that caused them."""

    def test_render_error_is_500(self, context):
        app = create_app(context, renderer=FailingRenderer(RenderError("boom")))
        assert app.test_client().get("/README.md").status_code == 500

    def test_unexpected_error_is_500_and_server_keeps_serving(self, context):
        app = create_app(context, renderer=FailingRenderer(RuntimeError("unexpected")))
        client = app.test_client()
        assert client.get("/").status_code == 500
        assert client.get("/README.md").status_code == 500
        assert client.get("/static/css/markdown.css").status_code == 200

    def test_scan_error_is_500(self, tmp_path, monkeypatch):
        def failing_scan(root_path):
            raise ScanError("cannot read")

        monkeypatch.setattr("mdserve.routes.scan_markdown_files", failing_scan)
        app = create_app(ServeContext(root_directory=str(tmp_path)))
        assert app.test_client().get("/").status_code == 500


class TestLiveReload:
    """Tests for the reload endpoint wiring."""

    def test_disabled_without_notifier(self, client):
        assert client.get("/__reload__").status_code == 404

    def test_pages_include_reload_script(self, docs_root):
        context = ServeContext(root_directory=str(docs_root), live_reload=True)
        app = create_app(context, notifier=ReloadNotifier())
        body = app.test_client().get("/README.md").get_data(as_text=True)
        assert "/static/js/reload.js" in body

    def test_event_stream(self, docs_root):
        notifier = ReloadNotifier()
        context = ServeContext(root_directory=str(docs_root), live_reload=True)
        app = create_app(context, notifier=notifier)
        response = app.test_client().get("/__reload__", buffered=False)
        assert response.mimetype == "text/event-stream"
        chunks = iter(response.response)
        assert next(chunks) == b"retry: 1000\n\n"
        notifier.notify()
        assert next(chunks) == b"data: reload\n\n"
        notifier.close()
        response.close()
