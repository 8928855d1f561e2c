"""Shared fixtures for mdserve tests."""

import os

import pytest

from mdserve import ServeContext, create_app


def write_file(root, relative_path, content=""):
    """Create a file (and its parents) below root and return its path."""
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def docs_root(tmp_path):
    """A small documentation tree: a root README and one nested document."""
    root = tmp_path / "docs"
    write_file(root, "README.md", "# Project\n\nSee [the design](notes/design.md) and [[Getting Started]].\n")
    write_file(root, "notes/design.md", "# Design\n\nBack to [the readme](../README.md#top).\n")
    return root


@pytest.fixture
def context(docs_root):
    return ServeContext(root_directory=os.path.realpath(docs_root), initial_file="README.md")


@pytest.fixture
def app(context):
    app = create_app(context)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
