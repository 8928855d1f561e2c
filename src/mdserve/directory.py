"""
Directory scanning for markdown files.

A scan walks the tree below a root, skipping hidden and vendored
directories, and returns an immutable, deterministically ordered index.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ScanError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = '.md'
INDEX_FILENAMES = ('readme.md', 'index.md')
IGNORED_DIRECTORIES = frozenset({'node_modules', 'vendor', '__pycache__'})


@dataclass(frozen=True)
class MarkdownFile:
    """A markdown file found during a directory scan."""
    relative_path: str  # forward slashes, relative to the scanned root
    title: str
    absolute_path: str
    is_index: bool
    directory_depth: int

    @property
    def directory(self) -> str:
        """Forward-slash directory of the file, '' for the scan root."""
        head, _, _ = self.relative_path.rpartition('/')
        return head


@dataclass(frozen=True)
class DirectoryIndex:
    """All markdown files below a root, in display order."""
    root_path: str
    files: Tuple[MarkdownFile, ...]
    root_readme: Optional[MarkdownFile] = None

    @property
    def has_root_readme(self) -> bool:
        return self.root_readme is not None


def is_markdown_name(name: str) -> bool:
    return name.lower().endswith(MARKDOWN_SUFFIX)


def is_index_name(name: str) -> bool:
    return name.lower() in INDEX_FILENAMES


def _is_ignored_directory(name: str) -> bool:
    return name.startswith('.') or name in IGNORED_DIRECTORIES


def _sort_key(md_file: MarkdownFile):
    # Root files first, then directories alphabetically; index files lead
    # their directory, the rest follow by title.
    directory = md_file.directory
    return (directory != '', directory, not md_file.is_index, md_file.title.lower(), md_file.relative_path)


def _raise_scan_error(error: OSError):
    raise ScanError(f"Error scanning directory: {error}") from error


def scan_markdown_files(root_path: str) -> DirectoryIndex:
    """
    Recursively collect markdown files below a directory.

    Args:
        root_path: Directory to scan

    Returns:
        DirectoryIndex with files sorted by directory, index files first

    Raises:
        ScanError: If any part of the tree cannot be read. No partial index
            is returned.
    """
    root_path = os.path.abspath(root_path)
    if not os.path.isdir(root_path):
        raise ScanError(f"Error scanning directory: '{root_path}' is not a directory")

    files = []
    try:
        for current, dirnames, filenames in os.walk(root_path, onerror=_raise_scan_error):
            dirnames[:] = [name for name in dirnames if not _is_ignored_directory(name)]

            for filename in filenames:
                if not is_markdown_name(filename):
                    continue

                full_path = os.path.join(current, filename)
                if not os.path.isfile(full_path):
                    continue

                relative_path = os.path.relpath(full_path, root_path).replace(os.sep, '/')
                files.append(MarkdownFile(
                    relative_path=relative_path,
                    title=os.path.splitext(filename)[0],
                    absolute_path=full_path,
                    is_index=is_index_name(filename),
                    directory_depth=relative_path.count('/'),
                ))
    except OSError as e:
        raise ScanError(f"Error scanning directory: {e}") from e

    files.sort(key=_sort_key)
    logger.debug(f"Found {len(files)} markdown files in {root_path}")

    return DirectoryIndex(
        root_path=root_path,
        files=tuple(files),
        root_readme=_find_root_readme(files),
    )


def _find_root_readme(files) -> Optional[MarkdownFile]:
    root_index_files = [f for f in files if f.is_index and f.directory_depth == 0]
    for md_file in root_index_files:
        if md_file.relative_path.lower() == 'readme.md':
            return md_file
    return root_index_files[0] if root_index_files else None
