"""
Resolve the user supplied path into a serving root and an initial file.
"""

import os
from typing import Tuple

from .errors import PathNotFound

README_FILENAME = 'README.md'


def resolve_target(path: str) -> Tuple[str, str]:
    """
    Work out which directory to serve and which file to open first.

    Args:
        path: File or directory given on the command line. It may not exist,
            in which case its parent is served and the name is kept as the
            initial file (the browser gets a 404 until it is created).

    Returns:
        Tuple of (absolute root directory, initial file relative to the root
        or an empty string)

    Raises:
        PathNotFound: If neither the path nor its parent directory exists.
    """
    target = os.path.abspath(path or '.')

    if not os.path.exists(target):
        parent = os.path.dirname(target)
        if not os.path.isdir(parent):
            raise PathNotFound(f"Path '{path}' does not exist and neither does its parent '{parent}'")
        return os.path.realpath(parent), os.path.basename(target)

    if os.path.isdir(target):
        root = os.path.realpath(target)
        initial = README_FILENAME if os.path.isfile(os.path.join(root, README_FILENAME)) else ''
        return root, initial

    return os.path.realpath(os.path.dirname(target)), os.path.basename(target)
