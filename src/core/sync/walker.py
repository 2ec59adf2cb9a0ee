"""
Local filesystem side of a sync: finding files and naming them.

- walk: every regular file below a root, as absolute paths
- to_key: absolute path -> storage key relative to the root
- content_type: file extension -> MIME type

Key derivation is string manipulation, not a path-relationship query,
so to_key validates that the path really is under the root.
"""

import logging
import mimetypes
import os

from .errors import InvalidPathError, WalkError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Built-in table only: MimeTypes() without filenames ignores the host's
# mime.types files, so results match across machines.
_BUILTIN_TYPES = mimetypes.MimeTypes()

# Common static-site assets whose built-in mapping is missing or outdated.
_CONTENT_TYPE_OVERRIDES = {
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".map": "application/json",
    ".json": "application/json",
    ".webmanifest": "application/manifest+json",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".wasm": "application/wasm",
    ".gz": "application/gzip",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
}


def walk(root_dir: str) -> list[str]:
    """
    Recursively list every regular file under root_dir.

    Returns absolute paths in directory-listing order. Symlinks are
    followed; entries that are neither files nor directories are skipped.
    Raises WalkError if root_dir or any subdirectory can't be read.
    """
    root = os.path.abspath(root_dir)
    files: list[str] = []
    _walk_into(root, files)

    logger.debug("Walked directory", extra={"root": root, "file_count": len(files)})

    return files


def _walk_into(directory: str, files: list[str]) -> None:
    try:
        with os.scandir(directory) as entries:
            children = list(entries)
    except OSError as e:
        raise WalkError(directory, e) from e

    for entry in children:
        try:
            if entry.is_dir():
                _walk_into(entry.path, files)
            elif entry.is_file():
                files.append(entry.path)
        except OSError as e:
            raise WalkError(entry.path, e) from e


def to_key(absolute_path: str, root_dir: str) -> str:
    """
    Convert a file path into its storage key.

    The root prefix and one separator are stripped, and every path
    separator becomes "/". Raises InvalidPathError when the path is not
    under root_dir.
    """
    separators = _separators()

    root = root_dir.rstrip("".join(separators)) or root_dir[:1]
    if not root or not absolute_path.startswith(root):
        raise InvalidPathError(absolute_path, root_dir)

    relative = absolute_path[len(root):]
    if root not in separators:
        # "/srv/dist" must not claim "/srv/dist-old/a.txt"
        if not relative or relative[0] not in separators:
            raise InvalidPathError(absolute_path, root_dir)
        relative = relative[1:]

    key = relative
    for sep in separators:
        key = key.replace(sep, "/")
    key = key.lstrip("/")

    if not key:
        raise InvalidPathError(absolute_path, root_dir)

    return key


def _separators() -> set[str]:
    separators = {os.sep, "\\"}
    if os.altsep:
        separators.add(os.altsep)
    return separators


def content_type(path: str) -> str:
    """MIME type for a file, by extension. Unknown extensions get octet-stream."""
    extension = os.path.splitext(path)[1].lower()
    if not extension:
        return DEFAULT_CONTENT_TYPE

    mime = _CONTENT_TYPE_OVERRIDES.get(extension)
    if mime is None:
        mime = _BUILTIN_TYPES.types_map[True].get(extension)
    if mime is None:
        mime = _BUILTIN_TYPES.types_map[False].get(extension)
    if mime is None:
        return DEFAULT_CONTENT_TYPE

    # drop parameters such as "; charset=utf-8"
    return mime.split(";")[0].strip()
