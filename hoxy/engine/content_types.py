"""
Content-type inference by file extension.
Only the three types the dev server cares about are known; everything else is opaque bytes.
"""

from pathlib import PurePath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
}


def extension_of(path: str | PurePath) -> str:
    """Lower-cased extension including the dot, '' when there is none."""
    return PurePath(path).suffix.lower()


def resolve_content_type(path: str | PurePath) -> str:
    return CONTENT_TYPES.get(extension_of(path), DEFAULT_CONTENT_TYPE)


def is_html(content_type: str) -> bool:
    return content_type == CONTENT_TYPES[".html"]
