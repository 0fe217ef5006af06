"""
HTML listing for directories without an index.html.
"""

import html
import os
import posixpath
from typing import Iterable
from urllib.parse import quote


def entry_href(directory_path: str, entry: str) -> str:
    """Link target for an entry: directory_path/entry, URL-quoted from the raw filesystem bytes."""
    base = directory_path if directory_path.startswith("/") else "/" + directory_path
    return quote(os.fsencode(posixpath.join(base, entry)))


def display_name(entry: str) -> str:
    """Printable form of a name; bytes that are not UTF-8 become U+FFFD."""
    return os.fsencode(entry).decode("utf-8", "replace")


def render_listing(directory_path: str, entries: Iterable[str]) -> str:
    """Minimal <ul> of links in the order given; no sorting is applied."""
    items = "".join(
        f'<li><a href="{html.escape(entry_href(directory_path, name))}">{html.escape(display_name(name))}</a></li>'
        for name in entries
    )
    return f"<h1>Directory</h1><ul>{items}</ul>"
