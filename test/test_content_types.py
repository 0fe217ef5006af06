"""
Extension to MIME type mapping.
"""

import pytest

from hoxy.engine.content_types import DEFAULT_CONTENT_TYPE, extension_of, is_html, resolve_content_type


@pytest.mark.parametrize("name, expected", [
    ("index.html", "text/html"),
    ("INDEX.HTML", "text/html"),
    ("style.css", "text/css"),
    ("style.CsS", "text/css"),
    ("app.js", "text/javascript"),
    ("logo.png", DEFAULT_CONTENT_TYPE),
    ("page.htm", DEFAULT_CONTENT_TYPE),
    ("README", DEFAULT_CONTENT_TYPE),
    ("archive.tar.gz", DEFAULT_CONTENT_TYPE),
])
def test_resolve_content_type(name, expected):
    assert resolve_content_type(name) == expected


def test_no_charset_parameter():
    assert ";" not in resolve_content_type("index.html")


def test_extension_of_is_lowercased():
    assert extension_of("/a/b/App.JS") == ".js"
    assert extension_of("Makefile") == ""


def test_is_html():
    assert is_html("text/html")
    assert not is_html("text/css")
