"""
Shared fixtures: a small site tree under tmp_path and a config factory.
"""

import pytest

from hoxy.config import ServerConfig


@pytest.fixture
def site(tmp_path):
    """
    tmp_path/
      secret.txt            (outside the served root)
      www/
        index.html
        app.js
        style.CSS
        logo.png
        docs/index.html
        assets/a.txt, assets/b.txt, assets/nested/
    """
    (tmp_path / "secret.txt").write_text("top secret")
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"<html><body>Hi</body></html>")
    (root / "app.js").write_bytes(b"console.log('hi');\n")
    (root / "style.CSS").write_bytes(b"body { color: red; }")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<body>Docs</body>")
    (root / "assets").mkdir()
    (root / "assets" / "a.txt").write_text("a")
    (root / "assets" / "b.txt").write_text("b")
    (root / "assets" / "nested").mkdir()
    return root


@pytest.fixture
def make_config(site):
    def _make(**overrides) -> ServerConfig:
        values = {"root": site, "open_browser": False}
        values.update(overrides)
        return ServerConfig(**values)
    return _make
