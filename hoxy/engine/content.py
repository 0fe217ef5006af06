"""
Response content for resolved targets.
Files are read whole before any header is decided so HTML can be rewritten
to carry the live-reload client script.
"""

from dataclasses import dataclass, field

from hoxy.config import ServerConfig
from hoxy.engine.content_types import extension_of, is_html, resolve_content_type
from hoxy.engine.listing import render_listing
from hoxy.engine.livereload import RELOAD_SCRIPT
from hoxy.engine.resolver import FilesystemError
from hoxy.engine.targets import DirectoryListing, FileTarget

CLOSING_BODY_TAG = b"</body>"

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


@dataclass(frozen=True)
class ServedContent:
    """Everything needed to write a 200 response."""
    body: bytes
    content_type: str
    extension: str
    headers: dict[str, str] = field(default_factory=dict)


def inject_reload_script(body: bytes, script: bytes = RELOAD_SCRIPT) -> bytes:
    """
    Insert script right before the first </body>.
    Without a closing body tag the document is returned untouched.
    """
    index = body.find(CLOSING_BODY_TAG)
    if index == -1:
        return body
    return body[:index] + script + body[index:]


def response_headers(config: ServerConfig) -> dict[str, str]:
    return dict(CORS_HEADERS) if config.cors else {}


def file_content(target: FileTarget, config: ServerConfig) -> ServedContent:
    """Read a File / DirectoryIndex / SPAFallback target into a ServedContent."""
    content_type = resolve_content_type(target.path.name)
    try:
        body = target.path.read_bytes()
    except OSError as e:
        raise FilesystemError(target.path, e) from e

    if config.live_reload and is_html(content_type):
        body = inject_reload_script(body)

    return ServedContent(
        body=body,
        content_type=content_type,
        extension=extension_of(target.path.name),
        headers=response_headers(config),
    )


def listing_content(target: DirectoryListing, config: ServerConfig) -> ServedContent:
    page = render_listing(target.request_path, target.entries)
    return ServedContent(
        body=page.encode("utf-8"),
        content_type="text/html",
        extension=".html",
        headers=response_headers(config),
    )
