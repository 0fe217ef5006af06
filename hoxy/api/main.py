"""
FastAPI application for Hoxy.
One catch-all route serves the root directory; when live reload is on, a
WebSocket endpoint on the same host/port feeds the reload channel.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import Response

from hoxy import __version__
from hoxy.config import ServerConfig
from hoxy.engine.content import ServedContent, file_content, listing_content
from hoxy.engine.content_types import extension_of
from hoxy.engine.events import RequestLogEvent, log_request
from hoxy.engine.livereload import LiveReloadChannel
from hoxy.engine.resolver import FilesystemError, resolve
from hoxy.engine.targets import DirectoryListing, NotFound, target_to_dict

logger = logging.getLogger(__name__)

# The method never changes resolution; every one of these gets the same answer.
HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

NOT_FOUND_BODY = b"404 Not Found"
SERVER_ERROR_BODY = b"500 Internal Server Error"


@dataclass
class ServerContext:
    """Process-wide state handed to the handlers: immutable config plus the reload channel."""
    config: ServerConfig
    channel: LiveReloadChannel | None = None


def _plain_response(status_code: int, body: bytes) -> Response:
    return Response(content=body, status_code=status_code, headers={"content-type": "text/plain"})


def _content_response(served: ServedContent) -> Response:
    # content-type goes in as a raw header so no charset parameter gets appended
    headers = {"content-type": served.content_type, **served.headers}
    return Response(content=served.body, status_code=200, headers=headers)


def create_app(config: ServerConfig) -> FastAPI:
    """Build the application for one ServerConfig."""
    context = ServerContext(
        config=config,
        channel=LiveReloadChannel() if config.live_reload else None,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        stop_event = asyncio.Event()
        watch_task = None
        if context.channel is not None:
            watch_task = asyncio.create_task(context.channel.watch(config.root, stop_event=stop_event))
        try:
            yield
        finally:
            stop_event.set()
            if watch_task is not None:
                watch_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watch_task

    app = FastAPI(
        title="Hoxy",
        description="Local development static-content server",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.context = context

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Log the traceback and answer 500 instead of a half-written response."""
        logger.error("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        response = _plain_response(500, SERVER_ERROR_BODY)
        started = getattr(request.state, "started", None)
        elapsed_ms = int((time.perf_counter() - started) * 1000) if started is not None else 0
        path = request.scope["path"]
        log_request(RequestLogEvent(request.method, path, 500, len(response.body), elapsed_ms, extension_of(path)))
        return response

    if context.channel is not None:
        channel = context.channel

        @app.websocket("/{socket_path:path}")
        async def live_reload_socket(websocket: WebSocket):
            """Register the client and ignore whatever it sends until it goes away."""
            await websocket.accept()
            client = channel.register(websocket)
            try:
                while True:
                    message = await websocket.receive()
                    if message["type"] == "websocket.disconnect":
                        break
            finally:
                channel.unregister(client)

    @app.api_route("/{request_path:path}", methods=HTTP_METHODS, include_in_schema=False)
    async def serve_path(request: Request):
        started = time.perf_counter()
        request.state.started = started
        method = request.method
        path = request.scope["path"]

        def finish(response: Response, extension: str) -> Response:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            log_request(RequestLogEvent(method, path, response.status_code, len(response.body), elapsed_ms, extension))
            return response

        try:
            target = resolve(config.root, path, config.spa)
            logger.debug("Resolved %s -> %s", path, target_to_dict(target))

            if isinstance(target, NotFound):
                return finish(_plain_response(404, NOT_FOUND_BODY), "")
            if isinstance(target, DirectoryListing):
                served = listing_content(target, config)
            else:
                served = file_content(target, config)
        except FilesystemError as e:
            logger.error("Filesystem error serving %s: %s", path, e)
            return finish(_plain_response(500, SERVER_ERROR_BODY), extension_of(path))

        return finish(_content_response(served), served.extension)

    return app
