"""
Transport bootstrap: uvicorn over HTTP or HTTPS around the Hoxy app.
"""

import logging
import socket
import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import Callable

import uvicorn

from hoxy.config import ServerConfig
from hoxy.api.main import create_app
from hoxy.api.tls import generate_self_signed

logger = logging.getLogger(__name__)


class TransportBindError(RuntimeError):
    """The configured address cannot be bound. Fatal: there is no fallback port."""


def check_port_available(host: str, port: int) -> None:
    """Bind and release host:port once so a busy port fails before uvicorn starts."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, port))
        except OSError as e:
            raise TransportBindError(f"Cannot listen on {host}:{port}: {e.strerror or e}") from e


class HoxyServer(uvicorn.Server):
    """uvicorn.Server that calls on_started once the sockets are listening."""

    def __init__(self, config: uvicorn.Config, on_started: Callable[[], None] | None = None):
        super().__init__(config)
        self.on_started = on_started

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started and self.on_started is not None:
            self.on_started()


def build_uvicorn_config(config: ServerConfig, ssl_files: tuple[Path, Path] | None = None) -> uvicorn.Config:
    ssl_kwargs = {}
    if ssl_files is not None:
        keyfile, certfile = ssl_files
        ssl_kwargs = {"ssl_keyfile": str(keyfile), "ssl_certfile": str(certfile)}
    return uvicorn.Config(
        create_app(config),
        host=config.host,
        port=config.port,
        access_log=False,
        log_config=None,
        **ssl_kwargs,
    )


def run_server(config: ServerConfig, on_started: Callable[[], None] | None = None) -> None:
    """
    Serve until interrupted.
    Raises TransportBindError when the port is taken, ssl.SSLError for unusable TLS material.
    """
    check_port_available(config.host, config.port)

    with ExitStack() as stack:
        ssl_files = None
        if config.is_https:
            tls_dir = Path(stack.enter_context(tempfile.TemporaryDirectory(prefix="hoxy-tls-")))
            ssl_files = generate_self_signed().write_to(tls_dir)

        server = HoxyServer(build_uvicorn_config(config, ssl_files), on_started=on_started)
        logger.debug("Starting %s server on %s:%d for %s", config.protocol, config.host, config.port, config.root)
        server.run()
