"""
Command-line entry point.
Settings missing from the command line are asked for interactively, then the
server runs until Ctrl+C.
"""

import argparse
import logging
import socket
import ssl
import sys
import webbrowser
from pathlib import Path

from pydantic import ValidationError

from hoxy.config import DEFAULT_PORT, DEFAULT_PROTOCOL, ServerConfig
from hoxy.api.server import TransportBindError, run_server

logger = logging.getLogger("hoxy")

EXAMPLE = "hoxy --port 3000 --live-reload enable --https --cors enable --spa disable"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoxy",
        description="Hoxy - static HTTP server for local development",
        epilog=f"Example: {EXAMPLE}",
    )
    parser.add_argument("--port", "-port", type=int, help=f"port to listen on (default {DEFAULT_PORT})")
    proto = parser.add_mutually_exclusive_group()
    proto.add_argument("--http", "-http", dest="protocol", action="store_const", const="http", help="force HTTP")
    proto.add_argument("--https", "-https", dest="protocol", action="store_const", const="https",
                       help="force HTTPS with a throwaway self-signed certificate")
    for flag, label in (("live-reload", "live reload"), ("cors", "CORS headers"), ("spa", "SPA fallback")):
        parser.add_argument(f"--{flag}", f"-{flag}", choices=["enable", "disable"], help=f"enable {label}")
    parser.add_argument("--root", type=Path, default=None, help="directory to serve (default: current directory)")
    parser.add_argument("--no-open", dest="open_browser", action="store_false", help="do not open a browser")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser


def ask(question: str, interactive: bool) -> str:
    """Prompt on stdin; an empty answer when there is no terminal to ask on."""
    if not interactive:
        return ""
    try:
        return input(question).strip()
    except EOFError:
        return ""


def parse_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PORT
    return port if port > 0 else DEFAULT_PORT


def parse_protocol(value: str) -> str:
    """Only an explicit https answer turns TLS on."""
    return "https" if value.strip().lower() == "https" else DEFAULT_PROTOCOL


def _flag(value: str | None, question: str, interactive: bool) -> bool:
    if value is not None:
        return value == "enable"
    return ask(question, interactive).lower() == "y"


def resolve_config(args: argparse.Namespace, interactive: bool | None = None) -> ServerConfig:
    """Merge command-line flags with prompt answers into a ServerConfig."""
    if interactive is None:
        interactive = sys.stdin.isatty()

    port = args.port if args.port is not None else parse_port(ask("Enter port: ", interactive))
    protocol = args.protocol or parse_protocol(ask("HTTP or HTTPS: ", interactive))

    live_reload = _flag(args.live_reload, "Use live reload (y/n): ", interactive)
    cors = _flag(args.cors, "Use CORS (y/n): ", interactive)
    spa = _flag(args.spa, "Use SPA fallback (y/n): ", interactive)

    return ServerConfig(
        port=port,
        protocol=protocol,
        live_reload=live_reload,
        cors=cors,
        spa=spa,
        root=args.root if args.root is not None else Path.cwd(),
        open_browser=args.open_browser,
    )


def get_lan_ip() -> str:
    """Address other machines on the LAN would use; 127.0.0.1 when offline."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        try:
            # No packet is sent; connect() only picks the outbound interface
            s.connect(("10.255.255.255", 1))
            return s.getsockname()[0]
        except OSError:
            return "127.0.0.1"


def banner(lines: list[str], padding: int = 2) -> str:
    width = max(len(line) for line in lines) + padding * 2
    out = ["╔" + "═" * width + "╗"]
    for line in lines:
        spaces = width - len(line)
        left = spaces // 2
        out.append("║" + " " * left + line + " " * (spaces - left) + "║")
    out.append("╚" + "═" * width + "╝")
    return "\n".join(out)


def startup_lines(config: ServerConfig) -> list[str]:
    return [
        "Server Launched",
        f"- Local : {config.local_url()}",
        f"- Network : {config.protocol}://{get_lan_ip()}:{config.port}",
        f"- Root : {config.root}",
        "- Press Ctrl+C to stop the server",
    ]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s" if not args.verbose else "%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = resolve_config(args)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2

    def on_started() -> None:
        print(banner(startup_lines(config)), flush=True)
        if config.open_browser:
            webbrowser.open(config.local_url())

    try:
        run_server(config, on_started=on_started)
    except TransportBindError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ssl.SSLError as e:
        print(f"Error: TLS certificate could not be loaded: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
